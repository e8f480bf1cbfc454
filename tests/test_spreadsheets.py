import io
from datetime import datetime, timezone

import pandas as pd
import pytest

from luckydraw.errors import ParticipantImportError
from luckydraw.ledger import DrawLedger, DrawRecord, PrizeSnapshot
from luckydraw.spreadsheets import HISTORY_COLUMNS, history_workbook, read_participant_names

from conftest import xlsx_bytes


def test_reads_first_column_of_first_sheet():
    data = xlsx_bytes(
        [["Alice", 1], ["  Bob ", 2], [None, 3], ["Carol", None]],
        [["Zed", 1]],
    )
    assert read_participant_names(io.BytesIO(data), "names.xlsx") == ["Alice", "Bob", "Carol"]


def test_first_row_is_a_name_not_a_header():
    data = xlsx_bytes([["Name"], ["Alice"]])
    assert read_participant_names(io.BytesIO(data), "names.xlsx") == ["Name", "Alice"]


def test_numbers_are_read_as_names():
    data = xlsx_bytes([["Alice"], [1001]])
    names = read_participant_names(io.BytesIO(data), "names.xlsx")
    assert names[0] == "Alice"
    assert names[1].startswith("1001")


def test_reads_csv():
    data = b"Alice,x\n  Bob ,y\n,z\nCarol,\n"
    assert read_participant_names(io.BytesIO(data), "NAMES.CSV") == ["Alice", "Bob", "Carol"]


def test_no_names_in_first_column():
    with pytest.raises(ParticipantImportError, match="No names found"):
        read_participant_names(io.BytesIO(b",Bob\n ,Carol\n"), "names.csv")


def test_empty_file_has_no_names():
    with pytest.raises(ParticipantImportError, match="No names found"):
        read_participant_names(io.BytesIO(b""), "names.csv")


def test_corrupt_workbook():
    with pytest.raises(ParticipantImportError, match="invalid or corrupted"):
        read_participant_names(io.BytesIO(b"definitely not a workbook"), "names.xlsx")


@pytest.mark.parametrize("filename", ["names.txt", "names", ""])
def test_unsupported_file_type(filename):
    with pytest.raises(ParticipantImportError, match="Unsupported file type"):
        read_participant_names(io.BytesIO(b"Alice"), filename)


def test_history_workbook_lists_newest_first():
    ledger = DrawLedger([
        DrawRecord("d1", ("Alice",), PrizeSnapshot("Gold"), datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)),
        DrawRecord("d2", ("Bob", "Carol"), None, datetime(2024, 5, 1, 11, 30, tzinfo=timezone.utc)),
    ])

    df = pd.read_excel(io.BytesIO(history_workbook(ledger)), engine="openpyxl", keep_default_na=False)

    assert list(df.columns) == HISTORY_COLUMNS
    assert list(df["Draw ID"]) == ["d2", "d1"]
    assert list(df["Winners"]) == ["Bob, Carol", "Alice"]
    assert list(df["Prize"]) == ["", "Gold"]
    assert list(df["Winner Count"]) == [2, 1]
    assert df["Draw Time"][0] == "2024-05-01 11:30:00"


def test_history_workbook_with_no_draws():
    df = pd.read_excel(io.BytesIO(history_workbook(DrawLedger())), engine="openpyxl")
    assert list(df.columns) == HISTORY_COLUMNS
    assert df.empty
