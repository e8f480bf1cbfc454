"""Reading participant names from spreadsheets and writing the draw history out."""

import io
import logging

import pandas as pd

from . import config
from .errors import ParticipantImportError
from .participants import clean_names

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = ['Draw Time', 'Prize', 'Winners', 'Winner Count', 'Draw ID']


def _extension(filename):
    if not filename or '.' not in filename:
        return ''
    return filename.rsplit('.', 1)[1].lower()


def _read_sheets(data, ext):
    """Return the file's sheets as an ordered {name: DataFrame} mapping, no header row."""
    if ext == 'csv':
        try:
            df = pd.read_csv(io.BytesIO(data), header=None, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            df = pd.DataFrame()
        return {'Sheet1': df}
    return pd.read_excel(io.BytesIO(data), sheet_name=None, header=None, dtype=str, engine='openpyxl')


def read_participant_names(stream, filename):
    """Return the trimmed, non-empty names in column one of the first sheet.

    Every row counts, the first included. Raises ParticipantImportError when
    the file cannot be read, has no sheet, or yields no names.
    """
    ext = _extension(filename)
    if ext not in config.SPREADSHEET_EXTENSIONS:
        raise ParticipantImportError(
            f"Unsupported file type. Please upload one of: {', '.join(sorted(config.SPREADSHEET_EXTENSIONS))}."
        )

    data = stream.read()
    try:
        sheets = _read_sheets(data, ext)
    except Exception as e:
        logger.warning("Could not read spreadsheet %s: %s", filename, e)
        raise ParticipantImportError("The spreadsheet is invalid or corrupted.") from e

    if not sheets:
        raise ParticipantImportError("No worksheet found in the file.")

    first_sheet = next(iter(sheets.values()))
    names = []
    if first_sheet.shape[1] > 0:
        # skip blank cells before trimming
        names = clean_names(v for v in first_sheet.iloc[:, 0] if not pd.isna(v))
    if not names:
        raise ParticipantImportError("No names found in the first column of the first sheet.")

    logger.info("Read %d participant name(s) from %s", len(names), filename)
    return names


def history_workbook(records):
    """Render draw records as an .xlsx workbook, newest draw first."""
    rows = []
    for record in reversed(list(records)):
        rows.append({
            'Draw Time': record.timestamp.strftime('%Y-%m-%d %H:%M:%S'),
            'Prize': record.prize.name if record.prize else '',
            'Winners': ', '.join(record.winners),
            'Winner Count': len(record.winners),
            'Draw ID': record.id,
        })
    df = pd.DataFrame(rows, columns=HISTORY_COLUMNS)

    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name='Draw History')
    return buf.getvalue()
