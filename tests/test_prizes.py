import pytest

from luckydraw.errors import NotFoundError, ValidationError
from luckydraw.prizes import Prize, PrizeCatalog, resolve_selected


def test_add_prize_trims_name_and_assigns_id():
    catalog = PrizeCatalog()
    prize = catalog.add("  Gold ", "data:image/png;base64,AA")
    assert prize.name == "Gold"
    assert prize.image_url == "data:image/png;base64,AA"
    assert prize.id
    assert catalog.prizes == (prize,)


@pytest.mark.parametrize("name", ["", "   ", None])
def test_add_prize_requires_a_name(name):
    with pytest.raises(ValidationError):
        PrizeCatalog().add(name)


def test_scenario_d_deleting_selected_prize_clears_selection():
    catalog = PrizeCatalog([Prize(id="p1", name="Gold")], selected_id="p1")
    catalog.delete("p1")
    assert resolve_selected("p1", catalog) is None
    assert catalog.selected_id is None
    assert catalog.selected is None


def test_deleting_another_prize_keeps_selection():
    catalog = PrizeCatalog([Prize(id="p1", name="Gold"), Prize(id="p2", name="Silver")], selected_id="p1")
    catalog.delete("p2")
    assert catalog.selected_id == "p1"
    assert catalog.selected.name == "Gold"


def test_delete_unknown_prize_raises_not_found():
    with pytest.raises(NotFoundError):
        PrizeCatalog().delete("nope")


def test_resolve_selected_is_stable_between_mutations():
    catalog = PrizeCatalog([Prize(id="p1", name="Gold", image_url="img")])
    results = [resolve_selected("p1", catalog) for _ in range(5)]
    assert all(r == Prize(id="p1", name="Gold", image_url="img") for r in results)


def test_resolve_selected_without_selection():
    catalog = PrizeCatalog([Prize(id="p1", name="Gold")])
    assert resolve_selected(None, catalog) is None
    assert resolve_selected("gone", catalog) is None


def test_select_unknown_prize_raises_not_found():
    catalog = PrizeCatalog([Prize(id="p1", name="Gold")])
    with pytest.raises(NotFoundError):
        catalog.select("p9")
    assert catalog.selected_id is None


def test_select_none_clears_selection():
    catalog = PrizeCatalog([Prize(id="p1", name="Gold")], selected_id="p1")
    catalog.select(None)
    assert catalog.selected is None


def test_copy_does_not_share_prizes_or_selection():
    catalog = PrizeCatalog([Prize(id="p1", name="Gold")], selected_id="p1")
    clone = catalog.copy()
    clone.delete("p1")
    assert len(catalog) == 1
    assert catalog.selected_id == "p1"
