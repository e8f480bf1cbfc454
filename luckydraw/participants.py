"""Participant list handling and drawable pool resolution."""

from .errors import ExhaustedPoolError


def clean_names(names):
    """Trim every name and drop the ones left empty, keeping order."""
    cleaned = []
    for name in names:
        if name is None:
            continue
        name = str(name).strip()
        if name:
            cleaned.append(name)
    return cleaned


def split_participants(text):
    """Return the names in a newline-separated participants text."""
    if not text:
        return []
    return clean_names(text.splitlines())


def merge_participants(text, imported):
    """Append imported names that are not already in `text`.

    Comparison is exact on the trimmed form. Repeats inside `imported`
    itself are kept, only names already listed are skipped.
    """
    existing = split_participants(text)
    known = set(existing)
    new_names = [name for name in clean_names(imported) if name not in known]
    return "\n".join(existing + new_names)


def resolve_pool(raw_names, history, exclude_past_winners):
    """Return the names eligible for the next draw.

    With `exclude_past_winners` on, any name that appears in the winners of
    any record in `history` is dropped (membership, not a per-name count).
    Raises ExhaustedPoolError when that leaves nobody while participants are
    configured; an empty participant list simply gives an empty pool.
    """
    names = clean_names(raw_names)
    if not exclude_past_winners:
        return names

    past_winners = set()
    for record in history:
        past_winners.update(record.winners)

    pool = [name for name in names if name not in past_winners]
    if names and not pool:
        raise ExhaustedPoolError(
            "All participants have already won. Turn off 'exclude previous winners', "
            "reset the draw history or add new participants."
        )
    return pool
