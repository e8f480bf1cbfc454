import random

from .errors import ValidationError


def check_count(pool, count):
    """Raise ValidationError unless 1 <= count <= len(pool)."""
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError(f"Number of winners must be a whole number, got {count!r}.")
    if count < 1:
        raise ValidationError("Number of winners must be at least 1.")
    if count > len(pool):
        raise ValidationError(
            f"Number of winners ({count}) cannot exceed the number of participants ({len(pool)})."
        )


def draw(pool, count, rng=None):
    """Pick `count` winners from `pool` uniformly at random, without replacement.

    Each pick takes a random index from a shrinking copy of the pool and
    removes it (partial Fisher-Yates), so every ordered selection of `count`
    distinct positions is equally likely. Repeated name strings are separate
    entries and may all be drawn.
    """
    check_count(pool, count)
    rng = rng if rng is not None else random

    remaining = list(pool)
    winners = []
    for _ in range(count):
        index = rng.randrange(len(remaining))
        winners.append(remaining.pop(index))
    return winners
