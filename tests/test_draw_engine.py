import random
from collections import Counter
from itertools import permutations

import pytest

from luckydraw.draw_engine import check_count, draw
from luckydraw.errors import ConfigurationError, ValidationError


def test_draw_returns_requested_count_from_pool():
    pool = [f"P{i}" for i in range(10)]
    rng = random.Random(7)
    for count in range(1, len(pool) + 1):
        winners = draw(pool, count, rng)
        assert len(winners) == count
        assert len(set(winners)) == count
        assert set(winners) <= set(pool)


def test_duplicate_names_are_drawn_as_separate_entries():
    pool = ["Ann", "Ann", "Bob"]
    winners = draw(pool, 3, random.Random(1))
    assert Counter(winners) == Counter(pool)


def test_draw_never_reuses_a_source_position():
    pool = ["Ann", "Ann", "Bob", "Cid"]
    rng = random.Random(11)
    for _ in range(200):
        winners = draw(pool, 3, rng)
        assert not Counter(winners) - Counter(pool)


def test_draw_leaves_pool_untouched():
    pool = ["Alice", "Bob", "Carol"]
    draw(pool, 2, random.Random(2))
    assert pool == ["Alice", "Bob", "Carol"]


def test_same_seed_gives_same_result():
    pool = list("abcdefgh")
    assert draw(pool, 4, random.Random(42)) == draw(pool, 4, random.Random(42))


def test_draw_uses_module_random_by_default():
    random.seed(5)
    first = draw(list("abcdef"), 3)
    random.seed(5)
    assert draw(list("abcdef"), 3) == first


def test_every_name_gets_drawn_over_many_draws():
    pool = ["Alice", "Bob", "Carol"]
    rng = random.Random(2024)
    seen = Counter()
    for _ in range(100):
        winners = draw(pool, 2, rng)
        assert len(set(winners)) == 2
        seen.update(winners)
    assert set(seen) == set(pool)
    assert all(count > 0 for count in seen.values())


def test_every_ordered_selection_shows_up():
    pool = ["Alice", "Bob", "Carol"]
    rng = random.Random(99)
    outcomes = Counter(tuple(draw(pool, 2, rng)) for _ in range(600))
    assert set(outcomes) == set(permutations(pool, 2))


def test_count_below_one_is_rejected():
    with pytest.raises(ValidationError, match="at least 1"):
        draw(["Alice"], 0)


def test_count_above_pool_size_is_rejected():
    with pytest.raises(ValidationError, match=r"cannot exceed .* \(2\)"):
        draw(["Alice", "Bob"], 3)


@pytest.mark.parametrize("count", [True, 1.0, "2", None])
def test_non_integer_count_is_rejected(count):
    with pytest.raises(ValidationError):
        check_count(["Alice", "Bob"], count)


def test_validation_error_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        draw([], 1)
