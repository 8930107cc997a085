import pytest

from e6kiro.exceptions import EmptyInputError, InputError
from e6kiro.query_builder import (
    build_query,
    clamp_quantity,
    parse_quantity,
    parse_tags,
    select_rating,
    strip_prefix,
)
from e6kiro.search.types import Rating


def test_pinned_fixture_safe_with_trailing_number():
    """`3` is token 2 of the remainder, so it is not read as the quantity."""
    query = build_query("!e6 male, canine 3 --safe")

    assert query.tags == ["male", "canine"]
    assert query.tag_set == ["male", "canine", "rating:safe"]
    assert query.rating is Rating.SAFE
    assert query.quantity == 1


def test_quantity_follows_single_tag():
    query = build_query("!e6 wolf 4")

    assert query.tag_set == ["wolf", "rating:explicit"]
    assert query.quantity == 4


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("!e6 a", ["a"]),
        ("!e6 a,b", ["a", "b"]),
        ("!e6 a, b, c d", ["a", " b", "c"]),
        ("!e6 solo 7 --safe", ["solo"]),
        ("!e6 x,y,z,w", ["x", "y", "z", "w"]),
    ],
)
def test_n_segments_give_n_plus_one_tags(raw, expected):
    query = build_query(raw)

    assert query.tags == expected
    assert len(query.tag_set) == len(expected) + 1
    assert query.tag_set[-1] in (Rating.SAFE.value, Rating.EXPLICIT.value)


def test_non_last_segments_are_not_trimmed():
    assert parse_tags("male,  canine , fox") == ["male", "  canine ", "fox"]


def test_last_segment_keeps_first_token_only():
    assert parse_tags("male, canine 3") == ["male", "canine"]


@pytest.mark.parametrize(
    "raw, rating",
    [
        ("!e6 wolf --safe", Rating.SAFE),
        ("!e6 --safe wolf", Rating.SAFE),
        ("!e6 my--safe-tag", Rating.SAFE),
        ("!e6 wolf", Rating.EXPLICIT),
        ("!e6 wolf -safe", Rating.EXPLICIT),
    ],
)
def test_safe_marker_anywhere_selects_safe_rating(raw, rating):
    assert select_rating(raw) is rating
    assert build_query(raw).rating is rating


@pytest.mark.parametrize("raw", ["!e6", "!e6 ", "!e6    "])
def test_empty_command_raises(raw):
    with pytest.raises(EmptyInputError):
        build_query(raw)


def test_empty_input_is_an_input_error():
    assert issubclass(EmptyInputError, InputError)


@pytest.mark.parametrize(
    "remainder, expected",
    [
        ("wolf 4", 4),
        ("wolf", 1),
        ("wolf abc", 1),
        ("wolf -3", 1),
        ("wolf 2.5", 1),
        ("wolf, fox 3", 1),
        ("wolf  3", 1),
        ("wolf 99", 99),
    ],
)
def test_parse_quantity(remainder, expected):
    assert parse_quantity(remainder) == expected


def test_invalid_quantity_is_logged(caplog):
    with caplog.at_level("WARNING"):
        assert parse_quantity("wolf many") == 1
    assert "many" in caplog.text


@pytest.mark.parametrize(
    "quantity, expected",
    [(0, 1), (1, 1), (5, 5), (10, 10), (11, 10), (10_000, 10)],
)
def test_clamp_quantity_stays_in_range(quantity, expected):
    assert clamp_quantity(quantity) == expected
    assert 1 <= clamp_quantity(quantity) <= 10


def test_build_query_does_not_clamp():
    assert build_query("!e6 wolf 50").quantity == 50


def test_strip_prefix_removes_verb_and_one_space():
    assert strip_prefix("!e6 wolf") == "wolf"
    assert strip_prefix("!e6  wolf") == " wolf"
    assert strip_prefix("!e6wolf") == "wolf"
    assert strip_prefix("!find wolf", prefix="!find") == "wolf"
