import pytest

from checkout import (
    COMMON_CHECKOUTS,
    CheckoutPath,
    compute_checkout,
    format_checkout_path,
    is_checkable,
    possible_doubles,
    valid_checkout_doubles,
)
from segments import DOUBLE, INNER_BULL, parse_segment


def labels(path: CheckoutPath) -> list[str]:
    return [d.label for d in path.darts]


def test_every_possible_path_is_valid() -> None:
    for darts_left in (1, 2, 3):
        for score in range(2, 171):
            path = compute_checkout(score, None, darts_left)
            if not path.possible:
                continue
            assert sum(d.points for d in path.darts) == score, (score, darts_left)
            assert 1 <= len(path.darts) <= darts_left, (score, darts_left)
            assert path.darts[-1].is_finishing, (score, darts_left)


@pytest.mark.parametrize("score", [169, 168, 166, 165, 163, 162, 159])
def test_bogey_numbers_are_impossible(score) -> None:
    path = compute_checkout(score, None, 3)
    assert not path.possible
    assert path.darts == ()
    assert not is_checkable(score)


def test_literal_checkouts() -> None:
    assert labels(compute_checkout(170, None, 3)) == ["T20", "T20", "Bull"]
    assert labels(compute_checkout(40, None, 1)) == ["D20"]
    assert labels(compute_checkout(100, None, 2)) == ["T20", "D20"]
    assert labels(compute_checkout(50, None, 1)) == ["Bull"]
    assert compute_checkout(50, None, 1).darts[0].ring == INNER_BULL


def test_chart_entries_add_up() -> None:
    for score, chart in COMMON_CHECKOUTS.items():
        darts = [parse_segment(lb) for lb in chart]
        assert sum(d.points for d in darts) == score, score
        assert darts[-1].is_finishing, score


def test_one_dart_budget_only_allows_direct_finishes() -> None:
    assert not compute_checkout(41, None, 1).possible
    assert not compute_checkout(100, None, 1).possible
    assert labels(compute_checkout(32, None, 1)) == ["D16"]


def test_two_dart_budget_falls_back_to_search() -> None:
    # 99 has no two-dart finish at all
    assert not compute_checkout(99, None, 2).possible
    # The chart uses three darts for 101 but T17, Bull does it in two
    assert labels(compute_checkout(101, None, 2)) == ["T17", "Bull"]
    path = compute_checkout(60, None, 2)
    assert path.possible and len(path.darts) <= 2


def test_preferred_double_honoured() -> None:
    path = compute_checkout(100, 16, 3)
    assert path.possible
    assert path.darts[-1] == parse_segment("D16")
    assert sum(d.points for d in path.darts) == 100


def test_preferred_double_honoured_whenever_reachable() -> None:
    for darts_left in (1, 2, 3):
        for score in range(2, 171):
            for number in valid_checkout_doubles(score, darts_left):
                path = compute_checkout(score, number, darts_left)
                assert path.possible
                assert path.darts[-1].ring == DOUBLE and path.darts[-1].number == number
                assert sum(d.points for d in path.darts) == score


def test_preferred_bull() -> None:
    path = compute_checkout(75, 25, 2)
    assert labels(path) == ["25", "Bull"]


def test_unreachable_preferred_double_uses_chart() -> None:
    # D20 is worth more than 3, so the chart answer stands
    path = compute_checkout(3, 20, 3)
    assert path.possible
    assert labels(path) == ["1", "D1"]


@pytest.mark.parametrize(
    "score,darts,double",
    [(1, 3, None), (171, 3, None), (40, 0, None), (40, 4, None), (40, 3, 21), (40, 3, 0)],
)
def test_contract_violations_raise(score, darts, double) -> None:
    with pytest.raises(ValueError):
        compute_checkout(score, double, darts)


def test_is_checkable_outside_range() -> None:
    assert not is_checkable(1)
    assert not is_checkable(171)
    assert is_checkable(2)


def test_valid_checkout_doubles() -> None:
    assert valid_checkout_doubles(40, 1) == [20]
    assert valid_checkout_doubles(1, 3) == []
    assert valid_checkout_doubles(200, 3) == []
    doubles = valid_checkout_doubles(40, 3)
    # Common finishing doubles come first in their usual order
    assert doubles[:4] == [20, 16, 8, 10]
    assert all(1 <= d <= 20 for d in doubles)
    with pytest.raises(ValueError):
        valid_checkout_doubles(40, 0)


def test_possible_doubles_covers_board() -> None:
    assert sorted(possible_doubles()) == list(range(1, 21))


def test_format_checkout_path() -> None:
    assert format_checkout_path(compute_checkout(170)) == "T20 → T20 → Bull"
    assert format_checkout_path(compute_checkout(169)) == "No checkout available"
    assert compute_checkout(40, None, 1).to_dict()["text"] == "D20"
