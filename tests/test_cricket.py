from cricket import (
    CRICKET_NUMBERS,
    CUTTHROAT,
    NO_SCORE,
    STANDARD,
    CricketMark,
    CricketScore,
    apply_cricket_throw,
    fresh_cricket_score,
)
from segments import parse_segment

PLAYERS = ["a", "b"]


def score_with(marks=None, points=0) -> CricketScore:
    marks = marks or {}
    return CricketScore(marks=tuple(CricketMark(n, marks.get(n, 0)) for n in CRICKET_NUMBERS), points=points)


def all_closed(points=0) -> CricketScore:
    return score_with({n: 3 for n in CRICKET_NUMBERS}, points)


def hit(scores, thrower, label, variant=STANDARD):
    segment = parse_segment(label) if label else None
    return apply_cricket_throw(scores, thrower, segment, variant, PLAYERS)


def test_non_cricket_numbers_and_misses_do_nothing() -> None:
    scores = {"a": fresh_cricket_score(), "b": fresh_cricket_score()}
    assert hit(scores, "a", "T14").new_scores == scores
    assert hit(scores, "a", None).new_scores == scores


def test_marks_capped_at_three() -> None:
    scores = {"a": fresh_cricket_score(), "b": fresh_cricket_score()}
    for label in ("S20", "D20", "T20", "T20", "S20"):
        scores = hit(scores, "a", label).new_scores
        mark = scores["a"].mark_for(20)
        assert mark.marks <= 3
        assert mark.closed == (mark.marks == 3)
    assert scores["a"].mark_for(20).marks == 3


def test_overflow_scores_for_thrower_in_standard() -> None:
    scores = {"a": score_with({20: 2}), "b": fresh_cricket_score()}
    result = hit(scores, "a", "T20")
    # One mark closes 20, two marks overflow
    assert result.new_scores["a"].points == 40
    assert result.new_scores["a"].is_closed(20)
    assert result.new_scores["b"].points == 0


def test_bull_marks_and_points() -> None:
    scores = {"a": score_with({25: 3}), "b": fresh_cricket_score()}
    result = hit(scores, "a", "BULL")
    assert result.new_scores["a"].points == 50
    result = hit(scores, "a", "SBULL")
    assert result.new_scores["a"].points == 25


def test_standard_stops_scoring_once_everyone_closed() -> None:
    scores = {"a": score_with({19: 3}), "b": score_with({19: 3})}
    result = hit(scores, "a", "T19")
    assert result.new_scores["a"].points == 0


def test_standard_points_bounded_on_a_number() -> None:
    scores = {"a": fresh_cricket_score(), "b": fresh_cricket_score()}
    for _ in range(6):
        scores = hit(scores, "a", "T18").new_scores
        scores = hit(scores, "b", "S18").new_scores
    # b closed 18 after three singles, so a only scored while b was open
    assert scores["a"].points <= 18 * 3 * 3
    before = scores["a"].points
    scores = hit(scores, "a", "T18").new_scores
    assert scores["a"].points == before


def test_cutthroat_scores_against_open_opponents() -> None:
    scores = {"a": score_with({17: 3}), "b": score_with({17: 1})}
    result = hit(scores, "a", "D17", CUTTHROAT)
    assert result.new_scores["a"].points == 0
    assert result.new_scores["b"].points == 34


def test_no_score_variant_never_awards_points() -> None:
    scores = {"a": score_with({16: 3}), "b": fresh_cricket_score()}
    result = hit(scores, "a", "T16", NO_SCORE)
    assert result.new_scores["a"].points == 0
    assert result.new_scores["b"].points == 0


def test_standard_win_needs_the_lead() -> None:
    nearly = score_with({n: 3 for n in CRICKET_NUMBERS if n != 15} | {15: 2})
    behind = {"a": nearly, "b": score_with(points=10)}
    assert not hit(behind, "a", "S15").won

    ahead = {"a": score_with({n: 3 for n in CRICKET_NUMBERS if n != 15} | {15: 2}, points=10), "b": fresh_cricket_score()}
    assert hit(ahead, "a", "S15").won


def test_cutthroat_no_win_with_most_points() -> None:
    # a closes everything but carries the highest points, so the leg goes on
    nearly = score_with({n: 3 for n in CRICKET_NUMBERS if n != 15} | {15: 2}, points=60)
    scores = {"a": nearly, "b": score_with(points=20)}
    result = hit(scores, "a", "S15", CUTTHROAT)
    assert result.new_scores["a"].all_closed
    assert not result.won

    scores = {"a": score_with({n: 3 for n in CRICKET_NUMBERS if n != 15} | {15: 2}, points=20), "b": score_with(points=60)}
    assert hit(scores, "a", "S15", CUTTHROAT).won


def test_no_score_wins_on_closing() -> None:
    scores = {"a": score_with({n: 3 for n in CRICKET_NUMBERS if n != 25} | {25: 1}), "b": fresh_cricket_score()}
    assert hit(scores, "a", "BULL", NO_SCORE).won


def test_already_closed_player_wins_on_any_hit() -> None:
    scores = {"a": all_closed(points=5), "b": fresh_cricket_score()}
    assert hit(scores, "a", "S20").won
