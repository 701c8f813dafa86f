"""Tests for the coupling between the unknown list and the review records."""

from conftest import T0
from srs_engine import HOUR_MS, ReviewRecord
from study_state import (
    StudyState, apply_outcome, apply_rating, apply_toggle_unknown,
    unknown_from_blob, unknown_to_blob
)


def test_rating_returns_new_state_and_leaves_old_one_alone():
    before = StudyState()
    result = apply_rating(before, 3, True, T0)

    assert result.records_changed and not result.unknown_changed
    assert result.state.record_for(3) == ReviewRecord(1, T0 + 4 * HOUR_MS)
    assert before.record_for(3) is None


def test_toggle_marks_word_and_rates_it_as_failed():
    result = apply_toggle_unknown(StudyState({5: ReviewRecord(6, 0)}), 5, T0)

    assert result.state.unknown_ids == (5,)
    assert result.state.record_for(5).level == 1
    assert result.records_changed and result.unknown_changed


def test_toggle_unmarks_word_and_rates_it_as_recalled():
    state = StudyState({5: ReviewRecord(1, 0)}, unknown_ids=[5, 8])
    result = apply_toggle_unknown(state, 5, T0)

    assert result.state.unknown_ids == (8,)
    assert result.state.record_for(5) == ReviewRecord(2, T0 + 8 * HOUR_MS)


def test_toggle_twice_restores_membership_but_keeps_both_ratings():
    state = StudyState()
    first = apply_toggle_unknown(state, 2, T0).state
    second = apply_toggle_unknown(first, 2, T0 + 1).state

    assert not second.is_unknown(2)
    # failed once (level 1), then recalled once (level 2)
    assert second.record_for(2) == ReviewRecord(2, T0 + 1 + 8 * HOUR_MS)


def test_outcome_failure_marks_new_word():
    result = apply_outcome(StudyState(), 4, False, T0)

    assert result.state.unknown_ids == (4,)
    assert result.state.record_for(4).level == 1
    assert result.unknown_changed


def test_outcome_failure_on_marked_word_only_rates():
    state = StudyState({4: ReviewRecord(3, 0)}, unknown_ids=[4])
    result = apply_outcome(state, 4, False, T0)

    assert result.state.unknown_ids == (4,)
    assert result.state.record_for(4).level == 1
    assert not result.unknown_changed


def test_outcome_success_clears_mark():
    state = StudyState({4: ReviewRecord(1, 0)}, unknown_ids=[4])
    result = apply_outcome(state, 4, True, T0)

    assert result.state.unknown_ids == ()
    assert result.state.record_for(4).level == 2


def test_outcome_success_on_unmarked_word_only_rates():
    result = apply_outcome(StudyState(), 4, True, T0)

    assert result.state.unknown_ids == ()
    assert result.state.record_for(4).level == 1
    assert not result.unknown_changed


def test_unknown_ids_keep_order_and_drop_duplicates():
    state = StudyState(unknown_ids=[3, 1, 3, 2])
    assert state.unknown_ids == (3, 1, 2)
    assert unknown_to_blob(state.unknown_ids) == [3, 1, 2]


def test_unknown_from_blob():
    assert unknown_from_blob([1, "2", "x", None, True]) == (1, 2)
    assert unknown_from_blob([1.9, 3.0, float("inf"), 4]) == (3, 4)
    assert unknown_from_blob({"1": True}) == ()


def test_outcome_success_keeps_raising_unmarked_word():
    state = StudyState()
    for _ in range(7):
        state = apply_outcome(state, 4, True, T0).state

    assert state.unknown_ids == ()
    assert state.record_for(4).level == 7
