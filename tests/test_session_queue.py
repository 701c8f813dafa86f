"""Tests for session derivation, shuffling and advancing."""

import random
from collections import Counter

import pytest

from conftest import make_catalog
from session_queue import (
    ACTIVE, COMPLETE, DUE_REVIEW, EMPTY, FREE_STUDY, NEXT, WRAP,
    SessionQueue, build_due_session, build_session, derive_items, fisher_yates
)


def ids(items):
    return [w.id for w in items]


class TestDerivation:
    def test_whole_catalog(self):
        catalog = make_catalog(25)
        assert ids(derive_items(catalog, None, False, [], 20)) == list(range(1, 26))

    def test_part_slice(self):
        catalog = make_catalog(25)
        assert ids(derive_items(catalog, 1, False, [], 20)) == [21, 22, 23, 24, 25]

    def test_slice_before_unknown_filter(self):
        catalog = make_catalog(25)
        unknown = [22, 3, 25]
        assert ids(derive_items(catalog, 1, True, unknown, 20)) == [22, 25]
        assert ids(derive_items(catalog, 0, True, unknown, 20)) == [3]
        assert ids(derive_items(catalog, None, True, unknown, 20)) == [3, 22, 25]

    def test_bad_part_index(self):
        with pytest.raises(ValueError):
            derive_items(make_catalog(25), 2, False, [], 20)


class TestShuffle:
    def test_shuffle_is_a_permutation(self):
        items = list(make_catalog(30))
        shuffled = fisher_yates(items, random.Random(7))

        assert len(shuffled) == len(items)
        assert Counter(ids(shuffled)) == Counter(ids(items))
        assert ids(items) == list(range(1, 31))

    def test_shuffle_of_tiny_lists(self):
        assert fisher_yates([]) == []
        assert ids(fisher_yates(list(make_catalog(1)))) == [1]

    def test_build_session_shuffles_once(self):
        catalog = make_catalog(20)
        session = build_session(catalog, None, False, [], 20, rng=random.Random(3))
        assert sorted(ids(session.items)) == list(range(1, 21))
        assert ids(session.items) == ids(fisher_yates(list(catalog), random.Random(3)))
        assert session.pointer == 0

    def test_build_session_without_shuffle_keeps_order(self):
        session = build_session(make_catalog(5), None, False, [], 20, shuffle=False)
        assert ids(session.items) == [1, 2, 3, 4, 5]

    def test_explicit_shuffle_resets_pointer(self):
        session = SessionQueue(make_catalog(5))
        session.advance()
        session.advance()
        session.shuffle(random.Random(1))
        assert session.pointer == 0


class TestAdvance:
    def test_free_study_wraps_around(self):
        session = SessionQueue(make_catalog(3), FREE_STUDY)
        assert session.advance() == NEXT
        assert session.advance() == NEXT
        assert session.current.id == 3
        assert session.advance() == WRAP
        assert session.pointer == 0
        assert session.state == ACTIVE

    def test_advancing_never_reshuffles(self):
        session = build_session(make_catalog(10), None, False, [], 20, rng=random.Random(5))
        order = ids(session.items)
        for _ in range(25):
            session.advance()
        assert ids(session.items) == order

    def test_due_review_is_linear_and_completes(self):
        session = build_due_session(list(make_catalog(3)))
        assert session.mode == DUE_REVIEW
        assert session.advance() == NEXT
        assert session.advance() == NEXT
        assert session.advance() == COMPLETE
        assert session.state == COMPLETE
        assert session.current is None
        # terminal
        assert session.advance() == COMPLETE
        assert session.pointer == 3

    def test_empty_free_study(self):
        session = build_session(make_catalog(25), None, True, [], 20)
        assert session.state == EMPTY
        assert session.current is None
        assert session.advance() == EMPTY

    def test_empty_and_complete_are_different(self):
        empty = SessionQueue([], FREE_STUDY)
        done = build_due_session(list(make_catalog(1)))
        done.advance()
        assert empty.state == EMPTY
        assert done.state == COMPLETE

    def test_due_review_with_nothing_due_is_complete(self):
        assert build_due_session([]).state == COMPLETE

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            SessionQueue([], "sideways")
