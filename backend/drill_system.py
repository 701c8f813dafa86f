# The DrillSystem class is the single owner of the learner's study state.
# It applies ratings and "difficult" marks through the pure transitions in
# study_state, saves the affected data after every change, and runs the
# current study session (free study or due review) on top of it.

import logging
import threading

from session_queue import (
    ACTIVE, DUE_REVIEW, FREE_STUDY,
    build_due_session, build_session
)
from srs_engine import INTERVALS_MS, due_items, now_ms, records_from_blob, records_to_blob
from storage import SRS_KEY, UNKNOWN_KEY
from study_state import (
    StudyState, apply_outcome, apply_rating, apply_toggle_unknown,
    unknown_from_blob, unknown_to_blob
)

logger = logging.getLogger(__name__)


class DrillSystem:
    """Vocabulary drill controller - owns review records, unknown words and the study session"""

    def __init__(self, catalog, storage, clock=now_ms, rng=None, chunk_size=20, intervals=INTERVALS_MS):
        """
        Initialize the controller and load saved progress.
        Parameters:
            catalog(Catalog): Words available for study
            storage: Persistence adapter with load(key, default) and save(key, blob)
            clock(callable): Returns the current time in epoch milliseconds
            rng(random.Random): Source of randomness for shuffling, module random if None
            chunk_size(int): Words per catalog part
            intervals(tuple): Review delay for each level, in milliseconds
        """
        self.catalog = catalog
        self.storage = storage
        self.clock = clock
        self.rng = rng
        self.chunk_size = chunk_size
        self.intervals = intervals
        self.state = StudyState()
        self._session = None
        # Held from state read through commit and save; requests arrive on several threads
        self.lock = threading.RLock()
        self._load()

    # ==================== Scheduling ====================

    def rate(self, item_id, success):
        """
        Rate a word directly on the SRS engine.
        Returns True if the change was saved.
        """
        self._check_id(item_id)
        with self.lock:
            return self._commit(apply_rating(self.state, item_id, success, self.clock(), self.intervals))

    def toggle_unknown(self, item_id):
        """Mark or unmark a word as difficult, rating it as failed or recalled"""
        self._check_id(item_id)
        with self.lock:
            return self._commit(apply_toggle_unknown(self.state, item_id, self.clock(), self.intervals))

    def mark_outcome(self, item_id, success):
        """Record a free study pass/fail answer on both the unknown list and the SRS engine"""
        self._check_id(item_id)
        with self.lock:
            return self._commit(apply_outcome(self.state, item_id, success, self.clock(), self.intervals))

    def due_items(self, now=None):
        """Words due for review, in catalog order. Reads the clock once when now is not given."""
        with self.lock:
            if now is None:
                now = self.clock()
            return due_items(self.catalog, self.state.records, now)

    def is_unknown(self, item_id):
        return self.state.is_unknown(item_id)

    def record_for(self, item_id):
        return self.state.record_for(item_id)

    @property
    def unknown_ids(self):
        return self.state.unknown_ids

    # ==================== Sessions ====================

    @property
    def session(self):
        # The study screen is the landing page: start on the whole catalog
        with self.lock:
            if self._session is None:
                self.start_study()
            return self._session

    def start_study(self, part=None, restrict_to_unknown=False, shuffle=True):
        """
        Start a free study session over a catalog part or the whole catalog.
        Parameters:
            part(int or None): 0-based part index, None for every word
            restrict_to_unknown(bool): Only study words marked as difficult
            shuffle(bool): Shuffle the new queue once
        """
        with self.lock:
            self._session = build_session(
                self.catalog, part, restrict_to_unknown, self.state.unknown_ids,
                self.chunk_size, shuffle=shuffle, rng=self.rng
            )
            logger.debug("Free study started: part=%s unknown_only=%s words=%d",
                         part, restrict_to_unknown, len(self._session.items))
            return self._session

    def shuffle(self):
        """Re-derive the current free study queue from its part and filter, then shuffle it"""
        with self.lock:
            current = self.session
            if current.mode != FREE_STUDY:
                raise ValueError("Only free study sessions can be shuffled")
            return self.start_study(current.part, current.restrict_to_unknown, shuffle=True)

    def start_review(self):
        """Start a due review session with the words due right now"""
        with self.lock:
            self._session = build_due_session(self.due_items())
            logger.debug("Due review started: words=%d", len(self._session.items))
            return self._session

    def advance(self):
        with self.lock:
            return self.session.advance()

    def answer(self, success):
        """
        Answer the current word of the session and move on.
        Free study records the outcome on the unknown list as well as the SRS
        engine; due review only rates the word.
        Returns (saved, signal) where signal is the result of advance().
        """
        with self.lock:
            session = self.session
            if session.state != ACTIVE:
                return True, session.state

            item_id = session.current.id
            if session.mode == DUE_REVIEW:
                saved = self.rate(item_id, success)
            else:
                saved = self.mark_outcome(item_id, success)
            return saved, session.advance()

    def snapshot(self):
        """Current session as plain data for the presentation layer"""
        with self.lock:
            session = self.session
            current = session.current
            data = {
                'mode': session.mode,
                'state': session.state,
                'pointer': session.pointer,
                'total': len(session.items),
                'part': session.part,
                'unknown_only': session.restrict_to_unknown,
                'current': None
            }
            if current is not None:
                data['current'] = self.describe(current)
            return data

    def describe(self, item):
        """Word with its unknown flag and review record"""
        record = self.state.record_for(item.id)
        data = item.to_dict()
        data['unknown'] = self.state.is_unknown(item.id)
        data['level'] = record.level if record else 0
        data['next_review_at'] = record.next_review_at if record else 0
        return data

    def stats(self):
        with self.lock:
            return {
                'total_words': len(self.catalog),
                'due_now': len(self.due_items()),
                'unknown_words': len(self.state.unknown_ids)
            }

    # ==================== Persistence ====================

    def _check_id(self, item_id):
        if item_id not in self.catalog:
            raise KeyError(f"Word {item_id} is not in the catalog")

    def _commit(self, transition):
        """
        Adopt the new state, then save whatever it changed.
        The in-memory state is kept even when saving fails.
        """
        self.state = transition.state
        saved = True
        if transition.records_changed:
            saved = self.storage.save(SRS_KEY, records_to_blob(self.state.records)) and saved
        if transition.unknown_changed:
            saved = self.storage.save(UNKNOWN_KEY, unknown_to_blob(self.state.unknown_ids)) and saved
        if not saved:
            logger.warning("Study progress could not be saved; continuing in memory")
        return saved

    def _load(self):
        """Load saved records and unknown words when the system starts"""
        records = records_from_blob(self.storage.load(SRS_KEY, {}), self.intervals)
        unknown_ids = unknown_from_blob(self.storage.load(UNKNOWN_KEY, []))
        self.state = StudyState(records, unknown_ids)
        logger.info("Loaded %d review records and %d unknown words",
                    len(records), len(self.state.unknown_ids))
