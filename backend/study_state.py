# StudyState is the single object holding everything the app remembers about
# the learner: the review record of each word and the list of words marked as
# difficult ("unknown"). Every change is a pure function returning a new
# state, so the coupling between the two stores lives in one place and the
# controller only has to save whatever changed afterwards.

import logging

from srs_engine import INTERVALS_MS, next_record

logger = logging.getLogger(__name__)


class StudyState:
    """Immutable snapshot of review records and unknown word ids"""

    __slots__ = ('_records', '_unknown_ids')

    def __init__(self, records=None, unknown_ids=()):
        """
        Parameters:
            records(dict): word id -> ReviewRecord
            unknown_ids(iterable): Ids of words marked as difficult, in the order they were marked
        """
        self._records = dict(records or {})
        self._unknown_ids = tuple(dict.fromkeys(unknown_ids))

    @property
    def records(self):
        # copy so callers cannot mutate the snapshot
        return dict(self._records)

    @property
    def unknown_ids(self):
        return self._unknown_ids

    def record_for(self, item_id):
        return self._records.get(item_id)

    def is_unknown(self, item_id):
        return item_id in self._unknown_ids

    def _replace(self, records=None, unknown_ids=None):
        return StudyState(
            self._records if records is None else records,
            self._unknown_ids if unknown_ids is None else unknown_ids,
        )


class Transition:
    """
    Result of applying one event to a StudyState.
    The flags tell the controller which persisted blobs must be rewritten.
    """

    __slots__ = ('state', 'records_changed', 'unknown_changed')

    def __init__(self, state, records_changed=False, unknown_changed=False):
        self.state = state
        self.records_changed = records_changed
        self.unknown_changed = unknown_changed


def apply_rating(state, item_id, success, now, intervals=INTERVALS_MS):
    """
    Rate one word and upsert its review record.
    Parameters:
        state(StudyState): Current state
        item_id(int): Word being rated
        success(bool): True if recalled, False otherwise
        now(int): Time of the rating in epoch milliseconds
    """
    record = next_record(state.record_for(item_id), success, now, intervals)
    records = state.records
    records[item_id] = record
    logger.debug("Rated word %s success=%s -> level %s", item_id, success, record.level)
    return Transition(state._replace(records=records), records_changed=True)


def apply_toggle_unknown(state, item_id, now, intervals=INTERVALS_MS):
    """
    Flip the "difficult" mark of a word.
    Unmarking counts as a successful recall and marking as a failed one.
    Toggling twice restores the mark but both ratings stay applied.
    """
    # One membership read drives both the set change and the rating
    was_unknown = state.is_unknown(item_id)

    if was_unknown:
        unknown_ids = tuple(i for i in state.unknown_ids if i != item_id)
    else:
        unknown_ids = state.unknown_ids + (item_id,)

    rated = apply_rating(state._replace(unknown_ids=unknown_ids), item_id, was_unknown, now, intervals)
    return Transition(rated.state, records_changed=True, unknown_changed=True)


def apply_outcome(state, item_id, success, now, intervals=INTERVALS_MS):
    """
    Pass/fail answer given in free study.
    A failure marks the word as difficult, a success clears the mark, and the
    word is rated exactly once either way.
    """
    # Unlike the unknown-word toggle, the word is rated even when its mark
    # does not change, so repeated "I know it" answers keep raising the level.
    was_unknown = state.is_unknown(item_id)
    unknown_ids = state.unknown_ids
    unknown_changed = False

    if not success and not was_unknown:
        unknown_ids = unknown_ids + (item_id,)
        unknown_changed = True
    elif success and was_unknown:
        unknown_ids = tuple(i for i in unknown_ids if i != item_id)
        unknown_changed = True

    rated = apply_rating(state._replace(unknown_ids=unknown_ids), item_id, success, now, intervals)
    return Transition(rated.state, records_changed=True, unknown_changed=unknown_changed)


def unknown_from_blob(blob):
    """Rebuild the unknown id list from the persisted JSON array"""
    if not isinstance(blob, list):
        logger.warning("Ignoring unknown-word data of unexpected type %s", type(blob).__name__)
        return ()

    ids = []
    for value in blob:
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            logger.warning("Skipping unreadable unknown-word id: %r", value)
            continue
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            logger.warning("Skipping unreadable unknown-word id: %r", value)
    return tuple(ids)


def unknown_to_blob(unknown_ids):
    return list(unknown_ids)
