# Leveled-interval spaced repetition.
# Each word has a review level; a correct answer moves it one level up the
# interval table and a wrong answer sends it back to level 1. The functions
# here are pure: they never touch storage, so they can be tested on their own.

import logging
import time

logger = logging.getLogger(__name__)

HOUR_MS = 3600 * 1000
DAY_MS = 24 * HOUR_MS

# Delay before the next review for each level, in milliseconds
INTERVALS_MS = (
    0,
    4 * HOUR_MS,
    8 * HOUR_MS,
    24 * HOUR_MS,
    3 * DAY_MS,
    7 * DAY_MS,
    14 * DAY_MS,
    30 * DAY_MS,
)

# Level a word drops to after a wrong answer. Level 1 and not 0 on purpose:
# even a never-seen word answered wrong waits 4 hours before it is due again.
FAILURE_LEVEL = 1


def now_ms():
    """Current wall-clock time as epoch milliseconds"""
    return int(time.time() * 1000)


class ReviewRecord:
    """
    Scheduling state of one word.
    A word without a record behaves like ReviewRecord() and is always due.
    """

    __slots__ = ('level', 'next_review_at')

    def __init__(self, level=0, next_review_at=0):
        """
        Parameters:
            level(int): Index into the interval table
            next_review_at(int): Epoch milliseconds when the word is due again
        """
        self.level = level
        self.next_review_at = next_review_at

    def __eq__(self, other):
        if not isinstance(other, ReviewRecord):
            return NotImplemented
        return (self.level, self.next_review_at) == (other.level, other.next_review_at)

    def __repr__(self):
        return f"ReviewRecord(level={self.level}, next_review_at={self.next_review_at})"

    def to_dict(self):
        return {'level': self.level, 'nextReviewAt': self.next_review_at}


def next_record(record, success, now, intervals=INTERVALS_MS):
    """
    Compute the record that follows one answer.
    Parameters:
        record(ReviewRecord or None): Current record, None for a new word
        success(bool): Whether the word was recalled
        now(int): Time of the answer in epoch milliseconds
        intervals(tuple): Interval table, one delay per level
    """
    current = record or ReviewRecord()
    top = len(intervals) - 1

    if success:
        level = min(current.level + 1, top)
    else:
        level = min(FAILURE_LEVEL, top)

    return ReviewRecord(level, now + intervals[level])


def is_due(record, now):
    return record is None or record.next_review_at <= now


def due_items(catalog, records, now):
    """
    Words that should be reviewed at `now`, in catalog order.
    Words never rated have no record and are always included.
    """
    return [w for w in catalog if is_due(records.get(w.id), now)]


def records_to_blob(records):
    """Serialize records to the persisted {"<id>": {"level", "nextReviewAt"}} object"""
    return {str(item_id): rec.to_dict() for item_id, rec in records.items()}


def records_from_blob(blob, intervals=INTERVALS_MS):
    """
    Rebuild records from the persisted object.
    Entries that cannot be read are skipped; levels outside the table are clamped.
    """
    records = {}
    if not isinstance(blob, dict):
        logger.warning("Ignoring review data of unexpected type %s", type(blob).__name__)
        return records

    top = len(intervals) - 1
    for key, info in blob.items():
        try:
            item_id = int(key)
            level = int(info.get('level', 0))
            next_review_at = int(info.get('nextReviewAt', 0))
        except (TypeError, ValueError, AttributeError, OverflowError):
            logger.warning("Skipping unreadable review record for %r: %r", key, info)
            continue
        records[item_id] = ReviewRecord(max(0, min(level, top)), next_review_at)

    return records
