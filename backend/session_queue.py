# Study session queues.
# A session is an ordered snapshot of words plus a pointer to the current one.
# Free study walks the queue in a circle; due review walks it once and then
# reports that the session is complete.

import random

FREE_STUDY = 'free'
DUE_REVIEW = 'due'

# Session states
EMPTY = 'empty'        # no word matched the scope and filter
ACTIVE = 'active'
COMPLETE = 'complete'  # due review stepped past its last word

# Signals returned by advance()
NEXT = 'next'
WRAP = 'wrap'


def derive_items(catalog, part, restrict_to_unknown, unknown_ids, chunk_size):
    """
    Select the words a free study session draws from.
    Parameters:
        catalog(Catalog): All words
        part(int or None): 0-based part index, None for the whole catalog
        restrict_to_unknown(bool): Keep only words marked as difficult
        unknown_ids(iterable): Ids currently marked as difficult
        chunk_size(int): Words per part
    The part slice is applied first, then the unknown filter.
    """
    items = list(catalog) if part is None else catalog.part(part, chunk_size)
    if restrict_to_unknown:
        unknown = set(unknown_ids)
        items = [w for w in items if w.id in unknown]
    return items


def fisher_yates(items, rng=None):
    """Return a shuffled copy of items"""
    rng = rng or random
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randrange(i + 1)
        result[i], result[j] = result[j], result[i]
    return result


class SessionQueue:
    """Ordered words of one study pass and the position of the current word"""

    def __init__(self, items, mode=FREE_STUDY, part=None, restrict_to_unknown=False):
        if mode not in (FREE_STUDY, DUE_REVIEW):
            raise ValueError(f"Unknown session mode: {mode}")
        self.items = list(items)
        self.mode = mode
        self.part = part
        self.restrict_to_unknown = restrict_to_unknown
        self.pointer = 0

    @property
    def state(self):
        if self.mode == DUE_REVIEW and self.pointer >= len(self.items):
            return COMPLETE
        if not self.items:
            return EMPTY
        return ACTIVE

    @property
    def current(self):
        if self.state != ACTIVE:
            return None
        return self.items[self.pointer]

    def shuffle(self, rng=None):
        self.items = fisher_yates(self.items, rng)
        self.pointer = 0

    def advance(self):
        """
        Move to the next word.
        Returns NEXT, WRAP (free study went back to the first word),
        COMPLETE (due review finished) or EMPTY (nothing to study).
        """
        state = self.state
        if state != ACTIVE:
            return state

        if self.mode == FREE_STUDY:
            self.pointer = (self.pointer + 1) % len(self.items)
            return WRAP if self.pointer == 0 else NEXT

        self.pointer += 1
        return COMPLETE if self.pointer >= len(self.items) else NEXT


def build_session(catalog, part, restrict_to_unknown, unknown_ids, chunk_size, shuffle=True, rng=None):
    """Build a free study session, shuffled unless shuffle is False"""
    items = derive_items(catalog, part, restrict_to_unknown, unknown_ids, chunk_size)
    session = SessionQueue(items, FREE_STUDY, part, restrict_to_unknown)
    if shuffle:
        session.shuffle(rng)
    return session


def build_due_session(due):
    """Build a due review session over words already filtered by due time"""
    return SessionQueue(due, DUE_REVIEW)
