# The Catalog holds the fixed list of vocabulary words studied by the app.
# It is loaded once at startup from a JSON file and never changes afterwards.
# It also answers the read-only questions the study screens ask: which words
# belong to a part, how many parts there are, and which words match a search.

import json
import math


class VocabularyItem:
    """
    A single vocabulary word.
    The id is assigned by the catalog file and stays stable across runs,
    since review records and the unknown list refer to words by id.
    """

    __slots__ = ('id', 'front', 'back')

    def __init__(self, item_id, front, back):
        """
        Parameters:
            item_id(int): Stable catalog id
            front(str): Word shown first (e.g. the English word)
            back(str): Meaning shown on the back of the card
        """
        object.__setattr__(self, 'id', item_id)
        object.__setattr__(self, 'front', front)
        object.__setattr__(self, 'back', back)

    def __setattr__(self, name, value):
        raise AttributeError('VocabularyItem is immutable')

    def __eq__(self, other):
        if not isinstance(other, VocabularyItem):
            return NotImplemented
        return (self.id, self.front, self.back) == (other.id, other.front, other.back)

    def __hash__(self):
        return hash((self.id, self.front, self.back))

    def __repr__(self):
        return f"VocabularyItem({self.id!r}, {self.front!r}, {self.back!r})"

    def to_dict(self):
        return {'id': self.id, 'front': self.front, 'back': self.back}


class Catalog:
    """Ordered, read-only collection of VocabularyItem objects"""

    def __init__(self, items):
        """
        Build the catalog and check ids are unique.
        Parameters:
            items(iterable): VocabularyItem objects or dicts with id/front/back
        """
        loaded = []
        by_id = {}
        for raw in items:
            item = raw if isinstance(raw, VocabularyItem) else _item_from_dict(raw)
            if item.id in by_id:
                raise ValueError(f"Duplicate vocabulary id: {item.id}")
            by_id[item.id] = item
            loaded.append(item)

        self._items = tuple(loaded)
        self._by_id = by_id

    def __len__(self):
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def __contains__(self, item_id):
        return item_id in self._by_id

    @property
    def items(self):
        return self._items

    def get(self, item_id):
        """Return the item with this id, or None when the catalog has no such word"""
        return self._by_id.get(item_id)

    def parts_count(self, chunk_size):
        return math.ceil(len(self._items) / chunk_size)

    def part(self, index, chunk_size):
        """
        Return one contiguous part of the catalog.
        Parameters:
            index(int): 0-based part number
            chunk_size(int): Number of words per part
        """
        if index < 0 or index >= self.parts_count(chunk_size):
            raise ValueError(f"Part index out of range: {index}")
        start = index * chunk_size
        return list(self._items[start:start + chunk_size])

    def part_ranges(self, chunk_size):
        """
        Labels for the part selector, e.g. (0, 1, 20) for "Part 1 (1-20)".
        Word positions are 1-based and the last part may be shorter.
        """
        ranges = []
        for i in range(self.parts_count(chunk_size)):
            first = i * chunk_size + 1
            last = min((i + 1) * chunk_size, len(self._items))
            ranges.append((i, first, last))
        return ranges

    def search(self, text):
        """Case-insensitive substring match over both sides of the card"""
        needle = (text or '').lower()
        return [
            w for w in self._items
            if needle in w.front.lower() or needle in w.back.lower()
        ]


def _item_from_dict(data):
    try:
        item_id = data['id']
        front = data['front']
        back = data['back']
    except (KeyError, TypeError):
        raise ValueError(f"Invalid vocabulary entry: {data!r}")

    # bool is an int subclass; reject it so True never becomes word 1
    if not isinstance(item_id, int) or isinstance(item_id, bool):
        raise ValueError(f"Vocabulary id must be an integer: {item_id!r}")
    return VocabularyItem(item_id, str(front), str(back))


def load_catalog(path):
    """
    Load the catalog from a JSON array of {"id", "front", "back"} objects.
    Parameters:
        path(str): Path to the catalog file
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Catalog file must contain a JSON array: {path}")
    return Catalog(data)
