"""Identity-keyed store of measured item heights."""

import weakref


class MeasurementStore:
    """
    Maps items to their measured heights.

    Items are keyed by identity, not value: two equal but distinct objects
    get separate entries. Each item is assigned a slot in an arena of stable
    integer indices and heights are kept in a slot-indexed list.

    The store is an association, never an owner, of the items it measures.
    It holds weak references where the item type supports them, so an entry
    stops resolving once its item is gone. Items that cannot be weakly
    referenced (dicts, tuples, ...) are tracked by `id()` only; their slots
    are reclaimed through `retain()`, which the owner of the item list calls
    whenever that list changes.
    """

    def __init__(self):
        self._slots: dict[int, int] = {}
        self._refs: list = []
        self._heights: list = []
        self._free: list[int] = []

    def _lookup(self, item) -> int | None:
        slot = self._slots.get(id(item))
        if slot is None:
            return None
        ref = self._refs[slot]
        if ref is not None and ref() is not item:
            # The original item died and its id was handed to a new object.
            self._release(id(item), slot)
            return None
        return slot

    def _release(self, key: int, slot: int):
        del self._slots[key]
        self._refs[slot] = None
        self._heights[slot] = None
        self._free.append(slot)

    @staticmethod
    def _make_ref(item):
        try:
            return weakref.ref(item)
        except TypeError:
            return None

    def has(self, item) -> bool:
        return self._lookup(item) is not None

    def get(self, item):
        """Return the measured height of `item`, or None if never measured."""
        slot = self._lookup(item)
        if slot is None:
            return None
        return self._heights[slot]

    def set(self, item, height):
        slot = self._lookup(item)
        if slot is None:
            if self._free:
                slot = self._free.pop()
                self._refs[slot] = self._make_ref(item)
                self._heights[slot] = height
            else:
                slot = len(self._heights)
                self._refs.append(self._make_ref(item))
                self._heights.append(height)
            self._slots[id(item)] = slot
        else:
            # Last write wins.
            self._heights[slot] = height

    def retain(self, items):
        """Reclaim the slots of every item that is not in `items`."""
        live = {id(item) for item in items if item is not None}
        for key, slot in list(self._slots.items()):
            if key not in live:
                self._release(key, slot)

    def reset(self):
        """Discard every measurement."""
        self._slots = {}
        self._refs = []
        self._heights = []
        self._free = []

    def __len__(self):
        for key, slot in list(self._slots.items()):
            ref = self._refs[slot]
            if ref is not None and ref() is None:
                self._release(key, slot)
        return len(self._slots)
