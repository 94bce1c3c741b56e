# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Table Registry - Tracks which tables were already written during one batch.
"""


class GuardCollisionError(Exception):
    """
    Raised when two different table keys would share one include guard.
    """
    pass


class TableRegistry:
    """
    Set of emitted tables, keyed by include guard.

    One registry lives for exactly one batch. Tables are never removed.
    """

    def __init__(self):
        self._emitted = {}  # guard -> TableKey, in emission order

    def ensure_emitted(self, key):
        """
        Marks a table as emitted.

        Args:
            key: The TableKey of the table.

        Returns:
            True if the table was already emitted (the caller only references it),
            False if this is the first request (the caller must write it now).
        """
        existing = self._emitted.get(key.guard)
        if existing is not None:
            if existing != key:
                raise GuardCollisionError(f"{key.guard} is claimed by both {existing} and {key}")
            return True

        self._emitted[key.guard] = key
        return False

    def __contains__(self, key):
        return self._emitted.get(key.guard) == key

    def __len__(self):
        return len(self._emitted)

    def keys(self):
        """
        Returns the emitted keys in emission order.
        """
        return list(self._emitted.values())

    def guards(self):
        return list(self._emitted)
