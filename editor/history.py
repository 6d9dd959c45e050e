"""
Undo/redo history for the calendar editor.

Snapshots are frozen: the editor restores them into fresh mutable sets,
so nothing done after a restore can reach back into a stored entry.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

DEFAULT_LIMIT = 50


@dataclass(frozen=True)
class Snapshot:
    """Editor state captured after a committed mutation."""

    blocked: frozenset = field(default_factory=frozenset)
    selected: frozenset = field(default_factory=frozenset)

    @classmethod
    def capture(cls, blocked: Iterable, selected: Iterable) -> 'Snapshot':
        return cls(frozenset(blocked), frozenset(selected))

    def restore(self) -> tuple:
        """Return (blocked, selected) as new mutable sets."""
        return set(self.blocked), set(self.selected)


class History:
    """
    Bounded undo stack with a current index.

    Committing after an undo discards the redo branch. Past the limit the
    oldest snapshot is dropped, so undo can only reach the oldest retained
    entry.
    """

    def __init__(self, limit: int = DEFAULT_LIMIT):
        if limit < 1:
            raise ValueError('History limit must be at least 1')
        self.limit = limit
        self._entries = []
        self._index = -1

    def __len__(self):
        return len(self._entries)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Optional[Snapshot]:
        return self._entries[self._index] if self._entries else None

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def commit(self, snapshot: Snapshot) -> None:
        del self._entries[self._index + 1:]
        self._entries.append(snapshot)
        self._index += 1

        if len(self._entries) > self.limit:
            self._entries.pop(0)
            self._index -= 1

    def undo(self) -> Optional[Snapshot]:
        """Step back one entry. Returns None at the oldest entry."""
        if not self.can_undo:
            return None
        self._index -= 1
        return self._entries[self._index]

    def redo(self) -> Optional[Snapshot]:
        """Step forward one entry. Returns None at the newest entry."""
        if not self.can_redo:
            return None
        self._index += 1
        return self._entries[self._index]
