# history.py

import copy
from dataclasses import dataclass
from typing import List, Optional

from badgeprint.constants import HISTORY_LIMIT
from badgeprint.model import Side


@dataclass(frozen=True)
class HistoryEntry:
    front: Side
    back: Side


class History:
    """
    Bounded undo/redo over whole-template snapshots.

    Entries are deep copies taken on push and handed out as deep copies, so
    nothing the caller does afterwards can alter a stored snapshot.
    """

    def __init__(self, limit: int = HISTORY_LIMIT):
        if limit < 1:
            raise ValueError(f"History limit must be at least 1, got {limit}")
        self.limit = limit
        self._entries: List[HistoryEntry] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def push(self, front: Side, back: Side):
        # Drop the redo branch, append, advance
        del self._entries[self._index + 1:]
        self._entries.append(HistoryEntry(copy.deepcopy(front), copy.deepcopy(back)))
        self._index += 1

        overflow = len(self._entries) - self.limit
        if overflow > 0:
            del self._entries[:overflow]
            self._index = max(0, self._index - overflow)

    def current(self) -> Optional[HistoryEntry]:
        if self._index < 0:
            return None
        return self._copy(self._entries[self._index])

    def undo(self) -> Optional[HistoryEntry]:
        if self._index <= 0:
            return None
        self._index -= 1
        return self._copy(self._entries[self._index])

    def redo(self) -> Optional[HistoryEntry]:
        if self._index >= len(self._entries) - 1:
            return None
        self._index += 1
        return self._copy(self._entries[self._index])

    @staticmethod
    def _copy(entry: HistoryEntry) -> HistoryEntry:
        return HistoryEntry(copy.deepcopy(entry.front), copy.deepcopy(entry.back))
