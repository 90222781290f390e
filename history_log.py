from dataclasses import dataclass
from typing import Optional

from table_errors import NoHistory
from table_model import Table

MAX_HISTORY = 50


@dataclass(frozen=True)
class HistoryEntry:
    table: Optional[Table]
    label: str


@dataclass(frozen=True)
class HistoryLog:
    """Bounded linear undo/redo log.

    Every method returns a new log. `record` drops the redo branch before
    appending; `undo`/`redo` only move the cursor and never record.
    """

    entries: tuple[HistoryEntry, ...] = ()
    cursor: int = -1
    max_depth: int = MAX_HISTORY

    def record(self, table: Optional[Table], label: str) -> "HistoryLog":
        entries = self.entries[: self.cursor + 1] + (HistoryEntry(table, label),)
        if len(entries) > self.max_depth:
            entries = entries[len(entries) - self.max_depth :]
        return HistoryLog(entries, len(entries) - 1, self.max_depth)

    def undo(self) -> tuple["HistoryLog", HistoryEntry]:
        if not self.can_undo:
            raise NoHistory("undo")
        log = HistoryLog(self.entries, self.cursor - 1, self.max_depth)
        return log, log.entries[log.cursor]

    def redo(self) -> tuple["HistoryLog", HistoryEntry]:
        if not self.can_redo:
            raise NoHistory("redo")
        log = HistoryLog(self.entries, self.cursor + 1, self.max_depth)
        return log, log.entries[log.cursor]

    @property
    def can_undo(self) -> bool:
        return self.cursor > 0

    @property
    def can_redo(self) -> bool:
        return self.cursor < len(self.entries) - 1

    @property
    def current(self) -> Optional[HistoryEntry]:
        if not self.entries:
            return None
        return self.entries[self.cursor]
