import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from history_log import MAX_HISTORY, HistoryLog
from snapshot_store import SnapshotSink, StoredSnapshot
from table_errors import NoTableLoaded
from table_model import Table, normalize

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "data.csv"


@dataclass(frozen=True)
class TableSnapshot:
    table: Optional[Table]
    file_name: str
    version: int
    origin: Any = None


class AppState:
    """Canonical table + history pair. All mutations go through here."""

    def __init__(
        self,
        undo_max_depth: int = MAX_HISTORY,
        snapshot_sink: Optional[SnapshotSink] = None,
    ):
        self.history = HistoryLog(max_depth=undo_max_depth)
        self.snapshot_sink = snapshot_sink
        self.version = 0
        self._listeners: list[Callable[[TableSnapshot], None]] = []

    # ---------- read side ----------
    @property
    def table(self) -> Optional[Table]:
        entry = self.history.current
        return entry.table if entry is not None else None

    @property
    def file_name(self) -> str:
        entry = self.history.current
        return entry.label if entry is not None else DEFAULT_FILE_NAME

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def snapshot(self, origin=None) -> TableSnapshot:
        return TableSnapshot(self.table, self.file_name, self.version, origin)

    def require_table(self) -> Table:
        table = self.table
        if table is None:
            raise NoTableLoaded()
        return table

    def subscribe(self, listener: Callable[[TableSnapshot], None]):
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[TableSnapshot], None]):
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---------- write side ----------
    def seed(self, stored: Optional[StoredSnapshot]) -> None:
        """Start a fresh log from a persisted snapshot, without re-persisting it."""
        self.history = HistoryLog(max_depth=self.history.max_depth)
        if stored is not None:
            self.history = self.history.record(normalize(stored.table), stored.file_name)
        self.version += 1
        self._notify(None)

    def load_table(self, table: Table, file_name: str) -> TableSnapshot:
        return self.commit(table, file_name=file_name)

    def commit(
        self, table: Table, file_name: Optional[str] = None, origin=None
    ) -> TableSnapshot:
        label = file_name if file_name is not None else self.file_name
        self.history = self.history.record(normalize(table), label)
        logger.debug(
            "Recorded entry %d/%d (%s)",
            self.history.cursor + 1,
            len(self.history.entries),
            label,
        )
        return self._settle(origin)

    def undo(self) -> TableSnapshot:
        self.history, _entry = self.history.undo()
        return self._settle(None)

    def redo(self) -> TableSnapshot:
        self.history, _entry = self.history.redo()
        return self._settle(None)

    # ---------- internals ----------
    def _settle(self, origin) -> TableSnapshot:
        self.version += 1
        if self.snapshot_sink is not None:
            self.snapshot_sink.offer(self.table, self.file_name)
        return self._notify(origin)

    def _notify(self, origin) -> TableSnapshot:
        snap = self.snapshot(origin)
        for listener in list(self._listeners):
            listener(snap)
        return snap
