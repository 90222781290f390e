import logging
from dataclasses import dataclass
from typing import Optional

import table_model as tm
from app_state import AppState, TableSnapshot
from table_errors import NoTableLoaded, OutOfRange
from table_model import Table

logger = logging.getLogger(__name__)


@dataclass
class PendingEdit:
    kind: str  # cell | header
    col: int
    draft: str
    row: Optional[int] = None


class GridSyncAdapter:
    """View-local copy of the canonical table plus at most one draft edit.

    Structural edits are staged locally, normalized, then submitted to the
    state as one commit tagged with this adapter as origin; the returned
    snapshot is adopted. Notifications carrying our own origin are skipped.
    """

    def __init__(self, state: AppState):
        self.state = state
        self.headers: list[str] = []
        self.rows: list[list[str]] = []
        self.loaded = False
        self.version = -1
        self.pending: Optional[PendingEdit] = None
        self._adopt(state.snapshot())
        state.subscribe(self.on_snapshot)

    # ---------- canonical -> view ----------
    def on_snapshot(self, snap: TableSnapshot):
        if snap.origin is self:
            return
        if self.pending is not None:
            logger.debug("Discarding %s draft on external update", self.pending.kind)
        self.pending = None
        self._adopt(snap)

    def _adopt(self, snap: TableSnapshot):
        self.version = snap.version
        if snap.table is None:
            self.loaded = False
            self.headers, self.rows = [], []
            return
        self.loaded = True
        self.headers, self.rows = tm.normalize(snap.table).to_lists()

    def local_table(self) -> Table:
        if not self.loaded:
            raise NoTableLoaded()
        return Table.from_lists(self.headers, self.rows)

    # ---------- reads ----------
    @property
    def shape(self) -> tuple[int, int]:
        return len(self.rows), len(self.headers)

    def display_value(self, row: int, col: int) -> str:
        p = self.pending
        if p is not None and p.kind == "cell" and p.row == row and p.col == col:
            return p.draft
        try:
            return self.rows[row][col]
        except IndexError:
            return ""

    def display_header(self, col: int) -> str:
        p = self.pending
        if p is not None and p.kind == "header" and p.col == col:
            return p.draft
        try:
            return self.headers[col]
        except IndexError:
            return ""

    # ---------- draft edits ----------
    def begin_cell_edit(self, row: int, col: int) -> str:
        self.local_table()
        if not 0 <= row < len(self.rows):
            raise OutOfRange("row", row, len(self.rows))
        if not 0 <= col < len(self.headers):
            raise OutOfRange("column", col, len(self.headers))
        self.pending = PendingEdit("cell", col, self.rows[row][col], row=row)
        return self.pending.draft

    def begin_header_edit(self, col: int) -> str:
        self.local_table()
        if not 0 <= col < len(self.headers):
            raise OutOfRange("column", col, len(self.headers))
        self.pending = PendingEdit("header", col, self.headers[col])
        return self.pending.draft

    def update_draft(self, text: str):
        if self.pending is not None:
            self.pending.draft = text

    def cancel_edit(self):
        self.pending = None

    def commit_edit(self) -> Optional[TableSnapshot]:
        pending = self.pending
        if pending is None:
            return None
        self.pending = None
        current = self.local_table()
        if pending.kind == "cell":
            if current.rows[pending.row][pending.col] == pending.draft:
                return None
            staged = tm.set_cell(current, pending.row, pending.col, pending.draft)
        else:
            if current.headers[pending.col] == pending.draft:
                return None
            staged = tm.set_header(current, pending.col, pending.draft)
        return self._submit(staged)

    # ---------- structural edits ----------
    def add_row(self) -> TableSnapshot:
        return self._structural(tm.add_row)

    def delete_row(self, row: int) -> TableSnapshot:
        return self._structural(tm.delete_row, row)

    def add_column(self) -> TableSnapshot:
        return self._structural(tm.add_column)

    def delete_column(self, col: int) -> TableSnapshot:
        return self._structural(tm.delete_column, col)

    def _structural(self, op, *args) -> TableSnapshot:
        self.commit_edit()
        staged = tm.normalize(op(self.local_table(), *args))
        return self._submit(staged)

    def _submit(self, staged: Table) -> TableSnapshot:
        before = (self.headers, self.rows)
        before_version = self.state.version
        self.headers, self.rows = staged.to_lists()
        try:
            snap = self.state.commit(staged, origin=self)
        except Exception:
            if self.state.version != before_version:
                # recorded, then a listener failed: follow the canonical table
                self._adopt(self.state.snapshot())
            else:
                self.headers, self.rows = before
            raise
        self._adopt(snap)
        return snap
