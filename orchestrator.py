# ~/Apps/csvpilot/orchestrator.py
import curses
import logging
import os
import time

import config_paths
from default_table_initializer import TEMPLATE_FILE_NAME, DefaultTableInitializer
from file_type_handler import CsvFileHandler
from grid_pane import GridPane
from grid_sync import GridSyncAdapter
from line_prompt import LinePrompt
from overlay import OverlayView
from pagination import Paginator
from reconciliation import Outcome, ReconciliationEngine, reconcile
from screen_layout import ScreenLayout
from status_bar import render_status
from table_errors import NoHistory, TableError

logger = logging.getLogger(__name__)

HELP_LINES = [
    "Navigation",
    "  h j k l / arrows   move          g / G   first / last row",
    "  PgUp / PgDn        previous / next page",
    "",
    "Editing",
    "  Enter / i          edit cell     E       edit column header",
    "  o                  add row       X       delete current row",
    "  c                  add column    C       delete current column",
    "  u                  undo          Ctrl+R  redo",
    "",
    "Files",
    "  Ctrl+O             open CSV      Ctrl+S  save (asks for a path if needed)",
    "  t                  new blank template",
    "",
    "AI",
    "  !                  ask the model to analyse / edit the table",
    "  n                  show the last analysis narrative",
    "  M                  set model     K       set API key (saved to config.json)",
    "",
    "  ?                  this help     Ctrl+X / Ctrl+C   quit",
]


class Orchestrator:
    def __init__(self, stdscr, app_state, engine: ReconciliationEngine, file_path=None):
        self.stdscr = stdscr
        curses.curs_set(0)
        curses.raw()
        self.stdscr.nodelay(False)
        self.stdscr.timeout(100)

        self.state = app_state
        self.engine = engine
        self.file_path = file_path

        self.layout = ScreenLayout(stdscr)
        self.view = GridSyncAdapter(app_state)
        self.grid = GridPane(self.view)
        self.paginator = Paginator(total_rows=self.view.shape[0])
        self.prompt = LinePrompt(self._set_status)
        self.overlay = OverlayView(self.layout)

        self.last_narrative = ""
        self.exit_requested = False

        # ---- status ----
        self.status_msg = None
        self.status_msg_until = 0

        app_state.subscribe(self._on_snapshot)

    # ---------------- helpers ----------------

    def _set_status(self, msg, seconds=3):
        self.status_msg = msg
        self.status_msg_until = time.time() + seconds

    def _on_snapshot(self, snap):
        self.paginator.update_total_rows(self.view.shape[0])
        self.grid.clamp_cursor()
        self.paginator.ensure_row_visible(self.grid.curr_row)

    def _run_action(self, fn, *args, success=None):
        try:
            fn(*args)
        except TableError as exc:
            self._set_status(str(exc), 3)
            return False
        if success:
            self._set_status(success, 2)
        return True

    # ---------------- editing ----------------

    def _start_cell_edit(self):
        try:
            initial = self.view.begin_cell_edit(self.grid.curr_row, self.grid.curr_col)
        except TableError as exc:
            self._set_status(str(exc), 3)
            return
        self.prompt.start(
            f"Cell [{self.grid.curr_row}, {self.view.display_header(self.grid.curr_col)}]",
            initial,
            on_submit=self._commit_draft,
            on_change=self.view.update_draft,
            on_cancel=self.view.cancel_edit,
        )

    def _start_header_edit(self):
        try:
            initial = self.view.begin_header_edit(self.grid.curr_col)
        except TableError as exc:
            self._set_status(str(exc), 3)
            return
        self.prompt.start(
            f"Header {self.grid.curr_col + 1}",
            initial,
            on_submit=self._commit_draft,
            on_change=self.view.update_draft,
            on_cancel=self.view.cancel_edit,
        )

    def _commit_draft(self, _text):
        try:
            snap = self.view.commit_edit()
        except TableError as exc:
            self._set_status(str(exc), 3)
            return
        self._set_status("Updated" if snap is not None else "No changes", 2)

    def _undo(self):
        try:
            self.state.undo()
        except NoHistory:
            self._set_status("Nothing to undo", 2)
            return
        self._set_status("Undone", 2)

    def _redo(self):
        try:
            self.state.redo()
        except NoHistory:
            self._set_status("Nothing to redo", 2)
            return
        self._set_status("Redone", 2)

    # ---------------- files ----------------

    def _load_template(self):
        self.state.load_table(DefaultTableInitializer().create(), TEMPLATE_FILE_NAME)
        self.file_path = None
        self._set_status("Created blank template", 3)

    def _start_open(self):
        self.prompt.start("Open CSV", self.file_path or "", on_submit=self._open_path, required=True)

    def _open_path(self, path):
        path = os.path.expanduser(path.strip())
        handler = CsvFileHandler(path)
        try:
            table = reconcile(handler.load())
        except TableError as exc:
            self._set_status(str(exc), 4)
            return False
        self.state.load_table(table, handler.file_name)
        self.file_path = path
        self.grid.curr_row = self.grid.curr_col = 0
        self._set_status(f"Loaded {handler.file_name}", 3)
        return True

    def _save(self):
        if self.state.table is None:
            self._set_status("No table loaded", 3)
            return
        if not self.file_path:
            self.prompt.start("Save as", self.state.file_name, on_submit=self._save_as, required=True)
            return
        self._write(self.file_path)

    def _save_as(self, path):
        path = os.path.expanduser(path.strip())
        if not path.lower().endswith(".csv"):
            self._set_status("Save failed: use a .csv path", 4)
            return False
        if not self._write(path):
            return False
        self.file_path = path
        return True

    def _write(self, path):
        try:
            CsvFileHandler(path).save(self.state.table)
        except OSError as exc:
            logger.warning("Save to %s failed: %s", path, exc)
            msg = f"Save failed: {exc}"[: self.layout.W - 2]
            self._set_status(msg, 4)
            return False
        self._set_status(f"Saved {path}", 3)
        return True

    # ---------------- AI analysis ----------------

    def _start_analysis_prompt(self):
        if self.engine.pending:
            self._set_status("Analysis already running", 3)
            return
        if self.state.table is None:
            self._set_status("No table loaded", 3)
            return
        self.prompt.start("Ask AI", on_submit=self._submit_analysis, required=True)

    def _submit_analysis(self, instruction):
        try:
            # an open draft belongs to the table the model should see
            self.view.commit_edit()
            self.engine.submit(instruction)
        except TableError as exc:
            self._set_status(str(exc), 3)
            return
        self._set_status("Sent to AI, keep editing while it works", 3)

    def _start_model_prompt(self):
        self.prompt.start(
            "Model", self.engine.client.model, on_submit=self._set_model, required=True
        )

    def _set_model(self, text):
        model = text.strip()
        self.engine.client.configure(model=model)
        saved = config_paths.save_settings(model=model)
        self._set_status(f"Model set to {model}" + ("" if saved else " (not saved)"), 3)

    def _start_api_key_prompt(self):
        self.prompt.start("API key", on_submit=self._set_api_key, required=True)

    def _set_api_key(self, text):
        api_key = text.strip()
        self.engine.client.configure(api_key=api_key)
        saved = config_paths.save_settings(api_key=api_key)
        self._set_status("API key set" + ("" if saved else " (not saved)"), 3)

    def _poll_analysis(self):
        try:
            # an open draft must settle before a result can replace the table
            result = self.engine.poll(hold=self.view.pending is not None)
        except TableError as exc:
            self._set_status(f"AI request failed: {exc}"[: self.layout.W - 2], 6)
            return
        if result is None:
            return

        self.last_narrative = result.narrative
        if result.outcome is Outcome.APPLIED:
            self._set_status("Table updated from analysis", 4)
        elif result.outcome is Outcome.NO_CHANGE:
            self._set_status("Analysis done, no change needed", 4)
        else:
            self._set_status("Table changed during analysis; suggestion not applied", 6)

        if result.narrative and not self.prompt.active:
            self.overlay.open(result.narrative, title="AI analysis")

    # ---------------- UI ----------------

    def _mode(self):
        pending = self.view.pending
        if pending is not None:
            return "EDIT:HEADER" if pending.kind == "header" else "EDIT:CELL"
        if self.prompt.active:
            return "PROMPT"
        return "GRID"

    def redraw(self):
        try:
            curses.curs_set(1 if self.prompt.active and not self.overlay.visible else 0)
        except curses.error:
            pass

        self.paginator.update_total_rows(self.view.shape[0])
        self.paginator.ensure_row_visible(self.grid.curr_row)
        self.grid.draw(
            self.layout.table_win,
            page_start=self.paginator.page_start,
            page_end=self.paginator.page_end,
        )

        sw = self.layout.status_win
        sw.erase()
        _, w = sw.getmaxyx()
        text = render_status(
            {
                "status_msg": self.status_msg,
                "status_until": self.status_msg_until,
                "mode": self._mode(),
                "file_name": self.state.file_name if self.state.table is not None else "",
                "shape": self.view.shape,
                "can_undo": self.state.can_undo,
                "can_redo": self.state.can_redo,
                "analysis_pending": self.engine.pending,
                "page_index": self.paginator.page_index,
                "page_count": self.paginator.page_count,
            },
            w,
        )
        try:
            sw.addnstr(0, 0, text, max(1, w - 1), curses.A_REVERSE)
        except curses.error:
            pass
        sw.refresh()

        pw = self.layout.prompt_win
        if self.prompt.active:
            self.prompt.draw(pw)
        else:
            pw.erase()
            pw.refresh()

        if self.overlay.visible:
            self.overlay.draw()

    def handle_grid_key(self, ch):
        if ch in (ord("h"), curses.KEY_LEFT):
            self.grid.move_left()
        elif ch in (ord("l"), curses.KEY_RIGHT):
            self.grid.move_right()
        elif ch in (ord("j"), curses.KEY_DOWN):
            self.grid.move_down()
        elif ch in (ord("k"), curses.KEY_UP):
            self.grid.move_up()
        elif ch == ord("g"):
            self.grid.move_first_row()
        elif ch == ord("G"):
            self.grid.move_last_row()
        elif ch == curses.KEY_NPAGE:
            self.grid.curr_row = min(
                max(0, self.view.shape[0] - 1), self.grid.curr_row + self.paginator.page_size
            )
        elif ch == curses.KEY_PPAGE:
            self.grid.curr_row = max(0, self.grid.curr_row - self.paginator.page_size)
        elif ch in (10, 13, curses.KEY_ENTER, ord("i")):
            self._start_cell_edit()
        elif ch == ord("E"):
            self._start_header_edit()
        elif ch == ord("o"):
            if self._run_action(self.view.add_row, success="Row added"):
                self.grid.move_last_row()
        elif ch == ord("X"):
            self._run_action(self.view.delete_row, self.grid.curr_row, success="Row deleted")
        elif ch == ord("c"):
            if self._run_action(self.view.add_column, success="Column added"):
                self.grid.curr_col = max(0, self.view.shape[1] - 1)
        elif ch == ord("C"):
            self._run_action(self.view.delete_column, self.grid.curr_col, success="Column deleted")
        elif ch == ord("u"):
            self._undo()
        elif ch == 18:  # Ctrl+R
            self._redo()
        elif ch == ord("!"):
            self._start_analysis_prompt()
        elif ch == ord("n"):
            if self.last_narrative:
                self.overlay.open(self.last_narrative, title="AI analysis")
            else:
                self._set_status("No analysis yet", 2)
        elif ch == ord("M"):
            self._start_model_prompt()
        elif ch == ord("K"):
            self._start_api_key_prompt()
        elif ch == ord("t"):
            self._load_template()
        elif ch == 15:  # Ctrl+O
            self._start_open()
        elif ch == 19:  # Ctrl+S
            self._save()
        elif ch == ord("?"):
            self.overlay.open(HELP_LINES, title="Keys")
        self.grid.clamp_cursor()

    # ---------------- main loop ----------------

    def run(self):
        self.stdscr.clear()
        self.stdscr.refresh()
        self.redraw()

        while not self.exit_requested:
            ch = self.stdscr.getch()

            self._poll_analysis()

            if ch in (3, 24):  # Ctrl+C / Ctrl+X
                break

            if ch == -1:
                self.redraw()
                continue

            if self.overlay.visible:
                self.overlay.handle_key(ch)
            elif self.prompt.active:
                self.prompt.handle_key(ch)
            else:
                self.handle_grid_key(ch)

            self.redraw()
