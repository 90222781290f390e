import curses
from typing import Callable, Optional


class LinePrompt:
    """One-line text input used for drafts, the AI instruction and file paths.

    `on_change` sees every edit of the buffer, `on_submit` gets the final text
    and returns False to keep the prompt open (e.g. after a validation error).
    """

    def __init__(self, set_status_cb: Callable[[str, int], None]):
        self._set_status = set_status_cb

        self.active = False
        self.label = ""
        self.buffer = ""
        self.cursor = 0
        self.hscroll = 0
        self.required = False
        self._on_submit: Optional[Callable[[str], Optional[bool]]] = None
        self._on_change: Optional[Callable[[str], None]] = None
        self._on_cancel: Optional[Callable[[], None]] = None
        self._generation = 0

    # ---------- public API ----------
    def start(
        self,
        label: str,
        initial: str = "",
        on_submit: Optional[Callable[[str], Optional[bool]]] = None,
        on_change: Optional[Callable[[str], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        required: bool = False,
    ):
        self._generation += 1
        self.active = True
        self.label = label
        self.buffer = initial or ""
        self.cursor = len(self.buffer)
        self.hscroll = 0
        self.required = required
        self._on_submit = on_submit
        self._on_change = on_change
        self._on_cancel = on_cancel

    def handle_key(self, ch):
        if not self.active:
            return

        if ch in (10, 13, curses.KEY_ENTER):
            self._handle_enter()
            return

        if ch == 27:  # Esc
            on_cancel = self._on_cancel
            self._reset()
            if on_cancel is not None:
                on_cancel()
            self._set_status("Canceled", 2)
            return

        if ch in (curses.KEY_BACKSPACE, 127, 8):
            if self.cursor > 0:
                self.buffer = self.buffer[: self.cursor - 1] + self.buffer[self.cursor :]
                self.cursor -= 1
                self._changed()
            return

        if ch == curses.KEY_DC:
            if self.cursor < len(self.buffer):
                self.buffer = self.buffer[: self.cursor] + self.buffer[self.cursor + 1 :]
                self._changed()
            return

        if ch == 21:  # Ctrl+U
            self.buffer = self.buffer[self.cursor :]
            self.cursor = 0
            self._changed()
            return

        if ch == curses.KEY_LEFT:
            self.cursor = max(0, self.cursor - 1)
            return

        if ch == curses.KEY_RIGHT:
            self.cursor = min(len(self.buffer), self.cursor + 1)
            return

        if ch in (curses.KEY_HOME, 1):  # Home / Ctrl+A
            self.cursor = 0
            return

        if ch in (curses.KEY_END, 5):  # End / Ctrl+E
            self.cursor = len(self.buffer)
            return

        if isinstance(ch, int) and ch >= 32 and ch != 127 and ch < curses.KEY_MIN:
            self.buffer = self.buffer[: self.cursor] + chr(ch) + self.buffer[self.cursor :]
            self.cursor += 1
            self._changed()
            return

    def draw(self, win):
        if not self.active:
            return

        prompt = f"{self.label}: "
        h, w = win.getmaxyx()
        text_w = max(1, w - len(prompt) - 1)

        if self.cursor < self.hscroll:
            self.hscroll = self.cursor
        elif self.cursor > self.hscroll + text_w:
            self.hscroll = self.cursor - text_w

        visible = self.buffer[self.hscroll : self.hscroll + text_w]

        win.erase()
        try:
            win.addnstr(0, 0, prompt, len(prompt))
            win.addnstr(0, len(prompt), visible, text_w)
            win.move(0, len(prompt) + (self.cursor - self.hscroll))
        except curses.error:
            pass
        win.refresh()

    # ---------- internals ----------
    def _changed(self):
        if self._on_change is not None:
            self._on_change(self.buffer)

    def _handle_enter(self):
        text = self.buffer
        if self.required and not text.strip():
            self._set_status(f"{self.label} required", 3)
            return
        on_submit = self._on_submit
        generation = self._generation
        if on_submit is not None and on_submit(text) is False:
            return
        # the callback may have opened a follow-up prompt
        if generation == self._generation:
            self._reset()

    def _reset(self):
        self.active = False
        self.label = ""
        self.buffer = ""
        self.cursor = 0
        self.hscroll = 0
        self.required = False
        self._on_submit = None
        self._on_change = None
        self._on_cancel = None
