import curses


class GridPane:
    PAIR_CELL_TEXT = 1
    PAIR_DRAFT = 2
    MAX_COL_WIDTH = 40
    MIN_COL_WIDTH = 3

    def __init__(self, view):
        self.view = view
        try:
            curses.start_color()
            curses.use_default_colors()
            curses.init_pair(self.PAIR_CELL_TEXT, curses.COLOR_WHITE, -1)
            curses.init_pair(self.PAIR_DRAFT, curses.COLOR_BLACK, curses.COLOR_YELLOW)
        except curses.error:
            pass

        self.curr_row = 0
        self.curr_col = 0
        self.row_offset = 0
        self.col_offset = 0

    # ---------- geometry ----------
    def clamp_cursor(self):
        rows, cols = self.view.shape
        self.curr_row = max(0, min(self.curr_row, rows - 1)) if rows else 0
        self.curr_col = max(0, min(self.curr_col, cols - 1)) if cols else 0

    def get_col_width(self, col_idx, page_start=0, page_end=None):
        rows, cols = self.view.shape
        if col_idx < 0 or col_idx >= cols:
            return self.MAX_COL_WIDTH
        if page_end is None:
            page_end = rows
        max_len = len(self.view.display_header(col_idx))
        for r in range(page_start, page_end):
            max_len = max(max_len, len(self.view.display_value(r, col_idx)))
        return max(self.MIN_COL_WIDTH, min(self.MAX_COL_WIDTH, max_len + 2))

    def adjust_col_viewport(self, avail_w=100):
        """Shift col_offset so curr_col is visible, estimating widths from headers."""
        cols = self.view.shape[1]
        if cols == 0:
            self.col_offset = 0
            return

        header_widths = [
            max(self.MIN_COL_WIDTH, min(self.MAX_COL_WIDTH, len(self.view.display_header(c)) + 2))
            for c in range(cols)
        ]
        visible_count = 0
        used = 0
        for cw in header_widths[self.col_offset :]:
            if used + cw + 1 > avail_w:
                break
            used += cw + 1
            visible_count += 1
        visible_count = max(1, visible_count)

        if self.curr_col < self.col_offset:
            self.col_offset = self.curr_col
        elif self.curr_col >= self.col_offset + visible_count:
            self.col_offset = self.curr_col - visible_count + 1

        self.col_offset = max(0, min(self.col_offset, max(0, cols - visible_count)))

    # ---------- navigation ----------
    def move_left(self):
        self.curr_col = max(0, self.curr_col - 1)

    def move_right(self):
        self.curr_col = min(max(0, self.view.shape[1] - 1), self.curr_col + 1)

    def move_down(self):
        self.curr_row = min(max(0, self.view.shape[0] - 1), self.curr_row + 1)

    def move_up(self):
        self.curr_row = max(0, self.curr_row - 1)

    def move_first_row(self):
        self.curr_row = 0

    def move_last_row(self):
        self.curr_row = max(0, self.view.shape[0] - 1)

    # ---------- rendering ----------
    def draw(self, win, page_start=0, page_end=None):
        win.erase()
        h, w = win.getmaxyx()
        rows, cols = self.view.shape
        if page_end is None:
            page_end = rows
        self.clamp_cursor()

        if not self.view.loaded:
            msg = "No table loaded. Ctrl+O opens a CSV file, t creates a blank template."
            try:
                win.addnstr(max(0, h // 2), max(0, (w - len(msg)) // 2), msg, w - 1)
            except curses.error:
                pass
            win.refresh()
            return

        widths = [self.get_col_width(c, page_start, page_end) for c in range(cols)]
        row_w = max(3, len(str(max(page_end - 1, 0))) + 1)
        avail_w = max(1, w - (row_w + 1))

        self.adjust_col_viewport(avail_w)
        max_cols = 0
        used = 0
        for cw in widths[self.col_offset :]:
            if used + cw + 1 > avail_w:
                break
            used += cw + 1
            max_cols += 1
        max_cols = max(1, max_cols)
        visible_cols = tuple(range(self.col_offset, min(cols, self.col_offset + max_cols)))

        pending = self.view.pending
        text_attr = curses.color_pair(self.PAIR_CELL_TEXT)
        draft_attr = curses.color_pair(self.PAIR_DRAFT)

        # header
        x = row_w + 1
        for c in visible_cols:
            cw = min(widths[c], max(1, w - x - 1))
            attr = curses.A_BOLD
            if pending is not None and pending.kind == "header" and pending.col == c:
                attr = draft_attr | curses.A_BOLD
            elif c == self.curr_col:
                attr |= curses.A_UNDERLINE
            try:
                win.addnstr(0, x, self.view.display_header(c)[:cw].ljust(cw), cw, attr)
            except curses.error:
                pass
            x += cw + 1

        # rows
        body_h = max(0, h - 1)
        local_curr = self.curr_row - page_start
        if local_curr < self.row_offset:
            self.row_offset = max(0, local_curr)
        elif local_curr >= self.row_offset + body_h:
            self.row_offset = local_curr - body_h + 1

        y = 1
        for r in range(page_start + self.row_offset, page_end):
            if y >= h:
                break
            try:
                win.addnstr(y, 0, str(r).rjust(row_w), row_w, curses.A_DIM)
            except curses.error:
                pass
            x = row_w + 1
            for c in visible_cols:
                cw = min(widths[c], max(1, w - x - 1))
                attr = text_attr
                is_draft = (
                    pending is not None
                    and pending.kind == "cell"
                    and pending.row == r
                    and pending.col == c
                )
                if is_draft:
                    attr = draft_attr
                elif r == self.curr_row and c == self.curr_col:
                    attr = text_attr | curses.A_REVERSE
                text = self.view.display_value(r, c).replace("\n", " ")
                try:
                    win.addnstr(y, x, text[:cw].ljust(cw), cw, attr)
                except curses.error:
                    pass
                x += cw + 1
            y += 1

        win.refresh()
