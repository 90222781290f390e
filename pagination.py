class Paginator:
    """Splits grid rows into fixed-size pages so drawing only touches one slice."""

    def __init__(self, total_rows: int, page_size: int = 500):
        self.page_size = max(1, page_size)
        self.page_index = 0
        self.total_rows = max(0, total_rows)
        self._clamp()

    def _clamp(self):
        self.page_index = max(0, min(self.page_index, self.page_count - 1))

    def update_total_rows(self, total_rows: int):
        self.total_rows = max(0, total_rows)
        self._clamp()

    def ensure_row_visible(self, row: int):
        if self.total_rows == 0:
            self.page_index = 0
            return
        row = max(0, min(row, self.total_rows - 1))
        self.page_index = row // self.page_size
        self._clamp()

    @property
    def page_start(self) -> int:
        return self.page_index * self.page_size

    @property
    def page_end(self) -> int:
        return min(self.total_rows, self.page_start + self.page_size)

    @property
    def page_count(self) -> int:
        if self.total_rows == 0:
            return 1
        return (self.total_rows - 1) // self.page_size + 1
