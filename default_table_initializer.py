from table_model import Table

TEMPLATE_FILE_NAME = "template.csv"


class DefaultTableInitializer:
    def __init__(self, cols: int = 3, rows: int = 3):
        self.cols = cols
        self.rows = rows

    def create(self) -> Table:
        headers = [f"Column {i + 1}" for i in range(self.cols)]
        return Table.from_lists(headers, [[""] * self.cols for _ in range(self.rows)])
