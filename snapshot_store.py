import json
import logging
import os
from dataclasses import dataclass
from typing import Optional, Protocol

from table_model import Table, normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredSnapshot:
    table: Table
    file_name: str


class SnapshotSink(Protocol):
    def offer(self, table: Optional[Table], file_name: str) -> None: ...


class JsonSnapshotStore:
    """Keeps the last settled table on disk as {headers, rows, fileName}."""

    def __init__(self, path: str, default_file_name: str = "data.csv"):
        self.path = path
        self.default_file_name = default_file_name

    def load(self) -> Optional[StoredSnapshot]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read snapshot %s: %s", self.path, exc)
            return None

        if not isinstance(data, dict):
            return None
        headers = data.get("headers")
        rows = data.get("rows")
        if not isinstance(headers, list) or not isinstance(rows, list):
            return None
        if not all(isinstance(row, list) for row in rows):
            return None

        file_name = data.get("fileName")
        if not isinstance(file_name, str) or not file_name:
            file_name = self.default_file_name
        table = normalize(Table.from_lists(headers, rows))
        return StoredSnapshot(table, file_name)

    def offer(self, table: Optional[Table], file_name: str) -> None:
        if table is None:
            return
        headers, rows = table.to_lists()
        payload = {"headers": headers, "rows": rows, "fileName": file_name}
        tmp_path = self.path + ".tmp"
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.warning("Could not persist snapshot to %s: %s", self.path, exc)

