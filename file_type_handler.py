import io
import os
import warnings

import pandas as pd

from table_errors import UploadError
from table_model import Table, normalize


def parse_delimited(raw: bytes) -> list[list[str]]:
    """Parse CSV bytes into header-first rows of strings.

    Rows wider than the first line are cut to its width; shorter rows are
    padded with empty strings.
    """
    if not raw or not raw.strip():
        return []
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", pd.errors.ParserWarning)
            df = pd.read_csv(
                io.BytesIO(raw),
                header=None,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding="utf-8-sig",
                engine="python",
                on_bad_lines=lambda fields: fields,
            )
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as exc:
        raise UploadError(f"Could not parse CSV: {exc}") from exc
    df = df.fillna("")
    return [[str(v) for v in row] for row in df.itertuples(index=False, name=None)]


def serialize_delimited(table: Table) -> str:
    return normalize(table).to_dataframe().to_csv(index=False, lineterminator="\n")


class CsvFileHandler:
    def __init__(self, path: str):
        self.path = path

    @property
    def file_name(self) -> str:
        return os.path.basename(self.path)

    def exists(self) -> bool:
        return os.path.exists(self.path) and os.path.getsize(self.path) > 0

    def load(self) -> list[list[str]]:
        try:
            with open(self.path, "rb") as f:
                raw = f.read()
        except OSError as exc:
            raise UploadError(f"Could not read {self.path}: {exc.strerror or exc}") from exc
        payload = parse_delimited(raw)
        if not payload:
            raise UploadError("CSV file is empty")
        return payload

    def save(self, table: Table) -> None:
        text = serialize_delimited(table)
        with open(self.path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
