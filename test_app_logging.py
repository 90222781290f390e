import logging
import tempfile
from pathlib import Path

from app_logging import configure_logging
from default_table_initializer import DefaultTableInitializer


def test_configure_logging_writes_to_file():
    root = logging.getLogger()
    old_level = root.level
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "csvpilot.log"
        handler = configure_logging("debug", str(path))
        try:
            assert root.level == logging.DEBUG
            logging.getLogger("csvpilot.test").info("hello log")
            handler.flush()
            assert "INFO csvpilot.test: hello log" in path.read_text()
        finally:
            root.removeHandler(handler)
            handler.close()
            root.setLevel(old_level)


def test_configure_logging_unwritable_path_is_quiet():
    root = logging.getLogger()
    before = list(root.handlers)
    old_level = root.level
    with tempfile.TemporaryDirectory() as tmp:
        handler = configure_logging("INFO", str(Path(tmp) / "missing" / "x.log"))
    try:
        assert handler is None
    finally:
        for h in root.handlers[:]:
            if h not in before:
                root.removeHandler(h)
        root.setLevel(old_level)


def test_default_template_is_blank_grid():
    table = DefaultTableInitializer(cols=2, rows=4).create()
    assert table.headers == ("Column 1", "Column 2")
    assert table.rows == (("", ""),) * 4
