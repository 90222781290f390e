import tempfile
from pathlib import Path

import main
from snapshot_store import JsonSnapshotStore, StoredSnapshot
from table_model import Table


def test_version_flag_prints_version(capsys):
    assert main.main(["-v"]) == 0
    assert capsys.readouterr().out.strip() == main.__version__


def test_help_flag_prints_usage(capsys):
    assert main.main(["-h"]) == 0
    assert "Usage" in capsys.readouterr().out


def test_too_many_arguments_is_a_usage_error(capsys):
    assert main.main(["a.csv", "b.csv"]) == 2
    assert "Usage" in capsys.readouterr().out


class FakeStore:
    def __init__(self, stored=None):
        self.stored = stored
        self.loads = 0

    def load(self):
        self.loads += 1
        return self.stored


def test_startup_snapshot_reads_existing_file():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "people.csv"
        path.write_text("name,age\nann,3\nbo\n")
        store = FakeStore()
        snap = main.startup_snapshot(str(path), store)
        assert snap.file_name == "people.csv"
        assert snap.table == Table.from_lists(["name", "age"], [["ann", "3"], ["bo", ""]])
        assert store.loads == 0


def test_startup_snapshot_missing_file_starts_from_template():
    with tempfile.TemporaryDirectory() as tmp:
        snap = main.startup_snapshot(str(Path(tmp) / "new.csv"), FakeStore())
        assert snap.file_name == "new.csv"
        assert snap.table.headers == ("Column 1", "Column 2", "Column 3")
        assert all(cell == "" for row in snap.table.rows for cell in row)


def test_startup_snapshot_without_path_uses_store():
    stored = StoredSnapshot(Table.from_lists(["a"], [["1"]]), "kept.csv")
    store = FakeStore(stored)
    assert main.startup_snapshot(None, store) is stored
    assert store.loads == 1


def test_startup_snapshot_without_path_or_store_is_none():
    with tempfile.TemporaryDirectory() as tmp:
        store = JsonSnapshotStore(str(Path(tmp) / "state.json"))
        assert main.startup_snapshot(None, store) is None
