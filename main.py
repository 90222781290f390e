import curses
import logging
import os
import sys

# Make ESC snappy
os.environ.setdefault("ESCDELAY", "25")

import config_paths
from analysis_client import OpenAIAnalysisClient
from app_logging import configure_logging
from app_state import AppState
from default_table_initializer import DefaultTableInitializer
from file_type_handler import CsvFileHandler
from orchestrator import Orchestrator
from reconciliation import ReconciliationEngine, reconcile
from snapshot_store import JsonSnapshotStore, StoredSnapshot
from table_errors import UploadError

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

USAGE = (
    "csvpilot - terminal CSV editor with AI-assisted edits\n\n"
    "Usage:\n  csvpilot [path.csv]\n  csvpilot -v\n  csvpilot -h\n"
)


def startup_snapshot(path, store):
    """Pick the first history entry: the file on the command line, else the stored session."""
    if path:
        handler = CsvFileHandler(path)
        if handler.exists():
            return StoredSnapshot(reconcile(handler.load()), handler.file_name)
        return StoredSnapshot(DefaultTableInitializer().create(), handler.file_name)
    return store.load()


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)

    if "-v" in args or "-V" in args:
        print(__version__)
        return 0

    if "-h" in args or "--help" in args or len(args) > 1:
        print(USAGE)
        return 0 if len(args) <= 1 else 2

    path = args[0] if args else None

    config_paths.ensure_config_dirs()
    cfg = config_paths.load_config()
    configure_logging(cfg["LOG_LEVEL"])

    store = JsonSnapshotStore(config_paths.SNAPSHOT_PATH)
    try:
        seed = startup_snapshot(path, store)
    except UploadError as exc:
        print(f"Load failed: {exc}", file=sys.stderr)
        return 1

    state = AppState(undo_max_depth=cfg["UNDO_MAX_DEPTH"], snapshot_sink=store)
    state.seed(seed)
    client = OpenAIAnalysisClient(
        model=cfg["MODEL"],
        api_key=cfg["API_KEY"],
        timeout=cfg["REQUEST_TIMEOUT_SECONDS"],
    )
    engine = ReconciliationEngine(state, client)
    logger.info("Starting with %s", seed.file_name if seed else "no table")

    def curses_main(stdscr):
        Orchestrator(stdscr, state, engine, file_path=path).run()

    curses.wrapper(curses_main)
    return 0


if __name__ == "__main__":
    sys.exit(main())
