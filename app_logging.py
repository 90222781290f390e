import logging

import config_paths

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO", path: str | None = None) -> logging.Handler | None:
    """Send log records to a file; the terminal belongs to curses."""
    path = path or config_paths.LOG_PATH
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    try:
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        root.addHandler(logging.NullHandler())
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return handler
