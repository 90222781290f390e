import json
import os

HOME = os.path.expanduser("~")
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME")
CONFIG_HOME = XDG_CONFIG_HOME if XDG_CONFIG_HOME else os.path.join(HOME, ".config")
CONFIG_DIR = os.path.join(CONFIG_HOME, "csvpilot")
CONFIG_JSON = os.path.join(CONFIG_DIR, "config.json")
SNAPSHOT_PATH = os.path.join(CONFIG_DIR, "state.json")
LOG_PATH = os.path.join(CONFIG_DIR, "csvpilot.log")

# default settings
MODEL_DEFAULT = "gpt-4.1"
API_KEY_DEFAULT = None
UNDO_MAX_DEPTH_DEFAULT = 50
REQUEST_TIMEOUT_DEFAULT = 60.0
LOG_LEVEL_DEFAULT = "INFO"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


def ensure_config_dirs():
    os.makedirs(CONFIG_DIR, exist_ok=True)


def load_config():
    cfg = {
        "MODEL": MODEL_DEFAULT,
        "API_KEY": API_KEY_DEFAULT,
        "UNDO_MAX_DEPTH": UNDO_MAX_DEPTH_DEFAULT,
        "REQUEST_TIMEOUT_SECONDS": REQUEST_TIMEOUT_DEFAULT,
        "LOG_LEVEL": LOG_LEVEL_DEFAULT,
    }

    if not os.path.exists(CONFIG_JSON):
        return cfg

    try:
        with open(CONFIG_JSON, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return cfg
    if not isinstance(data, dict):
        return cfg

    model = data.get("model")
    if isinstance(model, str) and model.strip():
        cfg["MODEL"] = model.strip()

    api_key = data.get("api_key")
    if isinstance(api_key, str) and api_key.strip():
        cfg["API_KEY"] = api_key.strip()

    depth = data.get("undo_max_depth")
    if isinstance(depth, int) and not isinstance(depth, bool) and depth >= 2:
        cfg["UNDO_MAX_DEPTH"] = depth

    timeout = data.get("request_timeout_seconds")
    if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout > 0:
        cfg["REQUEST_TIMEOUT_SECONDS"] = float(timeout)

    level = data.get("log_level")
    if isinstance(level, str) and level.upper() in _LOG_LEVELS:
        cfg["LOG_LEVEL"] = level.upper()

    return cfg


def save_settings(**updates):
    """Merge `updates` (config.json key names) into config.json.

    Returns False when the file can't be written; the running session keeps
    the new values either way.
    """
    data = {}
    if os.path.exists(CONFIG_JSON):
        try:
            with open(CONFIG_JSON, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                data = loaded
        except (OSError, ValueError):
            data = {}
    data.update({k: v for k, v in updates.items() if v is not None})
    try:
        os.makedirs(CONFIG_DIR, exist_ok=True)
        with open(CONFIG_JSON, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except OSError:
        return False
    return True
