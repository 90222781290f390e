import json
import tempfile
from pathlib import Path

import pytest

import config_paths


def _with_config(tmp, data=None, raw=None):
    cfg_dir = Path(tmp) / "csvpilot"
    cfg_dir.mkdir(parents=True, exist_ok=True)
    cfg_path = cfg_dir / "config.json"
    if raw is not None:
        cfg_path.write_text(raw)
    elif data is not None:
        cfg_path.write_text(json.dumps(data))
    return cfg_dir, cfg_path


def _load(cfg_dir, cfg_path):
    orig_dir = config_paths.CONFIG_DIR
    orig_json = config_paths.CONFIG_JSON
    try:
        config_paths.CONFIG_DIR = str(cfg_dir)
        config_paths.CONFIG_JSON = str(cfg_path)
        return config_paths.load_config()
    finally:
        config_paths.CONFIG_DIR = orig_dir
        config_paths.CONFIG_JSON = orig_json


def test_load_config_defaults_without_json():
    with tempfile.TemporaryDirectory() as tmp:
        cfg = _load(*_with_config(tmp))
        assert cfg["MODEL"] == config_paths.MODEL_DEFAULT
        assert cfg["API_KEY"] is None
        assert cfg["UNDO_MAX_DEPTH"] == 50
        assert cfg["REQUEST_TIMEOUT_SECONDS"] == 60.0
        assert cfg["LOG_LEVEL"] == "INFO"


def test_load_config_reads_json_overrides():
    with tempfile.TemporaryDirectory() as tmp:
        cfg = _load(
            *_with_config(
                tmp,
                {
                    "model": " gpt-4.1-mini ",
                    "api_key": "sk-test",
                    "undo_max_depth": 10,
                    "request_timeout_seconds": 5,
                    "log_level": "debug",
                },
            )
        )
        assert cfg["MODEL"] == "gpt-4.1-mini"
        assert cfg["API_KEY"] == "sk-test"
        assert cfg["UNDO_MAX_DEPTH"] == 10
        assert cfg["REQUEST_TIMEOUT_SECONDS"] == 5.0
        assert cfg["LOG_LEVEL"] == "DEBUG"


@pytest.mark.parametrize(
    "data",
    [
        {"model": ""},
        {"api_key": "   "},
        {"undo_max_depth": 1},
        {"undo_max_depth": True},
        {"undo_max_depth": "20"},
        {"request_timeout_seconds": 0},
        {"request_timeout_seconds": -3},
        {"log_level": "LOUD"},
    ],
)
def test_invalid_values_keep_defaults(data):
    with tempfile.TemporaryDirectory() as tmp:
        cfg = _load(*_with_config(tmp, data))
        assert cfg["MODEL"] == config_paths.MODEL_DEFAULT
        assert cfg["API_KEY"] is None
        assert cfg["UNDO_MAX_DEPTH"] == config_paths.UNDO_MAX_DEPTH_DEFAULT
        assert cfg["REQUEST_TIMEOUT_SECONDS"] == config_paths.REQUEST_TIMEOUT_DEFAULT
        assert cfg["LOG_LEVEL"] == config_paths.LOG_LEVEL_DEFAULT


@pytest.mark.parametrize("raw", ["{not json", "[1, 2, 3]"])
def test_unreadable_config_falls_back_to_defaults(raw):
    with tempfile.TemporaryDirectory() as tmp:
        cfg = _load(*_with_config(tmp, raw=raw))
        assert cfg["MODEL"] == config_paths.MODEL_DEFAULT
        assert cfg["UNDO_MAX_DEPTH"] == config_paths.UNDO_MAX_DEPTH_DEFAULT


def _patched(cfg_dir, cfg_path, fn):
    orig_dir = config_paths.CONFIG_DIR
    orig_json = config_paths.CONFIG_JSON
    try:
        config_paths.CONFIG_DIR = str(cfg_dir)
        config_paths.CONFIG_JSON = str(cfg_path)
        return fn()
    finally:
        config_paths.CONFIG_DIR = orig_dir
        config_paths.CONFIG_JSON = orig_json


def test_save_settings_merges_into_existing_config():
    with tempfile.TemporaryDirectory() as tmp:
        cfg_dir, cfg_path = _with_config(tmp, {"undo_max_depth": 10, "model": "old"})
        assert _patched(cfg_dir, cfg_path, lambda: config_paths.save_settings(model="new", api_key="sk-1"))
        cfg = _load(cfg_dir, cfg_path)
        assert cfg["MODEL"] == "new"
        assert cfg["API_KEY"] == "sk-1"
        assert cfg["UNDO_MAX_DEPTH"] == 10


def test_save_settings_replaces_unreadable_config():
    with tempfile.TemporaryDirectory() as tmp:
        cfg_dir, cfg_path = _with_config(tmp, raw="{broken")
        assert _patched(cfg_dir, cfg_path, lambda: config_paths.save_settings(model="m"))
        assert json.loads(cfg_path.read_text()) == {"model": "m"}
