from __future__ import annotations

import json
import os

import pytest

from scrollback.settings import DEFAULT_DB_PATH, PROJECT_ROOT, load_settings


def _write(tmp_path, payload) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_missing_file_uses_defaults(tmp_path) -> None:
    settings = load_settings(str(tmp_path / "absent.json"))

    assert settings.pagination.batch_size == 20
    assert settings.pagination.max_jump_attempts == 10
    assert settings.search.highlight_open == "<mark>"
    assert settings.read_state.auto_mark_read is True
    assert settings.db_path == DEFAULT_DB_PATH
    assert settings.logging == {}


def test_values_are_read_from_sections(tmp_path) -> None:
    path = _write(
        tmp_path,
        {
            "pagination": {"batch_size": 50, "max_jump_attempts": 4, "load_more_threshold": 0},
            "search": {"highlight_open": "**", "highlight_close": "**"},
            "read_state": {"auto_mark_read": False},
            "view": {"width": 100, "height": 30},
            "storage": {"db_path": "data/reads.db"},
            "logging": {"enabled": True, "level": "DEBUG"},
        },
    )

    settings = load_settings(path)

    assert settings.pagination.batch_size == 50
    assert settings.pagination.max_jump_attempts == 4
    assert settings.pagination.load_more_threshold == 0
    assert settings.search.highlight_close == "**"
    assert settings.read_state.auto_mark_read is False
    assert settings.view.width == 100
    assert settings.view.stick_to_bottom_rows == 3
    assert settings.db_path == os.path.join(PROJECT_ROOT, "data/reads.db")
    assert settings.logging["level"] == "DEBUG"


def test_env_var_selects_config(tmp_path, monkeypatch) -> None:
    path = _write(tmp_path, {"pagination": {"batch_size": 7}})
    monkeypatch.setenv("SCROLLBACK_CONFIG", path)

    assert load_settings().pagination.batch_size == 7


@pytest.mark.parametrize(
    "payload",
    [
        {"pagination": {"batch_size": 0}},
        {"pagination": {"batch_size": "many"}},
        {"pagination": {"max_jump_attempts": True}},
        {"read_state": {"auto_mark_read": "false"}},
        {"read_state": {"auto_mark_read": 0}},
        {"search": {"highlight_open": ""}},
        {"view": "wide"},
    ],
)
def test_invalid_values_fail_fast(tmp_path, payload) -> None:
    with pytest.raises(ValueError):
        load_settings(_write(tmp_path, payload))
