"""JSON settings store behaviour."""

import json

import pytest

from shapebook.settings_models import SETTINGS_ENV_VAR, SettingsPaths, default_settings
from shapebook.settings_store import JsonSettingsStore, SettingsStoreError, lookup, with_defaults


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_missing_file_loads_defaults_and_marks_dirty(tmp_path):
    store = JsonSettingsStore(tmp_path / "settings.json")
    data = store.load()
    assert data == default_settings()
    assert store.dirty
    assert store.last_error is None


def test_save_writes_defaults_for_next_start(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    store = JsonSettingsStore(path)
    store.load()
    store.save()
    assert not store.dirty

    reloaded = JsonSettingsStore(path)
    reloaded.load()
    assert not reloaded.dirty
    assert reloaded.get("analyzer.program") == "shapels"
    assert reloaded.get("hover.gap_px") == 4.0


def test_partial_file_is_merged_with_defaults(tmp_path):
    path = _write(tmp_path / "settings.json", {"editor": {"font_size": 14}})
    store = JsonSettingsStore(path)
    store.load()
    assert store.get("editor.font_size") == 14
    assert store.get("editor.font_family") == "Monospace"
    assert not store.dirty


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_unreadable_file_falls_back_to_defaults(tmp_path, content):
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")
    store = JsonSettingsStore(path)
    assert store.load() == default_settings()
    assert store.last_error
    assert path.read_text(encoding="utf-8") == content


def test_typed_getters(tmp_path):
    path = _write(
        tmp_path / "settings.json",
        {
            "analyzer": {"debounce_ms": "oops", "timeout_s": 99999, "args": "check --json"},
            "editor": {"font_size": 300},
        },
    )
    store = JsonSettingsStore(path)
    store.load()
    assert store.get_int("analyzer.debounce_ms", 150) == 150
    assert store.get_int("editor.font_size", 11, maximum=72) == 72
    assert store.get_float("hover.gap_px", 4.0, minimum=10.0) == 10.0
    assert store.get_float("analyzer.timeout_s", 10.0) == 99999.0
    assert store.get_str_list("analyzer.args") == ["check", "--json"]
    assert store.get_str_list("editor.font_size", ["x"]) == ["x"]


def test_save_failure_raises(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    store = JsonSettingsStore(blocker / "settings.json")
    store.load()
    with pytest.raises(SettingsStoreError):
        store.save()


def test_with_defaults_keeps_explicit_values():
    merged = with_defaults({"hover": {"enabled": False}}, {"hover": {"enabled": True, "gap_px": 4.0}})
    assert merged == {"hover": {"enabled": False, "gap_px": 4.0}}


def test_lookup_dotted_keys():
    data = {"hover": {"enabled": False}, "flat": 3}
    assert lookup(data, "hover.enabled") is False
    assert lookup(data, "hover.missing", "d") == "d"
    assert lookup(data, "flat.deeper", "d") == "d"
    assert lookup(data, "") is data


def test_env_var_overrides_settings_path(tmp_path, monkeypatch):
    target = tmp_path / "custom.json"
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(target))
    assert SettingsPaths.default().settings_file == target
