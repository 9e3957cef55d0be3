import json

import pytest

from quickc.inline_run.settings_schema import (
    NormalizedQuickCConfig,
    default_quickc_settings,
    normalize_quickc_settings,
)
from quickc.settings_models import SETTINGS_PATH_ENV, default_settings, default_settings_path
from quickc.settings_store import JsonSettingsStore, SettingsStoreError, deep_merge_defaults, dot_get, dot_set


def test_defaults_match_documented_options():
    defaults = default_quickc_settings()
    assert defaults["executionDelay"] == 300
    assert defaults["compilerPath"] == "gcc"
    assert defaults["inlineColor"] == "grey"
    assert defaults["detectionPolicy"] == "cursor_line"
    assert defaults["triggerMarkers"] == ["printf", "scanf"]


def test_normalize_clamps_and_falls_back():
    n = normalize_quickc_settings(
        {
            "executionDelay": "-50",
            "compilerPath": "   ",
            "inlineColor": "",
            "detectionPolicy": "EVERYWHERE",
            "triggerMarkers": "printf",
            "runTimeoutMs": "not-a-number",
        }
    )
    assert n["executionDelay"] == 0
    assert n["compilerPath"] == "gcc"
    assert n["inlineColor"] == "grey"
    assert n["detectionPolicy"] == "cursor_line"
    assert n["triggerMarkers"] == ["printf", "scanf"]
    assert n["runTimeoutMs"] == 0


def test_normalize_keeps_valid_values():
    n = normalize_quickc_settings(
        {
            "executionDelay": 750,
            "compilerPath": "/usr/bin/clang",
            "compilerArgs": ["-std=c11", "", "-Wall"],
            "detectionPolicy": "Document",
            "triggerMarkers": ["puts"],
        }
    )
    assert n["executionDelay"] == 750
    assert n["compilerPath"] == "/usr/bin/clang"
    assert n["compilerArgs"] == ["-std=c11", "-Wall"]
    assert n["detectionPolicy"] == "document"
    assert n["triggerMarkers"] == ["puts"]


def test_normalized_config_from_mapping():
    cfg = NormalizedQuickCConfig.from_mapping({"runTimeoutMs": 1500, "compilerArgs": ["-O2"]})
    assert cfg.execution_delay_ms == 300
    assert cfg.compiler_args == ("-O2",)
    assert cfg.run_timeout_s == 1.5
    assert NormalizedQuickCConfig.from_mapping(None).run_timeout_s is None


def test_dot_helpers():
    data = {}
    dot_set(data, "quickc.compilerPath", "clang")
    assert dot_get(data, "quickc.compilerPath") == "clang"
    assert dot_get(data, "quickc.missing", "fallback") == "fallback"
    with pytest.raises(ValueError):
        dot_set(data, "", 1)


def test_deep_merge_keeps_explicit_values():
    merged = deep_merge_defaults({"quickc": {"inlineColor": "green"}}, default_settings())
    assert merged["quickc"]["inlineColor"] == "green"
    assert merged["quickc"]["compilerPath"] == "gcc"


def test_store_load_missing_file_uses_defaults(tmp_path):
    store = JsonSettingsStore(tmp_path / "settings.json")
    data = store.load()
    assert data["quickc"]["executionDelay"] == 300
    assert store.dirty is True


def test_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    store = JsonSettingsStore(path)
    store.load()
    assert store.set("quickc.inlineColor", "#88aa88") is True
    assert store.set("quickc.inlineColor", "#88aa88") is False
    store.save()

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["quickc"]["inlineColor"] == "#88aa88"

    reloaded = JsonSettingsStore(path)
    reloaded.load()
    assert reloaded.get("quickc.inlineColor") == "#88aa88"
    assert reloaded.dirty is False


def test_store_invalid_json_keeps_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{ not json", encoding="utf-8")
    store = JsonSettingsStore(path)
    store.load()
    assert store.last_error
    assert store.get("quickc.compilerPath") == "gcc"
    assert path.read_text(encoding="utf-8") == "{ not json"


def test_store_non_object_root(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]", encoding="utf-8")
    store = JsonSettingsStore(path)
    store.load()
    assert "must be a JSON object" in store.last_error


def test_store_save_failure_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    store = JsonSettingsStore(blocker / "settings.json")
    store.load()
    with pytest.raises(SettingsStoreError):
        store.save()


def test_settings_path_env_override(tmp_path, monkeypatch):
    target = tmp_path / "custom.json"
    monkeypatch.setenv(SETTINGS_PATH_ENV, str(target))
    assert default_settings_path() == target
    monkeypatch.delenv(SETTINGS_PATH_ENV)
    assert default_settings_path().name == "settings.json"
