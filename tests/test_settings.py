"""Tests for engine settings and the QSettings-backed theme store."""

from __future__ import annotations

from PySide6.QtCore import QSettings

from formtheme.config.settings import EngineSettings, QSettingsKeyValueStore, _clamp
from formtheme.core.fonts import DEFAULT_MANIFEST_URL
from formtheme.themes.defaults import create_dark_theme
from formtheme.themes.persistence import ThemePersistence


def test_defaults(ini_settings) -> None:
    settings = EngineSettings(ini_settings)
    assert settings.debounce_ms == 16
    assert settings.autosave_delay_ms == 1000
    assert settings.font_timeout_ms == 3000
    assert settings.font_manifest_url == DEFAULT_MANIFEST_URL
    assert settings.storage_prefix == "form-theme-"
    assert settings.storage_key == "current"


def test_values_are_clamped(ini_settings) -> None:
    settings = EngineSettings(ini_settings)
    settings.debounce_ms = 5000
    settings.font_timeout_ms = 10
    assert settings.debounce_ms == 1000
    assert settings.font_timeout_ms == 100


def test_values_survive_reopen(tmp_path) -> None:
    path = str(tmp_path / "engine.ini")
    first = EngineSettings(QSettings(path, QSettings.Format.IniFormat))
    first.autosave_delay_ms = 2500
    first.storage_key = "  draft  "
    first.qsettings.sync()

    reopened = EngineSettings(QSettings(path, QSettings.Format.IniFormat))
    assert reopened.autosave_delay_ms == 2500
    assert reopened.storage_key == "draft"


def test_manifest_url_requires_family_placeholder(ini_settings) -> None:
    settings = EngineSettings(ini_settings)
    settings.font_manifest_url = "https://fonts.example.com/css?family=Inter"
    assert settings.font_manifest_url == DEFAULT_MANIFEST_URL
    settings.font_manifest_url = "https://fonts.example.com/css?family={family}"
    assert settings.font_manifest_url == "https://fonts.example.com/css?family={family}"


def test_hand_edited_garbage_falls_back(ini_settings) -> None:
    ini_settings.setValue("engine/debounce_ms", "soon")
    ini_settings.setValue("fonts/manifest_url", "ftp://fonts/{family}")
    settings = EngineSettings(ini_settings)
    assert settings.debounce_ms == 16
    assert settings.font_manifest_url == DEFAULT_MANIFEST_URL


def test_app_data_dir_follows_appdata(tmp_path, monkeypatch, ini_settings) -> None:
    monkeypatch.setenv("APPDATA", str(tmp_path))
    path = EngineSettings(ini_settings).app_data_dir
    assert path == tmp_path / "formtheme"
    assert path.is_dir()


def test_clamp_accepts_numeric_strings() -> None:
    assert _clamp("40", 16, 0, 1000) == 40
    assert _clamp(None, 16, 0, 1000) == 16
    assert _clamp(-5, 16, 0, 1000) == 0


class TestQSettingsKeyValueStore:
    """Theme documents stored in an ini file."""

    def test_set_get_remove(self, ini_settings) -> None:
        store = QSettingsKeyValueStore(ini_settings)
        store.set("form-theme-current", '{"id": "x"}')
        assert store.get("form-theme-current") == '{"id": "x"}'
        assert store.keys() == ["form-theme-current"]
        store.remove("form-theme-current")
        assert store.get("form-theme-current") is None
        assert store.keys() == []

    def test_backs_theme_persistence(self, ini_settings) -> None:
        persistence = ThemePersistence(QSettingsKeyValueStore(ini_settings))
        theme = create_dark_theme()
        persistence.save(theme, "current")
        assert persistence.load("current") == theme
        assert not persistence.degraded
