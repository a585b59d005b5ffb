"""Engine settings via QSettings."""

from __future__ import annotations

import os
from pathlib import Path

from PySide6.QtCore import QSettings

from formtheme.core.fonts import DEFAULT_MANIFEST_URL, DEFAULT_TIMEOUT_MS

DEFAULT_DEBOUNCE_MS = 16
DEFAULT_AUTOSAVE_DELAY_MS = 1000
DEFAULT_STORAGE_PREFIX = "form-theme-"
DEFAULT_STORAGE_KEY = "current"


class EngineSettings:
    """Wraps QSettings for persistent engine configuration."""

    def __init__(self, qsettings: QSettings | None = None) -> None:
        self._qs = qsettings if qsettings is not None else QSettings("FormTheme", "FormTheme")

    @property
    def qsettings(self) -> QSettings:
        return self._qs

    # -- style application --

    @property
    def debounce_ms(self) -> int:
        return self._bounded_int("engine/debounce_ms", DEFAULT_DEBOUNCE_MS, 0, 1000)

    @debounce_ms.setter
    def debounce_ms(self, value: int) -> None:
        self._qs.setValue("engine/debounce_ms", _clamp(value, DEFAULT_DEBOUNCE_MS, 0, 1000))

    @property
    def autosave_delay_ms(self) -> int:
        return self._bounded_int("engine/autosave_delay_ms", DEFAULT_AUTOSAVE_DELAY_MS, 0, 60_000)

    @autosave_delay_ms.setter
    def autosave_delay_ms(self, value: int) -> None:
        self._qs.setValue("engine/autosave_delay_ms", _clamp(value, DEFAULT_AUTOSAVE_DELAY_MS, 0, 60_000))

    # -- fonts --

    @property
    def font_timeout_ms(self) -> int:
        return self._bounded_int("fonts/timeout_ms", DEFAULT_TIMEOUT_MS, 100, 60_000)

    @font_timeout_ms.setter
    def font_timeout_ms(self, value: int) -> None:
        self._qs.setValue("fonts/timeout_ms", _clamp(value, DEFAULT_TIMEOUT_MS, 100, 60_000))

    @property
    def font_manifest_url(self) -> str:
        raw = self._qs.value("fonts/manifest_url", DEFAULT_MANIFEST_URL, type=str)
        value = (raw or "").strip()
        if not value.startswith(("https://", "http://")) or "{family}" not in value:
            return DEFAULT_MANIFEST_URL
        return value

    @font_manifest_url.setter
    def font_manifest_url(self, value: str) -> None:
        cleaned = (value or "").strip()
        if not cleaned.startswith(("https://", "http://")) or "{family}" not in cleaned:
            cleaned = DEFAULT_MANIFEST_URL
        self._qs.setValue("fonts/manifest_url", cleaned)

    # -- storage --

    @property
    def storage_prefix(self) -> str:
        raw = self._qs.value("storage/prefix", DEFAULT_STORAGE_PREFIX, type=str)
        value = (raw or "").strip()
        return value or DEFAULT_STORAGE_PREFIX

    @storage_prefix.setter
    def storage_prefix(self, value: str) -> None:
        cleaned = (value or "").strip() or DEFAULT_STORAGE_PREFIX
        self._qs.setValue("storage/prefix", cleaned)

    @property
    def storage_key(self) -> str:
        raw = self._qs.value("storage/key", DEFAULT_STORAGE_KEY, type=str)
        value = (raw or "").strip()
        return value or DEFAULT_STORAGE_KEY

    @storage_key.setter
    def storage_key(self, value: str) -> None:
        cleaned = (value or "").strip() or DEFAULT_STORAGE_KEY
        self._qs.setValue("storage/key", cleaned)

    # -- helpers --

    @property
    def app_data_dir(self) -> Path:
        path = self._app_data_dir()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _bounded_int(self, key: str, default: int, minimum: int, maximum: int) -> int:
        raw = self._qs.value(key, default)
        return _clamp(raw, default, minimum, maximum)

    @staticmethod
    def _app_data_dir() -> Path:
        base = Path(os.environ.get("APPDATA", Path.home() / ".config"))
        return base / "formtheme"


def _clamp(raw: object, default: int, minimum: int, maximum: int) -> int:
    try:
        value = int(raw)  # QSettings ini backends hand back strings
    except (TypeError, ValueError):
        return default
    return max(minimum, min(maximum, value))


class QSettingsKeyValueStore:
    """Key/value store for serialized themes under the ``themes/`` group."""

    def __init__(self, qsettings: QSettings, group: str = "themes") -> None:
        self._qs = qsettings
        self._group = group

    def get(self, key: str) -> str | None:
        raw = self._qs.value(self._path(key))
        return raw if isinstance(raw, str) else None

    def set(self, key: str, value: str) -> None:
        self._qs.setValue(self._path(key), value)
        self._check()

    def remove(self, key: str) -> None:
        self._qs.remove(self._path(key))
        self._check()

    def keys(self) -> list[str]:
        self._qs.beginGroup(self._group)
        try:
            return list(self._qs.childKeys())
        finally:
            self._qs.endGroup()

    def _path(self, key: str) -> str:
        return f"{self._group}/{key}"

    def _check(self) -> None:
        self._qs.sync()
        if self._qs.status() == QSettings.Status.AccessError:
            raise OSError(f"settings file is not writable: {self._qs.fileName()}")
