"""Theme persistence over a pluggable key/value store."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Callable, Protocol

from formtheme.errors import ErrorCode, FormThemeError, ThemeValidationError
from formtheme.themes.constants import EXPORT_SCHEMA_VERSION, SUPPORTED_SCHEMA_MAJOR
from formtheme.themes.models import Theme
from formtheme.themes.serialization import format_datetime, theme_from_dict, theme_to_dict
from formtheme.themes.validation import validate_theme

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "form-theme-"
_PROBE_KEY = "__storage_test__"
EXPORT_META_KEYS = ("schemaVersion", "exportedAt")


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryKeyValueStore:
    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class ThemePersistence:
    """Save, load, export and import themes.

    Stored keys are ``prefix + key``. When the backing store raises
    ``OSError`` the adapter switches to an in-memory store for the rest of
    its lifetime and reports ``degraded``.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        prefix: str = DEFAULT_PREFIX,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store: KeyValueStore = store if store is not None else MemoryKeyValueStore()
        self._prefix = prefix
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._degraded = False

    @property
    def degraded(self) -> bool:
        return self._degraded

    @property
    def prefix(self) -> str:
        return self._prefix

    def save(self, theme: Theme, key: str | None = None) -> None:
        text = json.dumps(theme_to_dict(theme), ensure_ascii=False)
        storage_key = self._key(key or theme.id)
        try:
            self._store.set(storage_key, text)
        except OSError as exc:
            self._degrade(exc)
            self._store.set(storage_key, text)

    def load(self, key: str) -> Theme | None:
        try:
            text = self._store.get(self._key(key))
        except OSError as exc:
            self._degrade(exc)
            return None
        if text is None:
            return None
        try:
            return parse_theme_document(text)
        except FormThemeError as exc:
            logger.error("stored theme %r could not be loaded: %s", key, exc)
            return None

    def load_all(self) -> dict[str, Theme]:
        """All stored themes keyed by theme id."""
        try:
            keys = self._store.keys()
        except OSError as exc:
            self._degrade(exc)
            keys = self._store.keys()
        themes: dict[str, Theme] = {}
        for storage_key in keys:
            if not storage_key.startswith(self._prefix):
                continue
            theme = self.load(storage_key[len(self._prefix):])
            if theme is not None:
                themes[theme.id] = theme
        return themes

    def remove(self, key: str) -> None:
        try:
            self._store.remove(self._key(key))
        except OSError as exc:
            self._degrade(exc)
            self._store.remove(self._key(key))

    def is_storage_available(self) -> bool:
        try:
            self._store.set(_PROBE_KEY, _PROBE_KEY)
            self._store.remove(_PROBE_KEY)
        except OSError:
            return False
        return True

    def export_as_text(self, theme: Theme) -> str:
        document = theme_to_dict(theme)
        document["schemaVersion"] = EXPORT_SCHEMA_VERSION
        document["exportedAt"] = format_datetime(self._clock())
        return json.dumps(document, indent=2, ensure_ascii=False)

    def import_from_text(self, text: str) -> Theme | None:
        try:
            return parse_theme_document(text)
        except FormThemeError as exc:
            logger.error("theme import rejected: %s", exc)
            return None

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _degrade(self, exc: OSError) -> None:
        if self._degraded:
            raise exc
        logger.warning("theme storage unavailable, keeping themes in memory: %s", exc)
        self._store = MemoryKeyValueStore()
        self._degraded = True


def parse_theme_document(text: str) -> Theme:
    """Parse and validate an exported or stored JSON theme document."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise FormThemeError(ErrorCode.IMPORT_MALFORMED, details={"reason": str(exc)}) from exc
    return parse_theme_data(data)


def parse_theme_data(data: object) -> Theme:
    """Validate already decoded theme data and build the theme.

    Sections that are absent are filled with the built-in defaults.
    Raises FormThemeError describing why the data was rejected.
    """
    if not isinstance(data, dict):
        raise FormThemeError(
            ErrorCode.IMPORT_MALFORMED,
            details={"reason": f"expected a JSON object, got {type(data).__name__}"},
        )

    version = data.get("schemaVersion")
    if version is not None and _schema_major(version) != SUPPORTED_SCHEMA_MAJOR:
        raise FormThemeError(ErrorCode.IMPORT_UNSUPPORTED_VERSION, details={"schemaVersion": version})
    document = {key: value for key, value in data.items() if key not in EXPORT_META_KEYS}

    try:
        result = validate_theme(document)
    except TypeError as exc:
        raise FormThemeError(ErrorCode.IMPORT_MALFORMED, details={"reason": str(exc)}) from exc
    if not result.is_valid:
        raise FormThemeError(
            ErrorCode.VALIDATION_FAILED,
            details={"errors": [f"{issue.field}: {issue.message}" for issue in result.errors]},
        )

    try:
        return theme_from_dict(document)
    except ThemeValidationError as exc:
        raise FormThemeError(ErrorCode.IMPORT_MALFORMED, details={"reason": str(exc)}) from exc


def _schema_major(version: object) -> int | None:
    if not isinstance(version, str):
        return None
    head = version.split(".", 1)[0]
    return int(head) if head.isdigit() else None
