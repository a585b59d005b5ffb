"""Tests for theme storage, export and import."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from formtheme.errors import ErrorCode, FormThemeError
from formtheme.themes.defaults import create_dark_theme, create_default_theme, create_high_contrast_theme
from formtheme.themes.models import ThemeColors
from formtheme.themes.persistence import (
    MemoryKeyValueStore,
    ThemePersistence,
    parse_theme_data,
    parse_theme_document,
)

EXPORTED_AT = datetime(2024, 3, 2, 10, 30, tzinfo=timezone.utc)


def _broken_store() -> MagicMock:
    store = MagicMock()
    store.set.side_effect = OSError("quota exceeded")
    store.get.side_effect = OSError("quota exceeded")
    store.remove.side_effect = OSError("quota exceeded")
    store.keys.side_effect = OSError("quota exceeded")
    return store


def test_save_and_load_use_prefixed_keys() -> None:
    store = MemoryKeyValueStore()
    persistence = ThemePersistence(store)
    theme = create_dark_theme()
    persistence.save(theme)
    assert store.keys() == ["form-theme-dark"]
    assert persistence.load("dark") == theme


def test_save_under_explicit_key() -> None:
    persistence = ThemePersistence(prefix="custom-")
    theme = create_default_theme()
    persistence.save(theme, "current")
    assert persistence.load("current") == theme
    assert persistence.load("default") is None


def test_load_all_skips_foreign_and_broken_entries() -> None:
    store = MemoryKeyValueStore()
    persistence = ThemePersistence(store)
    persistence.save(create_default_theme())
    persistence.save(create_high_contrast_theme())
    store.set("form-theme-broken", "{not json")
    store.set("other-app-setting", "1")
    assert sorted(persistence.load_all()) == ["default", "high-contrast"]


def test_remove_deletes_entry() -> None:
    persistence = ThemePersistence()
    persistence.save(create_default_theme())
    persistence.remove("default")
    assert persistence.load("default") is None


def test_storage_failure_degrades_to_memory() -> None:
    persistence = ThemePersistence(_broken_store())
    assert not persistence.is_storage_available()
    theme = create_default_theme()
    persistence.save(theme)
    assert persistence.degraded
    assert persistence.load("default") == theme
    assert persistence.is_storage_available()


def test_load_on_broken_store_returns_none() -> None:
    persistence = ThemePersistence(_broken_store())
    assert persistence.load("default") is None
    assert persistence.degraded


class TestExportImport:
    """Export documents and the import path."""

    def test_export_includes_schema_metadata(self) -> None:
        persistence = ThemePersistence(clock=lambda: EXPORTED_AT)
        document = json.loads(persistence.export_as_text(create_default_theme()))
        assert document["schemaVersion"] == "2.0.0"
        assert document["exportedAt"].startswith("2024-03-02T10:30:00")
        assert document["id"] == "default"
        assert "advancedTypography" in document

    def test_export_then_import_gives_equal_theme(self) -> None:
        persistence = ThemePersistence()
        theme = create_high_contrast_theme()
        assert persistence.import_from_text(persistence.export_as_text(theme)) == theme

    def test_missing_sections_take_defaults(self) -> None:
        theme = parse_theme_data({"id": "minimal", "name": "Minimal"})
        assert theme.colors == ThemeColors()
        assert theme.advanced_typography is None

    def test_document_without_schema_version_is_accepted(self) -> None:
        assert parse_theme_document('{"id": "legacy", "name": "Legacy"}').id == "legacy"

    @pytest.mark.parametrize("version", ["1.0.0", "3.1.0", "two"])
    def test_unsupported_schema_version_rejected(self, version: str) -> None:
        text = json.dumps({"id": "x", "name": "X", "schemaVersion": version})
        with pytest.raises(FormThemeError) as excinfo:
            parse_theme_document(text)
        assert excinfo.value.code is ErrorCode.IMPORT_UNSUPPORTED_VERSION

    @pytest.mark.parametrize("text", ["{not json", "[1, 2, 3]", '"theme"'])
    def test_malformed_documents_rejected(self, text: str) -> None:
        with pytest.raises(FormThemeError) as excinfo:
            parse_theme_document(text)
        assert excinfo.value.code is ErrorCode.IMPORT_MALFORMED

    def test_invalid_values_list_every_error(self) -> None:
        text = json.dumps({
            "id": "bad",
            "name": "Bad",
            "colors": {"primary": "not-a-color"},
            "buttonCustomization": {"minHeight": 30},
        })
        with pytest.raises(FormThemeError) as excinfo:
            parse_theme_document(text)
        assert excinfo.value.code is ErrorCode.VALIDATION_FAILED
        errors = excinfo.value.details["errors"]
        assert any(error.startswith("colors.primary") for error in errors)
        assert any(error.startswith("buttonCustomization.minHeight") for error in errors)

    def test_unknown_keys_rejected(self) -> None:
        text = json.dumps({"id": "x", "name": "X", "sparkle": True})
        with pytest.raises(FormThemeError) as excinfo:
            parse_theme_document(text)
        assert excinfo.value.code is ErrorCode.IMPORT_MALFORMED

    def test_import_from_text_returns_none_on_failure(self) -> None:
        assert ThemePersistence().import_from_text("{") is None

    def test_malformed_functional_color_fails_validation(self) -> None:
        persistence = ThemePersistence()
        document = json.loads(persistence.export_as_text(create_default_theme()))
        document["colors"]["textPrimary"] = "rgb(1, 2)"
        with pytest.raises(FormThemeError) as excinfo:
            parse_theme_document(json.dumps(document))
        assert excinfo.value.code is ErrorCode.VALIDATION_FAILED
        assert persistence.import_from_text(json.dumps(document)) is None
