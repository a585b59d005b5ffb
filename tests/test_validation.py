"""Tests for theme validation."""

from __future__ import annotations

import pytest

from formtheme.core.scales import TYPOGRAPHY_SCALES
from formtheme.themes.defaults import create_dark_theme, create_default_theme, create_high_contrast_theme
from formtheme.themes.serialization import theme_to_dict, to_document
from formtheme.themes.validation import (
    validate_advanced_typography,
    validate_background,
    validate_button_customization,
    validate_color_palette,
    validate_colors,
    validate_contrast,
    validate_theme,
)


def _fields(issues) -> list[str]:
    return [issue.field for issue in issues]


@pytest.mark.parametrize("factory", [create_default_theme, create_dark_theme, create_high_contrast_theme])
def test_builtin_themes_are_valid(factory) -> None:
    assert validate_theme(factory()).is_valid


def test_identity_is_required() -> None:
    result = validate_theme({"id": "", "name": "  "})
    assert _fields(result.errors) == ["id", "name"]


def test_partial_document_only_checks_present_sections() -> None:
    assert validate_theme({"id": "partial", "name": "Partial"}).is_valid


def test_invalid_legacy_color_reported_with_path() -> None:
    result = validate_colors({"primary": "blue-ish", "background": "#fff"})
    assert _fields(result.errors) == ["colors.primary"]
    assert result.errors[0].value == "blue-ish"


def test_palette_requires_every_role() -> None:
    palette = theme_to_dict(create_default_theme())["colors"]
    result = validate_color_palette({"primary": palette["primary"]})
    assert "colorPalette.secondary" in _fields(result.errors)
    assert "colorPalette.primary" not in _fields(result.errors)


@pytest.mark.parametrize("height", [0, 20, 43.9, "44"])
def test_button_min_height_below_44_is_invalid(height: object) -> None:
    result = validate_button_customization({"minHeight": height})
    assert _fields(result.errors) == ["buttonCustomization.minHeight"]


def test_button_variant_and_opacity_checked() -> None:
    result = validate_button_customization({"variant": "neon", "hoverOpacity": 1.5, "minHeight": 48})
    assert set(_fields(result.errors)) == {"buttonCustomization.variant", "buttonCustomization.hoverOpacity"}


def test_advanced_typography_checks_fonts_scale_and_mapping() -> None:
    document = theme_to_dict(create_default_theme())["advancedTypography"]
    document["scale"] = "huge"
    document["primary"] = {"family": ""}
    document["mapping"]["formTitle"]["fontWeight"] = 950
    document["mapping"]["tooltip"] = document["mapping"]["caption"]

    fields = _fields(validate_advanced_typography(document).errors)

    assert "advancedTypography.scale" in fields
    assert "advancedTypography.primary.family" in fields
    assert "advancedTypography.mapping.formTitle.fontWeight" in fields
    assert "advancedTypography.mapping.tooltip" in fields


def test_advanced_typography_warns_on_low_minimum_and_scale() -> None:
    document = theme_to_dict(create_default_theme())["advancedTypography"]
    document["accessibility"]["minBodySize"] = 14

    result = validate_advanced_typography(document)

    assert result.is_valid
    assert "advancedTypography.accessibility.minBodySize" in _fields(result.warnings)
    assert any("Extra small" in issue.message for issue in result.warnings)


def test_background_type_and_animation() -> None:
    result = validate_background({"type": "animated"})
    assert _fields(result.errors) == ["backgroundConfig.animated"]
    result = validate_background({"type": "pattern", "pattern": "stars", "patternColor": "nope"})
    assert set(_fields(result.errors)) == {"backgroundConfig.pattern", "backgroundConfig.patternColor"}


def test_low_contrast_produces_warning_not_error() -> None:
    document = theme_to_dict(create_default_theme())
    document["colors"]["textPrimary"] = "#DDDDDD"

    result = validate_theme(document)

    assert result.is_valid
    assert "colors.textPrimary" in _fields(result.warnings)


def test_contrast_threshold_follows_accessibility_setting() -> None:
    document = theme_to_dict(create_high_contrast_theme())
    document["colors"]["textPrimary"] = "#6B6B6B"  # about 5.3:1 on white
    assert "colors.textPrimary" in _fields(validate_contrast(document).warnings)

    relaxed = theme_to_dict(create_default_theme())
    relaxed["colors"]["textPrimary"] = "#6B6B6B"
    assert validate_contrast(relaxed).warnings == ()


def test_non_mapping_input_raises_type_error() -> None:
    with pytest.raises(TypeError):
        validate_theme(["not", "a", "theme"])
    with pytest.raises(TypeError):
        validate_theme({"id": "x", "name": "x", "colors": "red"})


@pytest.mark.parametrize("value", ["rgb(foo)", "rgb(1, 2)", "hsl(a, b, c)"])
def test_malformed_functional_color_is_an_error(value: str) -> None:
    result = validate_theme({"id": "x", "name": "X", "colors": {"textPrimary": value, "background": "#ffffff"}})

    assert _fields(result.errors) == ["colors.textPrimary"]
    assert result.warnings == ()


def test_custom_scale_sizes_must_be_positive() -> None:
    document = theme_to_dict(create_default_theme())["advancedTypography"]
    custom = to_document(TYPOGRAPHY_SCALES["medium"])
    custom["baseSize"] = -16
    custom["sizes"] = {key: -5 for key in custom["sizes"]}
    document["customScale"] = custom

    result = validate_advanced_typography(document)

    fields = _fields(result.errors)
    assert not result.is_valid
    assert "advancedTypography.customScale.baseSize" in fields
    assert "advancedTypography.customScale.sizes.base" in fields
    assert len(fields) == 1 + len(custom["sizes"])
