"""Built-in themes and theme presets."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from typing import Callable

from formtheme.core.font_presets import default_catalog
from formtheme.core.fonts import FontFamilyConfig
from formtheme.core.scales import TYPOGRAPHY_SCALES
from formtheme.themes.constants import DARK_THEME_ID, DEFAULT_THEME_ID
from formtheme.themes.models import (
    ButtonCustomization,
    ColorPalette,
    ElementTypography,
    Theme,
    ThemeColors,
    TypographyConfig,
)
from formtheme.themes.projection import project_typography_to_legacy

# role -> (scale key, weight, family choice); line height and letter spacing follow the size key
_DEFAULT_MAPPING: dict[str, tuple[str, int, str]] = {
    "form_title": ("3xl", 700, "primary"),
    "form_description": ("lg", 400, "primary"),
    "section_title": ("2xl", 600, "primary"),
    "question_label": ("base", 500, "primary"),
    "question_description": ("sm", 400, "secondary"),
    "input_text": ("base", 400, "primary"),
    "input_placeholder": ("base", 400, "primary"),
    "button_text": ("sm", 500, "primary"),
    "help_text": ("xs", 400, "secondary"),
    "error_text": ("xs", 500, "primary"),
    "success_text": ("xs", 500, "primary"),
    "caption": ("xs", 400, "secondary"),
    "legal": ("xs", 400, "secondary"),
}

DARK_COLORS = ThemeColors(
    primary="#3B82F6",
    primary_hover="#2563EB",
    primary_active="#1D4ED8",
    primary_disabled="#1E3A8A",
    secondary="#9CA3AF",
    secondary_hover="#D1D5DB",
    secondary_active="#F3F4F6",
    background="#111827",
    surface="#1F2937",
    surface_elevated="#374151",
    overlay="rgba(0, 0, 0, 0.8)",
    text_primary="#F9FAFB",
    text_secondary="#D1D5DB",
    text_muted="#9CA3AF",
    text_inverse="#111827",
    border="#374151",
    border_hover="#4B5563",
    border_focus="#3B82F6",
    border_error="#EF4444",
    border_success="#10B981",
    error="#EF4444",
    error_hover="#F87171",
    success="#10B981",
    success_hover="#34D399",
    warning="#F59E0B",
    warning_hover="#FBBF24",
    info="#3B82F6",
    info_hover="#60A5FA",
)


def default_typography_mapping() -> dict[str, ElementTypography]:
    return {
        role: ElementTypography(
            font_size=size,
            line_height=size,
            letter_spacing=size,
            font_weight=weight,
            font_family=family,
        )
        for role, (size, weight, family) in _DEFAULT_MAPPING.items()
    }


def default_typography_config() -> TypographyConfig:
    primary, secondary, mono = default_catalog().defaults()
    return TypographyConfig(
        scale="medium",
        primary=primary,
        secondary=secondary,
        mono=mono,
        mapping=default_typography_mapping(),
    )


def default_button_customization() -> ButtonCustomization:
    return ButtonCustomization()


def default_color_palette() -> ColorPalette:
    return ColorPalette()


def create_default_theme(now: datetime | None = None) -> Theme:
    """The built-in light theme."""
    stamp = now or datetime.now(timezone.utc)
    return Theme(
        id=DEFAULT_THEME_ID,
        name="Default Theme",
        description="Clean and modern theme with excellent accessibility",
        advanced_typography=default_typography_config(),
        created_at=stamp,
        updated_at=stamp,
    )


def create_dark_theme(now: datetime | None = None) -> Theme:
    return dataclasses.replace(
        create_default_theme(now),
        id=DARK_THEME_ID,
        name="Dark Theme",
        description="Modern dark theme optimized for low-light environments",
        colors=DARK_COLORS,
        is_dark=True,
    )


def with_typography_scale(theme: Theme, scale: str, now: datetime | None = None) -> Theme:
    """Switch the advanced typography to a built-in scale.

    Themes without advanced typography are returned unchanged.
    """
    config = theme.advanced_typography
    if config is None:
        return theme
    return dataclasses.replace(
        theme,
        advanced_typography=dataclasses.replace(config, scale=scale, custom_scale=TYPOGRAPHY_SCALES[scale]),
        updated_at=now or datetime.now(timezone.utc),
    )


def with_fonts(
    theme: Theme,
    *,
    primary: FontFamilyConfig | None = None,
    secondary: FontFamilyConfig | None = None,
    mono: FontFamilyConfig | None = None,
    now: datetime | None = None,
) -> Theme:
    """Replace font families and project them onto the legacy font strings."""
    config = theme.advanced_typography
    if config is None:
        return theme
    config = dataclasses.replace(
        config,
        primary=primary or config.primary,
        secondary=secondary or config.secondary,
        mono=mono or config.mono,
    )
    return dataclasses.replace(
        theme,
        advanced_typography=config,
        typography=project_typography_to_legacy(theme.typography, config),
        updated_at=now or datetime.now(timezone.utc),
    )


def create_high_contrast_theme(now: datetime | None = None) -> Theme:
    theme = create_default_theme(now)
    colors = dataclasses.replace(
        theme.colors,
        primary="#000000",
        primary_hover="#333333",
        primary_active="#000000",
        background="#FFFFFF",
        text_primary="#000000",
        border="#000000",
        border_focus="#000000",
    )
    config = theme.advanced_typography
    if config is not None:
        config = dataclasses.replace(
            config,
            accessibility=dataclasses.replace(
                config.accessibility,
                contrast_ratio=7.0,
                enforce_min_size=True,
                min_body_size=18,
            ),
        )
    return dataclasses.replace(
        theme,
        id="high-contrast",
        name="High Contrast",
        description="High contrast theme for accessibility",
        colors=colors,
        advanced_typography=config,
    )


def create_performance_theme(now: datetime | None = None) -> Theme:
    """Default theme restricted to system fonts."""
    catalog = default_catalog()
    system_ui = catalog.get("system-ui")
    courier = catalog.get("courier")
    return with_fonts(create_default_theme(now), primary=system_ui, secondary=system_ui, mono=courier, now=now)


THEME_PRESETS: dict[str, Callable[[], Theme]] = {
    "default": create_default_theme,
    "dark": create_dark_theme,
    "defaultSmall": lambda: with_typography_scale(create_default_theme(), "small"),
    "defaultLarge": lambda: with_typography_scale(create_default_theme(), "large"),
    "darkSmall": lambda: with_typography_scale(create_dark_theme(), "small"),
    "darkLarge": lambda: with_typography_scale(create_dark_theme(), "large"),
    "highContrast": create_high_contrast_theme,
    "performance": create_performance_theme,
}


def preset_theme(name: str) -> Theme:
    """Build a preset by name. Raises KeyError for unknown presets."""
    try:
        factory = THEME_PRESETS[name]
    except KeyError:
        raise KeyError(f"Unknown theme preset: {name!r}") from None
    return factory()
