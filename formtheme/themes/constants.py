"""Theme engine constants."""

from __future__ import annotations

DEFAULT_THEME_ID = "default"
DARK_THEME_ID = "dark"

EXPORT_SCHEMA_VERSION = "2.0.0"
SUPPORTED_SCHEMA_MAJOR = 2

TEXT_ELEMENT_ROLES: tuple[str, ...] = (
    "form_title",
    "form_description",
    "section_title",
    "question_label",
    "question_description",
    "input_text",
    "input_placeholder",
    "button_text",
    "help_text",
    "error_text",
    "success_text",
    "caption",
    "legal",
)

# Roles the minimum body size floor applies to.
BODY_TEXT_ROLES: tuple[str, ...] = ("input_text", "question_label")

FONT_FAMILY_CHOICES: tuple[str, ...] = ("primary", "secondary", "mono")
SCALE_NAMES: tuple[str, ...] = ("small", "medium", "large")

BUTTON_VARIANTS: tuple[str, ...] = ("filled", "outlined", "flat", "rounded", "pill", "square")
BUTTON_SIZES: tuple[str, ...] = ("small", "medium", "large")
MIN_BUTTON_HEIGHT = 44

BACKGROUND_TYPES: tuple[str, ...] = ("solid", "gradient", "pattern", "animated")
BACKGROUND_PATTERNS: tuple[str, ...] = ("dots", "grid", "diagonal", "waves")
ANIMATED_BACKGROUNDS: tuple[str, ...] = ("aurora", "darkVeil", "lightRays")
DEFAULT_PATTERN_COLOR = "rgba(0, 0, 0, 0.05)"
DEFAULT_PATTERN_SIZE = "20px"
DEFAULT_GRADIENT_DIRECTION = "135deg"

# Advanced palette role -> legacy color role it is projected onto.
PALETTE_TO_LEGACY: dict[str, str] = {
    "primary": "primary",
    "secondary": "secondary",
    "background": "background",
    "surface": "surface",
    "text_primary": "text_primary",
    "text_secondary": "text_secondary",
    "text_inverse": "text_inverse",
    "success": "success",
    "warning": "warning",
    "error": "error",
    "info": "info",
    "tertiary": "border",
    "focus": "border_focus",
    "overlay": "overlay",
}
