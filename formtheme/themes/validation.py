"""Theme validation.

Validators work on the document form of a theme (camelCase keys, as
produced by `theme_to_dict` or read from an import file) so that partial
and foreign data can be checked before any model is built. Malformed
values are reported as issues; a malformed shape raises `TypeError`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Mapping

from formtheme.core.colors import AA_NORMAL_TEXT, contrast_ratio, is_valid_color, parse_color
from formtheme.core.fonts import FONT_DISPLAY_VALUES
from formtheme.core.scales import SIZE_KEYS, TYPOGRAPHY_SCALES, TypographyScale, validate_scale
from formtheme.errors import ThemeValidationError
from formtheme.themes.constants import (
    ANIMATED_BACKGROUNDS,
    BACKGROUND_PATTERNS,
    BACKGROUND_TYPES,
    BUTTON_SIZES,
    BUTTON_VARIANTS,
    FONT_FAMILY_CHOICES,
    MIN_BUTTON_HEIGHT,
    SCALE_NAMES,
    TEXT_ELEMENT_ROLES,
)
from formtheme.themes.models import ColorPalette, Theme, ThemeColors
from formtheme.themes.serialization import camel_case, from_document, json_key, theme_to_dict

LEGACY_COLOR_KEYS: tuple[str, ...] = tuple(json_key(f) for f in dataclasses.fields(ThemeColors))
PALETTE_KEYS: tuple[str, ...] = tuple(json_key(f) for f in dataclasses.fields(ColorPalette))
TEXT_ELEMENT_KEYS: tuple[str, ...] = tuple(camel_case(role) for role in TEXT_ELEMENT_ROLES)

_LEGACY_SIZE_KEYS = ("fontSizeXs", "fontSizeSm", "fontSizeBase", "fontSizeLg", "fontSizeXl",
                     "fontSize2xl", "fontSize3xl", "fontSize4xl")
_LEGACY_WEIGHT_KEYS = ("fontWeightLight", "fontWeightNormal", "fontWeightMedium",
                       "fontWeightSemibold", "fontWeightBold")
_BUTTON_OPACITY_KEYS = ("hoverOpacity", "activeOpacity", "disabledOpacity")


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    field: str
    message: str
    value: object = None


@dataclass(frozen=True, slots=True)
class ValidationResult:
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __add__(self, other: ValidationResult) -> ValidationResult:
        return ValidationResult(self.errors + other.errors, self.warnings + other.warnings)


class _Issues:
    def __init__(self) -> None:
        self.errors: list[ValidationIssue] = []
        self.warnings: list[ValidationIssue] = []

    def error(self, field: str, message: str, value: object = None) -> None:
        self.errors.append(ValidationIssue(field, message, value))

    def warn(self, field: str, message: str, value: object = None) -> None:
        self.warnings.append(ValidationIssue(field, message, value))

    def color(self, field: str, value: object) -> None:
        if not isinstance(value, str) or not value.strip():
            self.error(field, "Color is required", value)
        elif not is_valid_color(value):
            self.error(field, f"Invalid color value: {value}", value)

    def number(self, field: str, value: object, *, minimum: float | None = None,
               maximum: float | None = None, exclusive_min: bool = False) -> bool:
        """Check a numeric value; return True when it is within bounds."""
        if not _is_number(value):
            self.error(field, "Must be a number", value)
            return False
        if minimum is not None:
            below = value <= minimum if exclusive_min else value < minimum
            if below:
                relation = "greater than" if exclusive_min else "at least"
                self.error(field, f"Must be {relation} {minimum:g}", value)
                return False
        if maximum is not None and value > maximum:
            self.error(field, f"Must be at most {maximum:g}", value)
            return False
        return True

    def weight(self, field: str, value: object) -> None:
        if not _is_number(value):
            self.error(field, "Font weight must be a number", value)
        elif not 100 <= value <= 900:
            self.error(field, "Font weight must be between 100 and 900", value)

    def choice(self, field: str, value: object, choices: tuple[str, ...]) -> None:
        if value not in choices:
            self.error(field, f"Must be one of: {', '.join(choices)}", value)

    def result(self) -> ValidationResult:
        return ValidationResult(tuple(self.errors), tuple(self.warnings))


def validate_identity(data: Mapping[str, object]) -> ValidationResult:
    issues = _Issues()
    for key, label in (("id", "Theme ID"), ("name", "Theme name")):
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            issues.error(key, f"{label} is required", value)
    return issues.result()


def validate_colors(colors: Mapping[str, object], path: str = "colors") -> ValidationResult:
    """Legacy color roles; roles that are absent fall back to defaults and are skipped."""
    section = _section(colors, path)
    issues = _Issues()
    for key in LEGACY_COLOR_KEYS:
        if key in section:
            issues.color(f"{path}.{key}", section[key])
    return issues.result()


def validate_legacy_typography(typography: Mapping[str, object], path: str = "typography") -> ValidationResult:
    section = _section(typography, path)
    issues = _Issues()
    for key in ("fontFamily", "fontFamilyMono"):
        if key in section:
            value = section[key]
            if not isinstance(value, str) or not value.strip():
                issues.error(f"{path}.{key}", "Font family is required", value)
    for key in _LEGACY_SIZE_KEYS:
        if key in section:
            issues.number(f"{path}.{key}", section[key], minimum=0, exclusive_min=True)
    for key in _LEGACY_WEIGHT_KEYS:
        if key in section:
            issues.weight(f"{path}.{key}", section[key])
    return issues.result()


def validate_advanced_typography(config: Mapping[str, object],
                                 path: str = "advancedTypography") -> ValidationResult:
    section = _section(config, path)
    issues = _Issues()

    for choice in FONT_FAMILY_CHOICES:
        font = section.get(choice)
        field = f"{path}.{choice}"
        if not isinstance(font, Mapping):
            issues.error(field, f"{choice.capitalize()} font family is required", font)
            continue
        family = font.get("family")
        if not isinstance(family, str) or not family.strip():
            issues.error(f"{field}.family", f"{choice.capitalize()} font family is required", family)

    scale = section.get("scale")
    issues.choice(f"{path}.scale", scale, SCALE_NAMES)

    mapping = _section(section.get("mapping", {}), f"{path}.mapping")
    for role, element in mapping.items():
        field = f"{path}.mapping.{role}"
        if role not in TEXT_ELEMENT_KEYS:
            issues.error(field, f"Unknown text element: {role}", role)
            continue
        element = _section(element, field)
        issues.weight(f"{field}.fontWeight", element.get("fontWeight"))
        for key in ("fontSize", "lineHeight", "letterSpacing"):
            issues.choice(f"{field}.{key}", element.get(key), SIZE_KEYS)
        issues.choice(f"{field}.fontFamily", element.get("fontFamily", "primary"), FONT_FAMILY_CHOICES)

    accessibility = _section(section.get("accessibility", {}), f"{path}.accessibility")
    min_body = accessibility.get("minBodySize", 16)
    if issues.number(f"{path}.accessibility.minBodySize", min_body, minimum=12) and min_body < 16:
        issues.warn(f"{path}.accessibility.minBodySize",
                    "Minimum body size below 16px may affect readability", min_body)
    ratio = accessibility.get("contrastRatio", AA_NORMAL_TEXT)
    if issues.number(f"{path}.accessibility.contrastRatio", ratio, minimum=3.0) and ratio < AA_NORMAL_TEXT:
        issues.warn(f"{path}.accessibility.contrastRatio",
                    "Contrast ratio below 4.5 does not meet WCAG AA for body text", ratio)
    if "maxLineLength" in accessibility:
        issues.number(f"{path}.accessibility.maxLineLength", accessibility["maxLineLength"],
                      minimum=0, exclusive_min=True)

    performance = _section(section.get("performance", {}), f"{path}.performance")
    issues.number(f"{path}.performance.loadTimeout", performance.get("loadTimeout", 3000),
                  minimum=0, exclusive_min=True)
    issues.choice(f"{path}.performance.fontDisplay", performance.get("fontDisplay", "swap"),
                  FONT_DISPLAY_VALUES)

    responsive = _section(section.get("responsive", {}), f"{path}.responsive")
    breakpoints = _section(responsive.get("breakpoints", {}), f"{path}.responsive.breakpoints")
    for key, factor in breakpoints.items():
        issues.number(f"{path}.responsive.breakpoints.{key}", factor, minimum=0, exclusive_min=True)

    _check_scale(issues, section, path, min_body if _is_number(min_body) else 16)
    return issues.result()


def validate_button_customization(button: Mapping[str, object],
                                  path: str = "buttonCustomization") -> ValidationResult:
    section = _section(button, path)
    issues = _Issues()
    issues.choice(f"{path}.variant", section.get("variant", "filled"), BUTTON_VARIANTS)
    issues.choice(f"{path}.size", section.get("size", "medium"), BUTTON_SIZES)
    if "minHeight" in section:
        value = section["minHeight"]
        if not _is_number(value) or value < MIN_BUTTON_HEIGHT:
            issues.error(f"{path}.minHeight",
                         f"Minimum height must be at least {MIN_BUTTON_HEIGHT}px for accessibility", value)
    for key in ("borderRadius", "borderWidth", "transitionDuration"):
        if key in section:
            issues.number(f"{path}.{key}", section[key], minimum=0)
    for key in ("paddingMultiplier", "hoverScale"):
        if key in section:
            issues.number(f"{path}.{key}", section[key], minimum=0, exclusive_min=True)
    if "fontWeight" in section:
        issues.weight(f"{path}.fontWeight", section["fontWeight"])
    for key in _BUTTON_OPACITY_KEYS:
        if key in section:
            issues.number(f"{path}.{key}", section[key], minimum=0, maximum=1)
    return issues.result()


def validate_color_palette(palette: Mapping[str, object], path: str = "colorPalette") -> ValidationResult:
    section = _section(palette, path)
    issues = _Issues()
    for key in PALETTE_KEYS:
        issues.color(f"{path}.{key}", section.get(key))
    return issues.result()


def validate_spacing(spacing: Mapping[str, object], path: str = "spacing") -> ValidationResult:
    section = _section(spacing, path)
    issues = _Issues()
    for key, value in section.items():
        issues.number(f"{path}.{key}", value, minimum=0)
    return issues.result()


def validate_background(background: Mapping[str, object],
                        path: str = "backgroundConfig") -> ValidationResult:
    section = _section(background, path)
    issues = _Issues()
    kind = section.get("type", "solid")
    issues.choice(f"{path}.type", kind, BACKGROUND_TYPES)
    if section.get("pattern") is not None:
        issues.choice(f"{path}.pattern", section["pattern"], BACKGROUND_PATTERNS)
    for key in ("value", "patternColor", "gradientColor1", "gradientColor2"):
        if section.get(key) is not None:
            issues.color(f"{path}.{key}", section[key])
    animated = section.get("animated")
    if animated is not None:
        animated = _section(animated, f"{path}.animated")
        issues.choice(f"{path}.animated.type", animated.get("type"), ANIMATED_BACKGROUNDS)
    elif kind == "animated":
        issues.error(f"{path}.animated", "Animated backgrounds need an animated configuration")
    return issues.result()


def validate_contrast(data: Mapping[str, object]) -> ValidationResult:
    """Warn when body text on the page background falls below the configured ratio."""
    issues = _Issues()
    threshold = AA_NORMAL_TEXT
    advanced = data.get("advancedTypography")
    if isinstance(advanced, Mapping):
        accessibility = advanced.get("accessibility")
        if isinstance(accessibility, Mapping) and _is_number(accessibility.get("contrastRatio")):
            threshold = accessibility["contrastRatio"]

    for path in ("colors", "colorPalette"):
        section = data.get(path)
        if not isinstance(section, Mapping):
            continue
        text = section.get("textPrimary")
        background = section.get("background")
        if parse_color(text) is None or parse_color(background) is None:
            continue
        ratio = contrast_ratio(text, background)
        if ratio < threshold:
            issues.warn(
                f"{path}.textPrimary",
                f"Text contrast {ratio:.2f}:1 on background is below the required {threshold:g}:1",
                text,
            )
    return issues.result()


def validate_theme(theme: Theme | Mapping[str, object]) -> ValidationResult:
    """Validate a whole theme: the union of every section validator."""
    data = theme_to_dict(theme) if isinstance(theme, Theme) else theme
    if not isinstance(data, Mapping):
        raise TypeError(f"Theme data must be a mapping, got {type(data).__name__}")

    result = validate_identity(data)
    sections = (
        ("colors", validate_colors),
        ("typography", validate_legacy_typography),
        ("advancedTypography", validate_advanced_typography),
        ("buttonCustomization", validate_button_customization),
        ("colorPalette", validate_color_palette),
        ("spacing", validate_spacing),
        ("backgroundConfig", validate_background),
    )
    for key, validator in sections:
        section = data.get(key)
        if section is not None:
            result = result + validator(section)
    return result + validate_contrast(data)


def _check_scale(issues: _Issues, section: Mapping[str, object], path: str, min_body: float) -> None:
    raw_custom = section.get("customScale")
    if raw_custom is not None:
        try:
            scale = from_document(TypographyScale, raw_custom, f"{path}.customScale")
        except ThemeValidationError as exc:
            issues.error(f"{path}.customScale", str(exc))
            return
        custom_path = f"{path}.customScale"
        checked = [
            issues.number(f"{custom_path}.baseSize", scale.base_size, minimum=0, exclusive_min=True),
            issues.number(f"{custom_path}.ratio", scale.ratio, minimum=0, exclusive_min=True),
        ]
        for key, size in scale.sizes.items():
            checked.append(issues.number(f"{custom_path}.sizes.{key}", size, minimum=0, exclusive_min=True))
        if not all(checked):
            return
    else:
        name = section.get("scale")
        if not isinstance(name, str) or name not in TYPOGRAPHY_SCALES:
            return
        scale = TYPOGRAPHY_SCALES[name]
    for message in validate_scale(scale, min_body_size=min_body):
        issues.warn(f"{path}.scale", message)


def _section(value: object, path: str) -> Mapping[str, object]:
    if not isinstance(value, Mapping):
        raise TypeError(f"{path} must be a mapping, got {type(value).__name__}")
    return value


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
