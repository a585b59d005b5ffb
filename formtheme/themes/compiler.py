"""Compile themes into style variable tables and button rules.

The table is an ordered ``dict`` of ``--form-*`` variable name to value.
Every section is always emitted, from built-in defaults when the theme
lacks it, so the set of variable names is the same for every theme.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
from dataclasses import dataclass, field
from typing import Callable

from formtheme.core.colors import darken, lighten
from formtheme.core.scales import TYPOGRAPHY_SCALES, TypographyScale
from formtheme.themes.constants import (
    BODY_TEXT_ROLES,
    BUTTON_SIZES,
    BUTTON_VARIANTS,
    DEFAULT_GRADIENT_DIRECTION,
    DEFAULT_PATTERN_COLOR,
    DEFAULT_PATTERN_SIZE,
    PALETTE_TO_LEGACY,
    TEXT_ELEMENT_ROLES,
)
from formtheme.themes.defaults import create_default_theme, default_typography_config
from formtheme.themes.models import (
    BackgroundConfig,
    ButtonCustomization,
    ColorPalette,
    Theme,
    ThemeColors,
    TypographyConfig,
)
from formtheme.themes.projection import palette_from_legacy
from formtheme.themes.serialization import json_key, kebab_case

logger = logging.getLogger(__name__)

StyleTable = dict[str, str]

# variant role -> (base role, operation, percent)
_SYNTHESIZED_VARIANTS: tuple[tuple[str, str, str, int], ...] = (
    ("primary_hover", "primary", "darken", 10),
    ("primary_active", "primary", "darken", 20),
    ("primary_disabled", "primary", "lighten", 30),
    ("secondary_hover", "secondary", "darken", 10),
    ("secondary_active", "secondary", "darken", 20),
    ("success_hover", "success", "darken", 10),
    ("error_hover", "error", "darken", 10),
    ("warning_hover", "warning", "darken", 10),
    ("info_hover", "info", "darken", 10),
)

# Palette roles with no legacy counterpart.
_PALETTE_ONLY_ROLES: tuple[str, ...] = ("tertiary", "text_tertiary", "focus", "selection")

_PATTERNS: dict[str, Callable[[str], str]] = {
    "dots": lambda c: f"radial-gradient(circle, {c} 1px, transparent 1px)",
    "grid": lambda c: f"linear-gradient({c} 1px, transparent 1px), linear-gradient(90deg, {c} 1px, transparent 1px)",
    "diagonal": lambda c: f"repeating-linear-gradient(45deg, transparent, transparent 10px, {c} 10px, {c} 20px)",
    "waves": lambda c: f"repeating-linear-gradient(90deg, transparent, transparent 20px, {c} 20px, {c} 40px)",
}

_BUTTON_SIZE_RULES: dict[str, dict[str, str]] = {
    "small": {
        "padding": "calc(6px * var(--form-button-padding-multiplier)) calc(12px * var(--form-button-padding-multiplier))",
        "font-size": "14px",
        "min-height": "36px",
    },
    "medium": {
        "padding": "calc(8px * var(--form-button-padding-multiplier)) calc(16px * var(--form-button-padding-multiplier))",
        "font-size": "16px",
        "min-height": "var(--form-button-min-height)",
    },
    "large": {
        "padding": "calc(12px * var(--form-button-padding-multiplier)) calc(24px * var(--form-button-padding-multiplier))",
        "font-size": "18px",
        "min-height": "52px",
    },
}

_FILLED = {
    "background-color": "var(--form-color-primary)",
    "color": "var(--form-color-text-inverse)",
    "border-color": "var(--form-color-primary)",
}


@dataclass(frozen=True, slots=True)
class CssRule:
    selector: str
    declarations: dict[str, str] = field(default_factory=dict)

    def render(self, indent: str = "  ") -> str:
        body = "\n".join(f"{indent}{name}: {value};" for name, value in self.declarations.items())
        return f"{self.selector} {{\n{body}\n}}"


def format_number(value: float) -> str:
    """Render a number without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def compile_theme(theme: Theme) -> StyleTable:
    """Compile a theme into its full variable table."""
    table: StyleTable = {}
    for name, section in _SECTIONS:
        try:
            table.update(section(theme))
        except Exception:
            logger.warning("compiling %s for theme %r failed; using defaults", name, theme.id, exc_info=True)
            table.update(section(_fallback_theme()))
    return table


def compile_color_variables(theme: Theme) -> StyleTable:
    roles = _effective_colors(theme)
    table = {f"--form-color-{kebab_case(json_key(f))}": roles[f.name] for f in dataclasses.fields(ThemeColors)}
    palette = theme.color_palette or palette_from_legacy(theme.colors)
    for role in _PALETTE_ONLY_ROLES:
        table[f"--form-color-{kebab_case(role)}"] = getattr(palette, role)
    table["--form-color-surface-hover"] = darken(roles["surface"], 5)
    return table


def compile_background_variables(theme: Theme) -> StyleTable:
    background = theme.background or BackgroundConfig()
    roles = _effective_colors(theme)
    pattern_color = background.pattern_color or DEFAULT_PATTERN_COLOR
    direction = background.gradient_direction or DEFAULT_GRADIENT_DIRECTION
    color1 = background.gradient_color1 or roles["primary"]
    color2 = background.gradient_color2 or roles["secondary"]
    pattern = _PATTERNS[background.pattern](pattern_color) if background.pattern in _PATTERNS else "none"

    if background.type == "gradient":
        image = f"linear-gradient({direction}, {color1}, {color2})"
    elif background.type == "pattern":
        image = pattern
    else:
        image = "none"

    table = {
        "--form-background-type": background.type,
        "--form-background-value": background.value or roles["background"],
        "--form-background-image": image,
        "--form-background-pattern": pattern,
        "--form-background-pattern-color": pattern_color,
        "--form-background-pattern-size": background.pattern_size or DEFAULT_PATTERN_SIZE,
        "--form-background-gradient-direction": direction,
        "--form-background-gradient-color1": color1,
        "--form-background-gradient-color2": color2,
    }
    if background.type == "animated" and background.animated is not None:
        table["--form-background-animated-type"] = background.animated.type
        for key, value in background.animated.settings.items():
            table[f"--form-background-animated-{kebab_case(key)}"] = _passthrough(value)
    return table


def compile_legacy_typography_variables(theme: Theme) -> StyleTable:
    typography = theme.typography
    table = {
        "--form-font-family": typography.font_family,
        "--form-font-family-mono": typography.font_family_mono,
    }
    for f in dataclasses.fields(typography):
        value = getattr(typography, f.name)
        if f.name.startswith("font_size_"):
            table[f"--form-font-size-{f.name.removeprefix('font_size_')}"] = f"{format_number(value)}rem"
        elif f.name.startswith("font_weight_"):
            table[f"--form-font-weight-{f.name.removeprefix('font_weight_')}"] = format_number(value)
        elif f.name.startswith("line_height_"):
            table[f"--form-line-height-{f.name.removeprefix('line_height_')}"] = format_number(value)
        elif f.name.startswith("letter_spacing_"):
            table[f"--form-letter-spacing-{f.name.removeprefix('letter_spacing_')}"] = f"{format_number(value)}em"
    return table


def compile_layout_variables(theme: Theme) -> StyleTable:
    """Spacing, radius, shadows, transitions, z-index and breakpoints."""
    table: StyleTable = {}
    for f in dataclasses.fields(theme.spacing):
        table[f"--form-spacing-{json_key(f)}"] = f"{format_number(getattr(theme.spacing, f.name))}rem"
    for f in dataclasses.fields(theme.border_radius):
        unit = "px" if f.name in ("none", "full") else "rem"
        table[f"--form-border-radius-{f.name}"] = f"{format_number(getattr(theme.border_radius, f.name))}{unit}"
    for f in dataclasses.fields(theme.shadows):
        table[f"--form-shadow-{json_key(f)}"] = getattr(theme.shadows, f.name)
    for f in dataclasses.fields(theme.transitions):
        value = getattr(theme.transitions, f.name)
        if f.name.startswith("duration_"):
            table[f"--form-transition-duration-{f.name.removeprefix('duration_')}"] = f"{format_number(value)}ms"
        else:
            table[f"--form-transition-easing-{kebab_case(f.name.removeprefix('easing_'))}"] = value
    for f in dataclasses.fields(theme.z_index):
        table[f"--form-z-index-{f.name}"] = format_number(getattr(theme.z_index, f.name))
    for f in dataclasses.fields(theme.breakpoints):
        table[f"--form-breakpoint-{json_key(f)}"] = getattr(theme.breakpoints, f.name)
    return table


def compile_typography_variables(theme: Theme) -> StyleTable:
    config = theme.advanced_typography or default_typography_config()
    scale = resolve_scale(config)
    fallback_mapping = default_typography_config().mapping
    accessibility = config.accessibility

    table = {
        "--form-font-primary": config.primary.stack,
        "--form-font-secondary": config.secondary.stack,
        "--form-font-mono": config.mono.stack,
    }
    for role in TEXT_ELEMENT_ROLES:
        element = config.mapping.get(role) or fallback_mapping[role]
        size = scale.sizes.get(element.font_size, scale.base_size)
        if accessibility.enforce_min_size and role in BODY_TEXT_ROLES:
            size = max(size, accessibility.min_body_size)
        line_height = scale.line_heights.get(element.line_height, 1.5)
        letter_spacing = scale.letter_spacing.get(element.letter_spacing, 0)
        name = kebab_case(role)
        table[f"--form-font-size-{name}"] = f"{format_number(size)}px"
        table[f"--form-line-height-{name}"] = format_number(line_height)
        table[f"--form-letter-spacing-{name}"] = f"{format_number(letter_spacing)}em"
        table[f"--form-font-weight-{name}"] = format_number(element.font_weight)
        table[f"--form-font-family-{name}"] = config.family(element.font_family).stack

    factors = config.responsive.breakpoints
    enabled = config.responsive.enable_scaling
    for key in ("sm", "md", "lg"):
        table[f"--form-font-scale-{key}"] = format_number(getattr(factors, key)) if enabled else "1"
    return table


def compile_button_variables(theme: Theme) -> StyleTable:
    button = theme.button_customization or ButtonCustomization()
    return {
        "--form-button-border-radius": f"{format_number(button.border_radius)}px",
        "--form-button-border-width": f"{format_number(button.border_width)}px",
        "--form-button-font-weight": format_number(button.font_weight),
        "--form-button-transition-duration": f"{format_number(button.transition_duration)}ms",
        "--form-button-hover-scale": format_number(button.hover_scale),
        "--form-button-min-height": f"{format_number(button.min_height)}px",
        "--form-button-focus-ring-width": f"{format_number(button.focus_ring_width)}px",
        "--form-button-hover-opacity": format_number(button.hover_opacity),
        "--form-button-active-opacity": format_number(button.active_opacity),
        "--form-button-disabled-opacity": format_number(button.disabled_opacity),
        "--form-button-padding-multiplier": format_number(button.padding_multiplier),
    }


def compile_button_rules(customization: ButtonCustomization | None = None) -> list[CssRule]:
    """Base, size, variant and variant-by-size rules for ``.form-button``."""
    button = customization or ButtonCustomization()
    rules = [
        CssRule(".form-button", {
            "display": "inline-flex",
            "align-items": "center",
            "justify-content": "center",
            "font-family": "inherit",
            "font-weight": "var(--form-button-font-weight)",
            "line-height": "1",
            "border": "var(--form-button-border-width) solid transparent",
            "border-radius": "var(--form-button-border-radius)",
            "cursor": "pointer",
            "transition": "all var(--form-button-transition-duration) ease-in-out",
            "min-height": "var(--form-button-min-height)",
        }),
        CssRule(".form-button:focus", {
            "outline": "none",
            "box-shadow": "0 0 0 var(--form-button-focus-ring-width) var(--form-color-focus)",
        }),
        CssRule(".form-button:disabled", {
            "cursor": "not-allowed",
            "opacity": "var(--form-button-disabled-opacity)",
            "transform": "none",
        }),
        CssRule(".form-button:not(:disabled):hover", {
            "transform": "scale(var(--form-button-hover-scale))",
            "opacity": "var(--form-button-hover-opacity)",
        }),
        CssRule(".form-button:not(:disabled):active", {
            "transform": "scale(0.98)",
            "opacity": "var(--form-button-active-opacity)",
        }),
    ]
    for size in BUTTON_SIZES:
        rules.append(CssRule(f".form-button-{size}", dict(_BUTTON_SIZE_RULES[size])))

    variants = _variant_declarations(button)
    for variant in BUTTON_VARIANTS:
        base, hover, active, disabled = variants[variant]
        selector = f".form-button-{variant}"
        rules.append(CssRule(selector, base))
        rules.append(CssRule(f"{selector}:not(:disabled):hover", hover))
        rules.append(CssRule(f"{selector}:not(:disabled):active", active))
        rules.append(CssRule(f"{selector}:disabled", disabled))

    for variant in BUTTON_VARIANTS:
        for size in BUTTON_SIZES:
            rules.append(CssRule(
                f".form-button-{variant}.form-button-{size}",
                {**_BUTTON_SIZE_RULES[size], **variants[variant][0]},
            ))
    return rules


def resolve_scale(config: TypographyConfig) -> TypographyScale:
    if config.custom_scale is not None:
        return config.custom_scale
    return TYPOGRAPHY_SCALES.get(config.scale, TYPOGRAPHY_SCALES["medium"])


def _variant_declarations(button: ButtonCustomization) -> dict[str, tuple[dict[str, str], ...]]:
    filled_states = (
        {"background-color": "var(--form-color-primary-hover)", "border-color": "var(--form-color-primary-hover)"},
        {"background-color": "var(--form-color-primary-active)", "border-color": "var(--form-color-primary-active)"},
        {"background-color": "var(--form-color-primary-disabled)", "border-color": "var(--form-color-primary-disabled)"},
    )
    rounded_radius = f"{format_number(max(button.border_radius * 2, 16))}px"
    return {
        "filled": (dict(_FILLED), *filled_states),
        "outlined": (
            {
                "background-color": "transparent",
                "color": "var(--form-color-primary)",
                "border-color": "var(--form-color-primary)",
            },
            {"background-color": "var(--form-color-primary)", "color": "var(--form-color-text-inverse)"},
            {"background-color": "var(--form-color-primary-active)", "color": "var(--form-color-text-inverse)"},
            {"color": "var(--form-color-primary-disabled)", "border-color": "var(--form-color-primary-disabled)"},
        ),
        "flat": (
            {
                "background-color": "transparent",
                "color": "var(--form-color-primary)",
                "border-color": "transparent",
            },
            {"background-color": "var(--form-color-surface-hover)"},
            {"background-color": "var(--form-color-surface)"},
            {"color": "var(--form-color-primary-disabled)"},
        ),
        "rounded": ({**_FILLED, "border-radius": rounded_radius}, *filled_states),
        "pill": ({**_FILLED, "border-radius": "50px"}, *filled_states),
        "square": ({**_FILLED, "border-radius": "2px"}, *filled_states),
    }


def _effective_colors(theme: Theme) -> dict[str, str]:
    """Legacy roles with palette overrides applied and variants filled in."""
    roles = {f.name: getattr(theme.colors, f.name) for f in dataclasses.fields(ThemeColors)}
    palette: ColorPalette | None = theme.color_palette
    if palette is not None:
        for f in dataclasses.fields(ColorPalette):
            if f.name in roles:
                roles[f.name] = getattr(palette, f.name)
        for role, legacy in PALETTE_TO_LEGACY.items():
            roles[legacy] = getattr(palette, role)

    for variant, base, operation, percent in _SYNTHESIZED_VARIANTS:
        if palette is None and roles[variant].strip():
            continue
        adjust = darken if operation == "darken" else lighten
        roles[variant] = adjust(roles[base], percent)
    return roles


def _passthrough(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(_passthrough(item) for item in value)
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


@functools.lru_cache(maxsize=1)
def _fallback_theme() -> Theme:
    return create_default_theme()


_SECTIONS: tuple[tuple[str, Callable[[Theme], StyleTable]], ...] = (
    ("colors", compile_color_variables),
    ("background", compile_background_variables),
    ("legacy typography", compile_legacy_typography_variables),
    ("layout", compile_layout_variables),
    ("typography", compile_typography_variables),
    ("buttons", compile_button_variables),
)
