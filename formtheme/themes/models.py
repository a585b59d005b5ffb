"""Theme configuration models.

Field names are snake_case; the JSON form of every model uses the
camelCase of the field name, or the ``key`` entry of the field metadata
for keys that are not valid identifiers (``2xl`` and friends).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from formtheme.core.fonts import FontFamilyConfig, FontLoadingState
from formtheme.core.scales import TypographyScale


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ThemeColors:
    """Legacy color roles. Defaults are the built-in light theme."""

    primary: str = "#3B82F6"
    primary_hover: str = "#2563EB"
    primary_active: str = "#1D4ED8"
    primary_disabled: str = "#93C5FD"
    secondary: str = "#6B7280"
    secondary_hover: str = "#4B5563"
    secondary_active: str = "#374151"
    background: str = "#FFFFFF"
    surface: str = "#F9FAFB"
    surface_elevated: str = "#FFFFFF"
    overlay: str = "rgba(0, 0, 0, 0.5)"
    text_primary: str = "#111827"
    text_secondary: str = "#6B7280"
    text_muted: str = "#9CA3AF"
    text_inverse: str = "#FFFFFF"
    border: str = "#E5E7EB"
    border_hover: str = "#D1D5DB"
    border_focus: str = "#3B82F6"
    border_error: str = "#EF4444"
    border_success: str = "#10B981"
    error: str = "#EF4444"
    error_hover: str = "#DC2626"
    success: str = "#10B981"
    success_hover: str = "#059669"
    warning: str = "#F59E0B"
    warning_hover: str = "#D97706"
    info: str = "#3B82F6"
    info_hover: str = "#2563EB"


@dataclass(frozen=True, slots=True)
class ThemeTypography:
    """Legacy typography: family strings and rem based sizes."""

    font_family: str = (
        'Inter, -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif'
    )
    font_family_mono: str = 'ui-monospace, SFMono-Regular, "SF Mono", Consolas, "Liberation Mono", Menlo, monospace'
    font_size_xs: float = 0.75
    font_size_sm: float = 0.875
    font_size_base: float = 1
    font_size_lg: float = 1.125
    font_size_xl: float = 1.25
    font_size_2xl: float = 1.5
    font_size_3xl: float = 1.875
    font_size_4xl: float = 2.25
    font_weight_light: int = 300
    font_weight_normal: int = 400
    font_weight_medium: int = 500
    font_weight_semibold: int = 600
    font_weight_bold: int = 700
    line_height_tight: float = 1.25
    line_height_normal: float = 1.5
    line_height_relaxed: float = 1.625
    line_height_loose: float = 2
    letter_spacing_tighter: float = -0.05
    letter_spacing_tight: float = -0.025
    letter_spacing_normal: float = 0
    letter_spacing_wide: float = 0.025
    letter_spacing_wider: float = 0.05


@dataclass(frozen=True, slots=True)
class ThemeSpacing:
    unit: float = 0.25
    xs: float = 0.5
    sm: float = 0.75
    md: float = 1
    lg: float = 1.5
    xl: float = 2
    xl2: float = field(default=3, metadata={"key": "2xl"})
    xl3: float = field(default=4, metadata={"key": "3xl"})
    xl4: float = field(default=6, metadata={"key": "4xl"})
    xl5: float = field(default=8, metadata={"key": "5xl"})
    xl6: float = field(default=12, metadata={"key": "6xl"})


@dataclass(frozen=True, slots=True)
class ThemeBorderRadius:
    none: float = 0
    sm: float = 0.125
    md: float = 0.375
    lg: float = 0.5
    xl: float = 0.75
    full: float = 9999


@dataclass(frozen=True, slots=True)
class ThemeShadows:
    none: str = "none"
    sm: str = "0 1px 2px 0 rgba(0, 0, 0, 0.05)"
    md: str = "0 4px 6px -1px rgba(0, 0, 0, 0.1), 0 2px 4px -1px rgba(0, 0, 0, 0.06)"
    lg: str = "0 10px 15px -3px rgba(0, 0, 0, 0.1), 0 4px 6px -2px rgba(0, 0, 0, 0.05)"
    xl: str = "0 20px 25px -5px rgba(0, 0, 0, 0.1), 0 10px 10px -5px rgba(0, 0, 0, 0.04)"
    xl2: str = field(default="0 25px 50px -12px rgba(0, 0, 0, 0.25)", metadata={"key": "2xl"})
    inner: str = "inset 0 2px 4px 0 rgba(0, 0, 0, 0.06)"


@dataclass(frozen=True, slots=True)
class ThemeTransitions:
    duration_fast: int = 150
    duration_normal: int = 200
    duration_slow: int = 300
    easing_linear: str = "linear"
    easing_ease_in: str = "cubic-bezier(0.4, 0, 1, 1)"
    easing_ease_out: str = "cubic-bezier(0, 0, 0.2, 1)"
    easing_ease_in_out: str = "cubic-bezier(0.4, 0, 0.2, 1)"
    easing_bounce: str = "cubic-bezier(0.68, -0.55, 0.265, 1.55)"
    easing_elastic: str = "cubic-bezier(0.175, 0.885, 0.32, 1.275)"


@dataclass(frozen=True, slots=True)
class ThemeBreakpoints:
    sm: str = "640px"
    md: str = "768px"
    lg: str = "1024px"
    xl: str = "1280px"
    xl2: str = field(default="1536px", metadata={"key": "2xl"})


@dataclass(frozen=True, slots=True)
class ThemeZIndex:
    auto: str = "auto"
    base: int = 0
    dropdown: int = 1000
    modal: int = 1050
    popover: int = 1100
    tooltip: int = 1150
    toast: int = 1200
    overlay: int = 1250


@dataclass(frozen=True, slots=True)
class ColorPalette:
    """Seventeen-role brand palette; overrides legacy colors when present."""

    primary: str = "#3B82F6"
    secondary: str = "#6B7280"
    tertiary: str = "#E5E7EB"
    text_primary: str = "#111827"
    text_secondary: str = "#6B7280"
    text_tertiary: str = "#9CA3AF"
    text_inverse: str = "#FFFFFF"
    background: str = "#FFFFFF"
    surface: str = "#F9FAFB"
    surface_elevated: str = "#FFFFFF"
    success: str = "#10B981"
    warning: str = "#F59E0B"
    error: str = "#EF4444"
    info: str = "#3B82F6"
    focus: str = "#3B82F6"
    selection: str = "rgba(59, 130, 246, 0.1)"
    overlay: str = "rgba(0, 0, 0, 0.5)"


@dataclass(frozen=True, slots=True)
class ButtonCustomization:
    variant: str = "filled"
    size: str = "medium"
    border_radius: float = 8
    border_width: float = 1
    padding_multiplier: float = 1
    font_weight: int = 500
    hover_scale: float = 1.02
    transition_duration: int = 200
    min_height: float = 44
    focus_ring_width: float = 2
    hover_opacity: float = 0.9
    active_opacity: float = 0.95
    disabled_opacity: float = 0.5


@dataclass(frozen=True, slots=True)
class ElementTypography:
    """Typography of one text element, expressed as keys into the active scale."""

    font_size: str
    line_height: str
    letter_spacing: str
    font_weight: int
    font_family: str = "primary"


@dataclass(frozen=True, slots=True)
class ResponsiveBreakpoints:
    sm: float = 0.875
    md: float = 1.0
    lg: float = 1.125


@dataclass(frozen=True, slots=True)
class ResponsiveTypography:
    enable_scaling: bool = True
    breakpoints: ResponsiveBreakpoints = field(default_factory=ResponsiveBreakpoints)


@dataclass(frozen=True, slots=True)
class TypographyAccessibility:
    enforce_min_size: bool = True
    min_body_size: float = 16
    max_line_length: int = 75
    contrast_ratio: float = 4.5


@dataclass(frozen=True, slots=True)
class TypographyPerformance:
    preload_fonts: bool = True
    font_display: str = "swap"
    load_timeout: int = 3000


@dataclass(frozen=True, slots=True)
class TypographyConfig:
    """Advanced typography: scale, three font families and per-element mapping."""

    scale: str
    primary: FontFamilyConfig
    secondary: FontFamilyConfig
    mono: FontFamilyConfig
    mapping: dict[str, ElementTypography] = field(metadata={"camel_keys": True})
    custom_scale: TypographyScale | None = None
    responsive: ResponsiveTypography = field(default_factory=ResponsiveTypography)
    accessibility: TypographyAccessibility = field(default_factory=TypographyAccessibility)
    performance: TypographyPerformance = field(default_factory=TypographyPerformance)

    def family(self, choice: str) -> FontFamilyConfig:
        if choice == "secondary":
            return self.secondary
        if choice == "mono":
            return self.mono
        return self.primary


@dataclass(frozen=True, slots=True)
class AnimatedBackground:
    """Animated background kind plus raw settings for an external renderer."""

    type: str
    settings: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BackgroundConfig:
    type: str = "solid"
    value: str | None = None
    pattern: str | None = None
    pattern_color: str | None = None
    pattern_size: str | None = None
    gradient_direction: str | None = None
    gradient_color1: str | None = None
    gradient_color2: str | None = None
    animated: AnimatedBackground | None = None


@dataclass(frozen=True, slots=True)
class Theme:
    """A complete theme configuration."""

    id: str
    name: str
    description: str = ""
    colors: ThemeColors = field(default_factory=ThemeColors)
    typography: ThemeTypography = field(default_factory=ThemeTypography)
    advanced_typography: TypographyConfig | None = None
    button_customization: ButtonCustomization | None = None
    color_palette: ColorPalette | None = None
    background: BackgroundConfig | None = field(default=None, metadata={"key": "backgroundConfig"})
    spacing: ThemeSpacing = field(default_factory=ThemeSpacing)
    border_radius: ThemeBorderRadius = field(default_factory=ThemeBorderRadius)
    shadows: ThemeShadows = field(default_factory=ThemeShadows)
    transitions: ThemeTransitions = field(default_factory=ThemeTransitions)
    breakpoints: ThemeBreakpoints = field(default_factory=ThemeBreakpoints)
    z_index: ThemeZIndex = field(default_factory=ThemeZIndex)
    is_dark: bool = False
    is_custom: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True, slots=True)
class ThemeState:
    """Store state. New instances are produced only by the reducer."""

    current_theme: Theme
    preview_theme: Theme | None = None
    preview_mode: bool = False
    is_loading: bool = False
    typography_loading: bool = False
    error: str | None = None
    has_unsaved_changes: bool = False
    font_loading_states: dict[str, FontLoadingState] = field(default_factory=dict)

    @property
    def active_theme(self) -> Theme:
        """Theme that is rendered: the preview while preview mode is on."""
        if self.preview_mode and self.preview_theme is not None:
            return self.preview_theme
        return self.current_theme
