"""Typography scale generation and responsive helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

SIZE_KEYS: tuple[str, ...] = ("xs", "sm", "base", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl")

# Exponent of the ratio applied to the base size for each key.
_SIZE_STEPS: dict[str, int] = {
    "xs": -2,
    "sm": -1,
    "base": 0,
    "lg": 1,
    "xl": 2,
    "2xl": 3,
    "3xl": 4,
    "4xl": 5,
    "5xl": 6,
    "6xl": 7,
}

RECOMMENDED_RATIOS: dict[str, float] = {
    "minor_second": 1.067,
    "major_second": 1.125,
    "minor_third": 1.2,
    "major_third": 1.25,
    "perfect_fourth": 1.333,
    "augmented_fourth": 1.414,
    "perfect_fifth": 1.5,
    "golden_ratio": 1.618,
}

RESPONSIVE_MIN_WIDTH = 320
RESPONSIVE_MAX_WIDTH = 1200


@dataclass(frozen=True, slots=True)
class TypographyScale:
    """Ten named font sizes with matching line heights and letter spacing."""

    id: str
    name: str
    base_size: float
    ratio: float
    sizes: dict[str, float] = field(default_factory=dict)
    line_heights: dict[str, float] = field(default_factory=dict)
    letter_spacing: dict[str, float] = field(default_factory=dict)


def round2(value: float) -> float:
    """Round half up to two decimals."""
    return math.floor(value * 100 + 0.5) / 100


def line_height_for(font_size: float) -> float:
    """Smaller text gets proportionally more line height."""
    if font_size <= 12:
        return 1.6
    if font_size <= 16:
        return 1.5
    if font_size <= 20:
        return 1.4
    if font_size <= 24:
        return 1.3
    if font_size <= 32:
        return 1.25
    return 1.2


def letter_spacing_for(font_size: float) -> float:
    """Letter spacing in em; larger text is tracked tighter."""
    if font_size <= 12:
        return 0.025
    if font_size <= 16:
        return 0.015
    if font_size <= 20:
        return 0.01
    if font_size <= 24:
        return 0.005
    if font_size <= 32:
        return 0
    return -0.01


def generate_scale(base_size: float, ratio: float, scale_id: str, name: str) -> TypographyScale:
    """Build a geometric scale from a base pixel size and a ratio."""
    sizes: dict[str, float] = {}
    for key in SIZE_KEYS:
        step = _SIZE_STEPS[key]
        sizes[key] = base_size if step == 0 else round2(base_size * ratio**step)
    return TypographyScale(
        id=scale_id,
        name=name,
        base_size=base_size,
        ratio=ratio,
        sizes=sizes,
        line_heights={key: line_height_for(size) for key, size in sizes.items()},
        letter_spacing={key: letter_spacing_for(size) for key, size in sizes.items()},
    )


TYPOGRAPHY_SCALES: dict[str, TypographyScale] = {
    "small": generate_scale(14, 1.2, "small", "Small Scale"),
    "medium": generate_scale(16, 1.25, "medium", "Medium Scale"),
    "large": generate_scale(18, 1.333, "large", "Large Scale"),
}


def responsive_size(screen_width: float, min_size: float = 14, max_size: float = 24) -> float:
    """Interpolate a font size linearly between the mobile and desktop widths."""
    if screen_width <= RESPONSIVE_MIN_WIDTH:
        return min_size
    if screen_width >= RESPONSIVE_MAX_WIDTH:
        return max_size
    position = (screen_width - RESPONSIVE_MIN_WIDTH) / (RESPONSIVE_MAX_WIDTH - RESPONSIVE_MIN_WIDTH)
    return round2(min_size + (max_size - min_size) * position)


def apply_responsive_scaling(scale: TypographyScale, factor: float) -> TypographyScale:
    """Return a copy of `scale` with every size multiplied by `factor`."""
    return TypographyScale(
        id=scale.id,
        name=scale.name,
        base_size=scale.base_size * factor,
        ratio=scale.ratio,
        sizes={key: round2(value * factor) for key, value in scale.sizes.items()},
        line_heights=dict(scale.line_heights),
        letter_spacing=dict(scale.letter_spacing),
    )


def validate_scale(scale: TypographyScale, *, min_body_size: float = 16) -> list[str]:
    """Return readability warnings for a scale. An empty list means no concerns."""
    warnings: list[str] = []
    base = scale.sizes.get("base", scale.base_size)
    if base < min_body_size:
        warnings.append(f"Base font size ({base}px) is below the recommended minimum ({min_body_size}px)")
    xs = scale.sizes.get("xs")
    if xs is not None and xs < 12:
        warnings.append(f"Extra small font size ({xs}px) may be too small for some users")

    for key, line_height in scale.line_heights.items():
        if line_height < 1.2:
            warnings.append(f"Line height for {key} ({line_height}) is below recommended minimum (1.2)")
        if line_height > 2.0:
            warnings.append(f"Line height for {key} ({line_height}) may be too large")

    ordered = [scale.sizes[key] for key in SIZE_KEYS if key in scale.sizes]
    for previous, current in zip(ordered, ordered[1:]):
        if previous <= 0:
            break
        step = current / previous
        if step < 1.1:
            warnings.append("Font size progression may be too subtle for clear hierarchy")
            break
        if step > 2.0:
            warnings.append("Font size progression may be too dramatic")
            break
    return warnings
