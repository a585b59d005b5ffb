"""Color parsing, WCAG contrast math and programmatic color variants."""

from __future__ import annotations

import colorsys
import math
import re

_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNC_COLOR_RE = re.compile(r"^(?:rgb|rgba|hsl|hsla)\([^)]+\)$", re.IGNORECASE)
_FUNC_PARTS_RE = re.compile(r"^(rgba?|hsla?)\((.*)\)$", re.IGNORECASE)

RGBA = tuple[int, int, int, float]

# WCAG 2.x thresholds
AA_NORMAL_TEXT = 4.5
AAA_NORMAL_TEXT = 7.0
AA_LARGE_TEXT = 3.0
AAA_LARGE_TEXT = 4.5
LARGE_TEXT_PX = 18


def is_valid_color(value: object) -> bool:
    """Return True for hex or well-formed functional color notation."""
    return parse_color(value) is not None


def parse_color(value: object) -> RGBA | None:
    """Parse a color expression into integer RGB channels and a float alpha."""
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if _HEX_COLOR_RE.match(cleaned):
        return _parse_hex(cleaned[1:])
    if not _FUNC_COLOR_RE.match(cleaned):
        return None

    match = _FUNC_PARTS_RE.match(cleaned)
    if match is None:
        return None
    func = match.group(1).lower()
    args = [part for part in re.split(r"[\s,/]+", match.group(2).strip()) if part]
    if len(args) not in (3, 4):
        return None
    try:
        alpha = _parse_alpha(args[3]) if len(args) == 4 else 1.0
        if func.startswith("rgb"):
            r, g, b = (_parse_rgb_channel(arg) for arg in args[:3])
        else:
            hue = float(args[0].removesuffix("deg")) % 360
            sat = _parse_percent(args[1])
            light = _parse_percent(args[2])
            fr, fg, fb = colorsys.hls_to_rgb(hue / 360, light, sat)
            r, g, b = (_clamp_channel(channel * 255) for channel in (fr, fg, fb))
    except (ValueError, OverflowError):
        return None
    return r, g, b, alpha


def to_hex(color: RGBA) -> str:
    r, g, b, _alpha = color
    return f"#{r:02x}{g:02x}{b:02x}"


def relative_luminance(value: str) -> float:
    """WCAG relative luminance of a color in [0, 1]."""
    rgba = parse_color(value)
    if rgba is None:
        raise ValueError(f"Invalid color: {value!r}")
    r, g, b, _alpha = rgba
    return 0.2126 * _linearize(r) + 0.7152 * _linearize(g) + 0.0722 * _linearize(b)


def contrast_ratio(first: str, second: str) -> float:
    """WCAG contrast ratio between two colors, in [1, 21]."""
    lum_a = relative_luminance(first)
    lum_b = relative_luminance(second)
    lighter, darker = max(lum_a, lum_b), min(lum_a, lum_b)
    return (lighter + 0.05) / (darker + 0.05)


def contrast_level(foreground: str, background: str, font_size: float) -> tuple[float, str]:
    """Return the contrast ratio and its WCAG level: "AAA", "AA" or "fail"."""
    ratio = contrast_ratio(foreground, background)
    if font_size >= LARGE_TEXT_PX:
        aaa, aa = AAA_LARGE_TEXT, AA_LARGE_TEXT
    else:
        aaa, aa = AAA_NORMAL_TEXT, AA_NORMAL_TEXT
    if ratio >= aaa:
        return ratio, "AAA"
    if ratio >= aa:
        return ratio, "AA"
    return ratio, "fail"


def darken(value: str, percent: float) -> str:
    """Scale RGB channels toward black by `percent`.

    Unparseable input is returned unchanged so callers can always emit
    something.
    """
    rgba = parse_color(value)
    if rgba is None:
        return value
    factor = (100 - percent) / 100
    r, g, b, alpha = rgba
    return _format(
        (_round_half_up(r * factor), _round_half_up(g * factor), _round_half_up(b * factor), alpha)
    )


def lighten(value: str, percent: float) -> str:
    """Blend RGB channels toward white by `percent`."""
    rgba = parse_color(value)
    if rgba is None:
        return value
    factor = percent / 100
    r, g, b, alpha = rgba
    return _format(
        (
            _round_half_up(r + (255 - r) * factor),
            _round_half_up(g + (255 - g) * factor),
            _round_half_up(b + (255 - b) * factor),
            alpha,
        )
    )


def _format(color: RGBA) -> str:
    r, g, b, alpha = color
    if alpha >= 1:
        return to_hex(color)
    return f"rgba({r}, {g}, {b}, {alpha:g})"


def _parse_hex(digits: str) -> RGBA:
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    r = int(digits[0:2], 16)
    g = int(digits[2:4], 16)
    b = int(digits[4:6], 16)
    alpha = int(digits[6:8], 16) / 255 if len(digits) == 8 else 1.0
    return r, g, b, alpha


def _parse_rgb_channel(raw: str) -> int:
    if raw.endswith("%"):
        return _clamp_channel(float(raw[:-1]) * 255 / 100)
    return _clamp_channel(float(raw))


def _parse_percent(raw: str) -> float:
    number = float(raw.removesuffix("%"))
    return min(max(number / 100, 0.0), 1.0)


def _parse_alpha(raw: str) -> float:
    if raw.endswith("%"):
        number = float(raw[:-1]) / 100
    else:
        number = float(raw)
    return min(max(number, 0.0), 1.0)


def _clamp_channel(number: float) -> int:
    return min(max(_round_half_up(number), 0), 255)


def _round_half_up(number: float) -> int:
    return int(math.floor(number + 0.5))


def _linearize(channel: int) -> float:
    c = channel / 255
    if c <= 0.03928:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4
