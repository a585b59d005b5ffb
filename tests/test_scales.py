"""Tests for typography scales."""

from __future__ import annotations

import pytest

from formtheme.core.scales import (
    RECOMMENDED_RATIOS,
    SIZE_KEYS,
    TYPOGRAPHY_SCALES,
    apply_responsive_scaling,
    generate_scale,
    line_height_for,
    responsive_size,
    validate_scale,
)


def test_medium_scale_sizes() -> None:
    scale = TYPOGRAPHY_SCALES["medium"]
    assert scale.base_size == 16
    assert scale.sizes["base"] == 16
    assert scale.sizes["lg"] == 20
    assert scale.sizes["xl"] == 25
    assert scale.sizes["xs"] == 10.24


def test_generated_scale_covers_every_key() -> None:
    scale = generate_scale(15, RECOMMENDED_RATIOS["perfect_fourth"], "custom", "Custom")
    assert tuple(scale.sizes) == SIZE_KEYS
    assert set(scale.line_heights) == set(SIZE_KEYS)
    assert set(scale.letter_spacing) == set(SIZE_KEYS)
    ordered = [scale.sizes[key] for key in SIZE_KEYS]
    assert ordered == sorted(ordered)


def test_line_height_shrinks_as_text_grows() -> None:
    assert line_height_for(12) == 1.6
    assert line_height_for(16) == 1.5
    assert line_height_for(48) == 1.2


def test_responsive_size_interpolates_between_breakpoints() -> None:
    assert responsive_size(320) == 14
    assert responsive_size(100) == 14
    assert responsive_size(1200) == 24
    assert responsive_size(760) == 19


def test_apply_responsive_scaling_multiplies_sizes() -> None:
    scaled = apply_responsive_scaling(TYPOGRAPHY_SCALES["medium"], 0.5)
    assert scaled.sizes["base"] == 8
    assert scaled.sizes["xl"] == 12.5
    assert scaled.line_heights == TYPOGRAPHY_SCALES["medium"].line_heights


def test_validate_scale_flags_small_base_and_xs() -> None:
    warnings = validate_scale(TYPOGRAPHY_SCALES["small"])
    assert any("Base font size (14px)" in warning for warning in warnings)
    assert any("Extra small" in warning for warning in warnings)


def test_validate_scale_flags_dramatic_progression() -> None:
    warnings = validate_scale(generate_scale(16, 2.5, "wild", "Wild"))
    assert "Font size progression may be too dramatic" in warnings


def test_validate_scale_honours_custom_minimum() -> None:
    warnings = validate_scale(TYPOGRAPHY_SCALES["large"], min_body_size=20)
    assert any("below the recommended minimum (20px)" in warning for warning in warnings)


@pytest.mark.parametrize("name", sorted(TYPOGRAPHY_SCALES))
def test_builtin_scales_have_sane_line_heights(name: str) -> None:
    scale = TYPOGRAPHY_SCALES[name]
    assert all(1.2 <= value <= 2.0 for value in scale.line_heights.values())
