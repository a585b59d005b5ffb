"""One-way projection of advanced theme sections onto the legacy fields.

Advanced sections are the source of truth. Legacy fields are derived from
them whenever they change and are never read back into the advanced form,
except to seed a palette that does not exist yet.
"""

from __future__ import annotations

import dataclasses

from formtheme.themes.constants import PALETTE_TO_LEGACY
from formtheme.themes.models import ColorPalette, ThemeColors, ThemeTypography, TypographyConfig


def project_typography_to_legacy(typography: ThemeTypography, config: TypographyConfig) -> ThemeTypography:
    """Legacy family strings become the primary and mono font stacks."""
    return dataclasses.replace(
        typography,
        font_family=config.primary.stack,
        font_family_mono=config.mono.stack,
    )


def project_palette_to_legacy(colors: ThemeColors, palette: ColorPalette) -> ThemeColors:
    changes = {legacy: getattr(palette, role) for role, legacy in PALETTE_TO_LEGACY.items()}
    return dataclasses.replace(colors, **changes)


def palette_from_legacy(colors: ThemeColors) -> ColorPalette:
    """Seed a palette from legacy colors so projecting it back changes nothing."""
    return ColorPalette(
        primary=colors.primary,
        secondary=colors.secondary,
        tertiary=colors.border,
        text_primary=colors.text_primary,
        text_secondary=colors.text_secondary,
        text_tertiary=colors.text_muted,
        text_inverse=colors.text_inverse,
        background=colors.background,
        surface=colors.surface,
        surface_elevated=colors.surface_elevated,
        success=colors.success,
        warning=colors.warning,
        error=colors.error,
        info=colors.info,
        focus=colors.border_focus,
        overlay=colors.overlay,
    )

