"""Theme state transitions.

`reduce` is the only producer of new `ThemeState` values. Actions are
small frozen dataclasses; dispatch is an exhaustive ``match`` so adding an
action without handling it fails type checking.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, assert_never

from formtheme.core.fonts import FontLoadingState
from formtheme.themes.defaults import create_default_theme
from formtheme.themes.models import ButtonCustomization, Theme, ThemeState
from formtheme.themes.projection import (
    palette_from_legacy,
    project_palette_to_legacy,
    project_typography_to_legacy,
)

MISSING_TYPOGRAPHY_ERROR = "Cannot update typography: No advanced typography configuration found"


@dataclass(frozen=True, slots=True)
class SetTheme:
    theme: Theme


@dataclass(frozen=True, slots=True)
class UpdateTheme:
    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class UpdateTypography:
    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class UpdateButtonCustomization:
    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class UpdateColorPalette:
    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SetFontLoadingState:
    family: str
    state: FontLoadingState


@dataclass(frozen=True, slots=True)
class SetPreviewTheme:
    theme: Theme | None


@dataclass(frozen=True, slots=True)
class SetPreviewMode:
    enabled: bool


@dataclass(frozen=True, slots=True)
class CommitPreview:
    pass


@dataclass(frozen=True, slots=True)
class SetLoading:
    loading: bool


@dataclass(frozen=True, slots=True)
class SetTypographyLoading:
    loading: bool


@dataclass(frozen=True, slots=True)
class SetError:
    message: str | None


@dataclass(frozen=True, slots=True)
class ResetTheme:
    pass


@dataclass(frozen=True, slots=True)
class MarkSaved:
    pass


ThemeAction = (
    SetTheme
    | UpdateTheme
    | UpdateTypography
    | UpdateButtonCustomization
    | UpdateColorPalette
    | SetFontLoadingState
    | SetPreviewTheme
    | SetPreviewMode
    | CommitPreview
    | SetLoading
    | SetTypographyLoading
    | SetError
    | ResetTheme
    | MarkSaved
)


def initial_state(theme: Theme | None = None) -> ThemeState:
    return ThemeState(current_theme=theme or create_default_theme())


def reduce(state: ThemeState, action: ThemeAction, *, now: datetime | None = None) -> ThemeState:
    """Return the state that follows `state` after `action`."""
    stamp = now or datetime.now(timezone.utc)
    match action:
        case SetTheme(theme=theme):
            return dataclasses.replace(state, current_theme=theme, has_unsaved_changes=False, error=None)

        case UpdateTheme(changes=changes):
            theme = dataclasses.replace(state.current_theme, **{**changes, "updated_at": stamp})
            if "advanced_typography" in changes and theme.advanced_typography is not None:
                typography = project_typography_to_legacy(theme.typography, theme.advanced_typography)
                theme = dataclasses.replace(theme, typography=typography)
            if "color_palette" in changes and theme.color_palette is not None:
                theme = dataclasses.replace(theme, colors=project_palette_to_legacy(theme.colors, theme.color_palette))
            return _edited(state, theme)

        case UpdateTypography(changes=changes):
            current = state.current_theme
            if current.advanced_typography is None:
                return dataclasses.replace(state, error=MISSING_TYPOGRAPHY_ERROR)
            config = dataclasses.replace(current.advanced_typography, **changes)
            typography = current.typography
            if "primary" in changes or "mono" in changes:
                typography = project_typography_to_legacy(typography, config)
            theme = dataclasses.replace(
                current,
                advanced_typography=config,
                typography=typography,
                updated_at=stamp,
            )
            return _edited(state, theme)

        case UpdateButtonCustomization(changes=changes):
            current = state.current_theme
            button = dataclasses.replace(current.button_customization or ButtonCustomization(), **changes)
            return _edited(state, dataclasses.replace(current, button_customization=button, updated_at=stamp))

        case UpdateColorPalette(changes=changes):
            current = state.current_theme
            palette = dataclasses.replace(current.color_palette or palette_from_legacy(current.colors), **changes)
            theme = dataclasses.replace(
                current,
                color_palette=palette,
                colors=project_palette_to_legacy(current.colors, palette),
                updated_at=stamp,
            )
            return _edited(state, theme)

        case SetFontLoadingState(family=family, state=font_state):
            return dataclasses.replace(
                state,
                font_loading_states={**state.font_loading_states, family: font_state},
            )

        case SetPreviewTheme(theme=theme):
            return dataclasses.replace(state, preview_theme=theme)

        case SetPreviewMode(enabled=enabled):
            return dataclasses.replace(
                state,
                preview_mode=enabled,
                preview_theme=state.preview_theme if enabled else None,
            )

        case CommitPreview():
            if state.preview_theme is None:
                return state
            committed = dataclasses.replace(state.preview_theme, updated_at=stamp)
            return dataclasses.replace(
                state,
                current_theme=committed,
                preview_theme=None,
                preview_mode=False,
                has_unsaved_changes=True,
                error=None,
            )

        case SetLoading(loading=loading):
            return dataclasses.replace(state, is_loading=loading)

        case SetTypographyLoading(loading=loading):
            return dataclasses.replace(state, typography_loading=loading)

        case SetError(message=message):
            return dataclasses.replace(state, error=message, is_loading=False, typography_loading=False)

        case ResetTheme():
            return dataclasses.replace(
                state,
                current_theme=create_default_theme(stamp),
                has_unsaved_changes=False,
                error=None,
                preview_mode=False,
                preview_theme=None,
                font_loading_states={},
            )

        case MarkSaved():
            return dataclasses.replace(state, has_unsaved_changes=False, error=None)

        case _:
            assert_never(action)


def _edited(state: ThemeState, theme: Theme) -> ThemeState:
    return dataclasses.replace(state, current_theme=theme, has_unsaved_changes=True, error=None)
