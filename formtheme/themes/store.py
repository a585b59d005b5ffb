"""Observable holder for the theme state."""

from __future__ import annotations

import contextlib
import dataclasses
import logging
from datetime import datetime
from typing import Any, Callable

from PySide6.QtCore import QObject, Signal

from formtheme.core.fonts import FontLoadingState
from formtheme.errors import ThemeValidationError
from formtheme.themes.models import ButtonCustomization, ColorPalette, Theme, ThemeState, TypographyConfig
from formtheme.themes.reducer import (
    CommitPreview,
    MarkSaved,
    ResetTheme,
    SetError,
    SetFontLoadingState,
    SetLoading,
    SetPreviewMode,
    SetPreviewTheme,
    SetTheme,
    SetTypographyLoading,
    ThemeAction,
    UpdateButtonCustomization,
    UpdateColorPalette,
    UpdateTheme,
    UpdateTypography,
    initial_state,
    reduce,
)

logger = logging.getLogger(__name__)

StateObserver = Callable[[ThemeState, ThemeState], None]

_TIMESTAMP_FIELDS = ("created_at", "updated_at")


class ThemeStore(QObject):
    """Holds one `ThemeState` and publishes every transition.

    Observers receive ``(previous, current)``. A failing observer is logged
    and does not stop the others from being notified.
    """

    state_changed = Signal(object)

    def __init__(
        self,
        state: ThemeState | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__()
        self._state = state or initial_state()
        self._clock = clock
        self._observers: list[StateObserver] = []

    @property
    def state(self) -> ThemeState:
        return self._state

    def dispatch(self, action: ThemeAction) -> ThemeState:
        previous = self._state
        now = self._clock() if self._clock is not None else None
        current = reduce(previous, action, now=now)
        if current == previous:
            return current
        self._state = current
        logger.debug("theme action %s applied", type(action).__name__)
        self.state_changed.emit(current)
        for observer in list(self._observers):
            try:
                observer(previous, current)
            except Exception:
                logger.exception("theme state observer failed after %s", type(action).__name__)
        return current

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._observers.remove(observer)

        return unsubscribe

    # -- action helpers --

    def set_theme(self, theme: Theme) -> ThemeState:
        return self.dispatch(SetTheme(theme))

    def update_theme(self, **changes: Any) -> ThemeState:
        stamped = sorted(key for key in changes if key in _TIMESTAMP_FIELDS)
        if stamped:
            raise ThemeValidationError(f"theme: timestamps are managed by the store: {', '.join(stamped)}")
        _check_fields(Theme, changes, "theme")
        return self.dispatch(UpdateTheme(changes))

    def update_typography(self, **changes: Any) -> ThemeState:
        if not changes:
            raise ThemeValidationError("typography update: no changes given")
        _check_fields(TypographyConfig, changes, "typography update")
        return self.dispatch(UpdateTypography(changes))

    def update_button_customization(self, **changes: Any) -> ThemeState:
        _check_fields(ButtonCustomization, changes, "button customization update")
        return self.dispatch(UpdateButtonCustomization(changes))

    def update_color_palette(self, **changes: Any) -> ThemeState:
        _check_fields(ColorPalette, changes, "color palette update")
        return self.dispatch(UpdateColorPalette(changes))

    def set_font_loading_state(self, state: FontLoadingState) -> ThemeState:
        return self.dispatch(SetFontLoadingState(state.family, state))

    def set_preview_theme(self, theme: Theme | None) -> ThemeState:
        return self.dispatch(SetPreviewTheme(theme))

    def set_preview_mode(self, enabled: bool) -> ThemeState:
        return self.dispatch(SetPreviewMode(enabled))

    def commit_preview(self) -> ThemeState:
        return self.dispatch(CommitPreview())

    def set_loading(self, loading: bool) -> ThemeState:
        return self.dispatch(SetLoading(loading))

    def set_typography_loading(self, loading: bool) -> ThemeState:
        return self.dispatch(SetTypographyLoading(loading))

    def set_error(self, message: str | None) -> ThemeState:
        return self.dispatch(SetError(message))

    def reset_theme(self) -> ThemeState:
        return self.dispatch(ResetTheme())

    def mark_saved(self) -> ThemeState:
        return self.dispatch(MarkSaved())


def _check_fields(model: type, changes: dict[str, Any], context: str) -> None:
    allowed = {model_field.name for model_field in dataclasses.fields(model)}
    unknown = sorted(key for key in changes if key not in allowed)
    if unknown:
        joined = ", ".join(unknown)
        raise ThemeValidationError(f"{context}: unsupported keys found: {joined}")
