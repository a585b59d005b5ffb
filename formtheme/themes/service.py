"""Runtime theme apply and persistence service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

from PySide6.QtCore import QObject, Signal

from formtheme.core.applicator import Scheduler, StyleApplicationManager, TimerHandle
from formtheme.core.fonts import FontLoader, FontLoadingState
from formtheme.errors import FormThemeError, classify_exception, format_error_for_user
from formtheme.themes.compiler import StyleTable, compile_theme
from formtheme.themes.models import Theme, ThemeState, TypographyConfig
from formtheme.themes.persistence import ThemePersistence, parse_theme_document
from formtheme.themes.store import ThemeStore
from formtheme.themes.validation import ValidationResult, validate_theme

logger = logging.getLogger(__name__)

Spawn = Callable[[Coroutine[Any, Any, None]], Any]


def _spawn_on_running_loop(coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
    return asyncio.get_running_loop().create_task(coro)


class ThemeService(QObject):
    """Keep the style sink, font loader and storage in step with the store."""

    theme_applied = Signal(str)
    error_raised = Signal(str)

    def __init__(
        self,
        store: ThemeStore,
        manager: StyleApplicationManager,
        persistence: ThemePersistence,
        scheduler: Scheduler,
        *,
        font_loader: FontLoader | None = None,
        spawn: Spawn | None = None,
        storage_key: str = "current",
        autosave_delay_ms: int = 1000,
    ) -> None:
        super().__init__()
        self._store = store
        self._manager = manager
        self._persistence = persistence
        self._scheduler = scheduler
        self._font_loader = font_loader
        self._spawn = spawn or _spawn_on_running_loop
        self._storage_key = storage_key
        self._autosave_delay_ms = max(0, autosave_delay_ms)
        self._compiled: StyleTable = {}
        self._autosave: TimerHandle | None = None
        self._preload: TimerHandle | None = None
        self._tasks: set[Any] = set()
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def store(self) -> ThemeStore:
        return self._store

    @property
    def autosave_pending(self) -> bool:
        return self._autosave is not None

    def start(self) -> None:
        if self._unsubscribers:
            return
        self._unsubscribers.append(self._store.subscribe(self._on_state_changed))
        if self._font_loader is not None:
            self._unsubscribers.append(self._font_loader.subscribe(self._on_font_state))
        active = self._store.state.active_theme
        self._apply_full(active)
        self._preload_fonts(active.advanced_typography)

    def shutdown(self) -> None:
        """Flush pending styles and any pending autosave, then stop listening."""
        self._manager.flush()
        if self._preload is not None:
            self._preload.cancel()
            self._preload = None
        if self._autosave is not None:
            self._autosave.cancel()
            self._autosave = None
            self._save_now()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    # -- operations --

    def set_theme(self, theme: Theme) -> tuple[bool, str]:
        result = validate_theme(theme)
        if not result.is_valid:
            message = _summarize(result)
            self._store.set_error(message)
            return False, message
        self._store.set_theme(theme)
        return True, f"Applied theme: {theme.name}"

    def reset_theme(self) -> tuple[bool, str]:
        self._cancel_autosave()
        self._store.reset_theme()
        self._persistence.remove(self._storage_key)
        return True, "Theme reset to default"

    def enable_preview(self, theme: Theme) -> tuple[bool, str]:
        result = validate_theme(theme)
        if not result.is_valid:
            return False, _summarize(result)
        self._store.set_preview_theme(theme)
        self._store.set_preview_mode(True)
        return True, f"Previewing theme: {theme.name}"

    def disable_preview(self) -> tuple[bool, str]:
        self._store.set_preview_mode(False)
        return True, "Preview closed"

    def commit_preview(self) -> tuple[bool, str]:
        preview = self._store.state.preview_theme
        if preview is None:
            return False, "No preview theme to commit"
        self._store.commit_preview()
        return True, f"Committed theme: {preview.name}"

    def load_saved(self) -> tuple[bool, str]:
        theme = self._persistence.load(self._storage_key)
        if theme is None:
            return False, "No saved theme found"
        self._store.set_theme(theme)
        return True, f"Loaded theme: {theme.name}"

    def export_theme(self) -> str:
        return self._persistence.export_as_text(self._store.state.current_theme)

    def import_theme(self, text: str) -> tuple[bool, str]:
        try:
            theme = parse_theme_document(text)
        except FormThemeError as exc:
            logger.error("theme import rejected: %s", exc)
            message = format_error_for_user(exc)
            self._store.set_error(message)
            return False, message
        self._store.set_theme(theme)
        self._save_now()
        return True, f"Imported theme: {theme.name}"

    def validate_current(self) -> ValidationResult:
        return validate_theme(self._store.state.current_theme)

    # -- store wiring --

    def _on_state_changed(self, previous: ThemeState, current: ThemeState) -> None:
        before, after = previous.active_theme, current.active_theme
        if after is not before:
            try:
                if _is_identity_change(previous, current):
                    self._apply_full(after)
                else:
                    self._apply_diff(after)
            except Exception as exc:
                logger.exception("could not apply theme %s", after.id)
                self.error_raised.emit(format_error_for_user(classify_exception(exc)))
            if _font_identity(before.advanced_typography) != _font_identity(after.advanced_typography):
                self._preload_fonts(after.advanced_typography)

        if current.error and current.error != previous.error:
            self.error_raised.emit(current.error)

        if current.has_unsaved_changes and not current.preview_mode:
            self._schedule_autosave()
        elif self._autosave is not None and not current.has_unsaved_changes:
            self._cancel_autosave()

    def _apply_full(self, theme: Theme) -> None:
        self._compiled = compile_theme(theme)
        self._manager.apply_properties(self._compiled)
        logger.info("applied theme %s (%d properties)", theme.id, len(self._compiled))
        self.theme_applied.emit(theme.id)

    def _apply_diff(self, theme: Theme) -> None:
        table = compile_theme(theme)
        changed = {name: value for name, value in table.items() if self._compiled.get(name) != value}
        self._compiled = table
        if changed:
            self._manager.update_properties(changed)

    # -- fonts --

    def _preload_fonts(self, config: TypographyConfig | None) -> None:
        if self._font_loader is None or config is None or not config.performance.preload_fonts:
            return
        # store observers are still running; start loading once dispatch has returned
        if self._preload is not None:
            self._preload.cancel()
        self._preload = self._scheduler.call_later(0, lambda: self._start_preload(config))

    def _start_preload(self, config: TypographyConfig) -> None:
        self._preload = None
        task = self._spawn(self._run_preload(self._font_loader, config))
        if hasattr(task, "add_done_callback"):
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _run_preload(self, loader: FontLoader, config: TypographyConfig) -> None:
        self._store.set_typography_loading(True)
        try:
            await loader.preload_fonts(
                (config.primary, config.secondary, config.mono),
                config.performance.load_timeout,
            )
        finally:
            self._store.set_typography_loading(False)

    def _on_font_state(self, state: FontLoadingState) -> None:
        self._store.set_font_loading_state(state)

    # -- autosave --

    def _schedule_autosave(self) -> None:
        self._cancel_autosave()
        self._autosave = self._scheduler.call_later(self._autosave_delay_ms / 1000, self._on_autosave)

    def _cancel_autosave(self) -> None:
        if self._autosave is not None:
            self._autosave.cancel()
            self._autosave = None

    def _on_autosave(self) -> None:
        self._autosave = None
        state = self._store.state
        if state.has_unsaved_changes and not state.preview_mode:
            self._save_now()

    def _save_now(self) -> None:
        try:
            self._persistence.save(self._store.state.current_theme, self._storage_key)
        except OSError as exc:
            logger.error("autosave failed: %s", exc)
            self._store.set_error(format_error_for_user(classify_exception(exc)))
            return
        self._store.mark_saved()


def _is_identity_change(previous: ThemeState, current: ThemeState) -> bool:
    """Whole-theme switches: set, reset, preview on or off, commit and preview swaps."""
    if previous.preview_mode != current.preview_mode:
        return True
    if previous.active_theme.id != current.active_theme.id:
        return True
    if current.preview_mode:
        return previous.preview_theme is not current.preview_theme
    return not current.has_unsaved_changes


def _font_identity(config: TypographyConfig | None) -> tuple[str, ...]:
    if config is None:
        return ()
    return (config.primary.family, config.secondary.family, config.mono.family)


def _summarize(result: ValidationResult) -> str:
    details = "; ".join(f"{issue.field}: {issue.message}" for issue in result.errors[:5])
    return f"Theme is invalid: {details}"
