"""Tests for the runtime theme service."""

from __future__ import annotations

import asyncio
import dataclasses
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from formtheme.core.applicator import MemoryStyleSink, StyleApplicationManager
from formtheme.core.font_presets import default_catalog
from formtheme.themes.compiler import compile_theme
from formtheme.themes.defaults import create_dark_theme, create_default_theme
from formtheme.themes.models import ButtonCustomization
from formtheme.themes.persistence import ThemePersistence
from formtheme.themes.service import ThemeService
from formtheme.themes.store import ThemeStore

DEBOUNCE = 0.016
AUTOSAVE = 0.5


@dataclasses.dataclass
class Harness:
    store: ThemeStore
    sink: MemoryStyleSink
    persistence: ThemePersistence
    service: ThemeService
    scheduler: object

    def fire(self, delay: float) -> None:
        for timer in self.scheduler.pending:
            if timer.delay == pytest.approx(delay):
                timer.cancelled = True
                timer.callback()


def _closing_spawn() -> MagicMock:
    return MagicMock(side_effect=lambda coro: coro.close())


def _run_preloads(scheduler) -> None:
    for timer in scheduler.pending:
        if timer.delay == 0:
            timer.cancelled = True
            timer.callback()


@pytest.fixture
def harness(scheduler) -> Harness:
    store = ThemeStore()
    sink = MemoryStyleSink()
    persistence = ThemePersistence()
    service = ThemeService(
        store,
        StyleApplicationManager(sink, scheduler, debounce_ms=16),
        persistence,
        scheduler,
        autosave_delay_ms=500,
    )
    service.start()
    return Harness(store, sink, persistence, service, scheduler)


def test_start_applies_active_theme(harness: Harness) -> None:
    assert harness.sink.table == compile_theme(harness.store.state.active_theme)
    assert harness.sink.apply_count == 1


def test_set_theme_applies_in_full_without_debounce(harness: Harness) -> None:
    applied: list[str] = []
    harness.service.theme_applied.connect(applied.append)
    ok, message = harness.service.set_theme(create_dark_theme())
    assert ok
    assert message == "Applied theme: Dark Theme"
    assert harness.sink.table == compile_theme(create_dark_theme())
    assert applied == ["dark"]
    assert not harness.service.autosave_pending


def test_invalid_theme_is_rejected_before_apply(harness: Harness) -> None:
    errors: list[str] = []
    harness.service.error_raised.connect(errors.append)
    broken = dataclasses.replace(create_default_theme(), button_customization=ButtonCustomization(min_height=30))
    ok, message = harness.service.set_theme(broken)
    assert not ok
    assert "buttonCustomization.minHeight" in message
    assert harness.store.state.error == message
    assert errors == [message]
    assert harness.sink.apply_count == 1


def test_edits_are_debounced_as_a_diff(harness: Harness) -> None:
    harness.store.update_color_palette(primary="#000000")
    harness.store.update_color_palette(primary="#111111")
    assert harness.sink.apply_count == 1

    harness.fire(DEBOUNCE)
    assert harness.sink.apply_count == 2
    assert harness.sink.table["--form-color-primary"] == "#111111"
    assert harness.sink.table == compile_theme(harness.store.state.current_theme)


def test_autosave_after_quiet_period(harness: Harness) -> None:
    harness.store.update_theme(name="Draft")
    harness.store.update_theme(name="Draft 2")
    assert harness.service.autosave_pending
    assert len([t for t in harness.scheduler.pending if t.delay == pytest.approx(AUTOSAVE)]) == 1
    assert harness.persistence.load("current") is None

    harness.fire(AUTOSAVE)
    assert harness.persistence.load("current").name == "Draft 2"
    assert not harness.store.state.has_unsaved_changes
    assert not harness.service.autosave_pending


def test_failed_autosave_reports_error(scheduler) -> None:
    store = ThemeStore()
    persistence = MagicMock(spec=ThemePersistence)
    persistence.save.side_effect = OSError("disk full")
    service = ThemeService(store, StyleApplicationManager(MemoryStyleSink(), scheduler), persistence, scheduler)
    errors: list[str] = []
    service.error_raised.connect(errors.append)
    service.start()

    store.update_theme(name="Unsaveable")
    scheduler.run_pending()
    assert errors
    assert store.state.has_unsaved_changes


class TestPreview:
    """Preview mode renders a theme without touching the current one."""

    def test_preview_applies_and_reverts(self, harness: Harness) -> None:
        default_table = dict(harness.sink.table)
        ok, _ = harness.service.enable_preview(create_dark_theme())
        assert ok
        assert harness.sink.table == compile_theme(create_dark_theme())
        assert harness.store.state.current_theme.id == "default"
        assert not harness.service.autosave_pending

        harness.service.disable_preview()
        assert harness.sink.table == default_table

    def test_commit_promotes_preview_and_autosaves(self, harness: Harness) -> None:
        harness.service.enable_preview(create_dark_theme())
        ok, message = harness.service.commit_preview()
        assert ok
        assert message == "Committed theme: Dark Theme"
        assert harness.store.state.current_theme.id == "dark"
        assert harness.service.autosave_pending
        harness.fire(AUTOSAVE)
        assert harness.persistence.load("current").id == "dark"

    def test_commit_without_preview(self, harness: Harness) -> None:
        assert harness.service.commit_preview() == (False, "No preview theme to commit")

    def test_invalid_preview_rejected(self, harness: Harness) -> None:
        broken = dataclasses.replace(create_dark_theme(), name="")
        ok, _ = harness.service.enable_preview(broken)
        assert not ok
        assert not harness.store.state.preview_mode


class TestImportExport:
    """Text import and export through the service."""

    def test_export_current_theme(self, harness: Harness) -> None:
        document = json.loads(harness.service.export_theme())
        assert document["id"] == "default"
        assert document["schemaVersion"] == "2.0.0"

    def test_import_applies_and_saves_immediately(self, harness: Harness) -> None:
        text = ThemePersistence().export_as_text(create_dark_theme())
        ok, message = harness.service.import_theme(text)
        assert ok
        assert message == "Imported theme: Dark Theme"
        assert harness.sink.table == compile_theme(create_dark_theme())
        assert harness.persistence.load("current").id == "dark"

    def test_bad_import_sets_error(self, harness: Harness) -> None:
        ok, message = harness.service.import_theme('{"id": "x", "name": "X", "schemaVersion": "9.0.0"}')
        assert not ok
        assert "unsupported version" in message
        assert harness.store.state.error == message
        assert harness.store.state.current_theme.id == "default"

    def test_load_saved(self, harness: Harness) -> None:
        assert harness.service.load_saved() == (False, "No saved theme found")
        harness.persistence.save(create_dark_theme(), "current")
        assert harness.service.load_saved() == (True, "Loaded theme: Dark Theme")
        assert harness.store.state.current_theme.id == "dark"


def test_reset_removes_saved_theme(harness: Harness) -> None:
    harness.service.import_theme(ThemePersistence().export_as_text(create_dark_theme()))
    harness.store.update_theme(name="Pending")
    ok, _ = harness.service.reset_theme()
    assert ok
    assert harness.persistence.load("current") is None
    assert not harness.service.autosave_pending
    assert harness.sink.table == compile_theme(create_default_theme())


def test_shutdown_flushes_and_saves_pending(harness: Harness) -> None:
    harness.store.update_color_palette(primary="#222222")
    harness.service.shutdown()
    assert harness.sink.table["--form-color-primary"] == "#222222"
    assert harness.persistence.load("current").color_palette.primary == "#222222"
    assert not harness.service.autosave_pending

    harness.store.update_theme(name="After shutdown")
    assert not harness.service.autosave_pending


def test_validate_current(harness: Harness) -> None:
    assert harness.service.validate_current().is_valid


class TestFontPreload:
    """Font preloading follows the active font families."""

    def test_preload_on_start_and_on_family_change(self, scheduler) -> None:
        store = ThemeStore()
        spawn = _closing_spawn()
        service = ThemeService(
            store,
            StyleApplicationManager(MemoryStyleSink(), scheduler),
            ThemePersistence(),
            scheduler,
            font_loader=MagicMock(),
            spawn=spawn,
        )
        service.start()
        assert spawn.call_count == 0
        _run_preloads(scheduler)
        assert spawn.call_count == 1

        store.update_typography(scale="large")
        _run_preloads(scheduler)
        assert spawn.call_count == 1

        store.update_typography(primary=default_catalog().get("roboto"))
        assert spawn.call_count == 1
        _run_preloads(scheduler)
        assert spawn.call_count == 2

    def test_preload_toggles_typography_loading(self, scheduler) -> None:
        store = ThemeStore()
        loader = MagicMock()
        loader.preload_fonts = AsyncMock()
        flags: list[bool] = []
        store.subscribe(lambda previous, current: flags.append(current.typography_loading))
        service = ThemeService(
            store,
            StyleApplicationManager(MemoryStyleSink(), scheduler),
            ThemePersistence(),
            scheduler,
            font_loader=loader,
            spawn=asyncio.run,
        )
        service.start()
        _run_preloads(scheduler)

        config = store.state.current_theme.advanced_typography
        loader.preload_fonts.assert_awaited_once_with((config.primary, config.secondary, config.mono), 3000)
        assert flags == [True, False]

    def test_no_preload_without_advanced_typography(self, scheduler) -> None:
        bare = dataclasses.replace(create_default_theme(), advanced_typography=None)
        spawn = _closing_spawn()
        service = ThemeService(
            ThemeStore(),
            StyleApplicationManager(MemoryStyleSink(), scheduler),
            ThemePersistence(),
            scheduler,
            font_loader=MagicMock(),
            spawn=spawn,
        )
        service.start()
        _run_preloads(scheduler)
        spawn.reset_mock()
        service.set_theme(bare)
        _run_preloads(scheduler)
        spawn.assert_not_called()

    def test_observers_see_consecutive_states_during_preload(self, scheduler) -> None:
        store = ThemeStore()
        loader = MagicMock()
        loader.preload_fonts = AsyncMock()
        service = ThemeService(
            store,
            StyleApplicationManager(MemoryStyleSink(), scheduler),
            ThemePersistence(),
            scheduler,
            font_loader=loader,
            spawn=asyncio.run,
        )
        service.start()
        _run_preloads(scheduler)
        transitions: list[tuple] = []
        store.subscribe(lambda previous, current: transitions.append((previous, current)))

        store.update_typography(primary=default_catalog().get("roboto"))
        _run_preloads(scheduler)

        assert len(transitions) == 3
        for (_, earlier), (later, _) in zip(transitions, transitions[1:]):
            assert later == earlier
        assert [current.typography_loading for _, current in transitions] == [False, True, False]
        service.shutdown()

    def test_shutdown_cancels_queued_preload(self, scheduler) -> None:
        spawn = _closing_spawn()
        service = ThemeService(
            ThemeStore(),
            StyleApplicationManager(MemoryStyleSink(), scheduler),
            ThemePersistence(),
            scheduler,
            font_loader=MagicMock(),
            spawn=spawn,
        )
        service.start()
        service.shutdown()
        _run_preloads(scheduler)
        spawn.assert_not_called()
