"""Tests for debounced style application."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from formtheme.core.applicator import AsyncioScheduler, CssFileSink, MemoryStyleSink, StyleApplicationManager


def test_apply_properties_is_immediate(scheduler) -> None:
    sink = MemoryStyleSink()
    manager = StyleApplicationManager(sink, scheduler)
    manager.apply_properties({"--form-color-primary": "#3B82F6"})
    assert sink.table == {"--form-color-primary": "#3B82F6"}
    assert (sink.apply_count, sink.flush_count) == (1, 1)
    assert scheduler.timers == []


def test_identical_table_is_not_reapplied(scheduler) -> None:
    sink = MemoryStyleSink()
    manager = StyleApplicationManager(sink, scheduler)
    manager.apply_properties({"--form-spacing-md": "1rem"})
    manager.apply_properties({"--form-spacing-md": "1rem"})
    assert sink.apply_count == 1


def test_burst_of_updates_applies_once_with_latest_values(scheduler) -> None:
    sink = MemoryStyleSink()
    manager = StyleApplicationManager(sink, scheduler, debounce_ms=16)
    manager.apply_properties({"--form-color-primary": "#000000", "--form-spacing-md": "1rem"})

    for value in ("#111111", "#222222", "#333333"):
        manager.update_properties({"--form-color-primary": value})
    manager.update_properties({"--form-color-secondary": "#444444"})

    assert sink.apply_count == 1
    assert len(scheduler.pending) == 1
    assert scheduler.pending[0].delay == pytest.approx(0.016)

    scheduler.run_pending()
    assert sink.apply_count == 2
    assert sink.table == {
        "--form-color-primary": "#333333",
        "--form-spacing-md": "1rem",
        "--form-color-secondary": "#444444",
    }
    assert not manager.has_pending


def test_empty_update_schedules_nothing(scheduler) -> None:
    manager = StyleApplicationManager(MemoryStyleSink(), scheduler)
    manager.update_properties({})
    assert scheduler.timers == []


def test_flush_applies_pending_now(scheduler) -> None:
    sink = MemoryStyleSink()
    manager = StyleApplicationManager(sink, scheduler)
    manager.update_properties({"--form-button-min-height": "48px"})
    manager.flush()
    assert sink.table == {"--form-button-min-height": "48px"}
    assert scheduler.pending == []


def test_full_apply_discards_pending_updates(scheduler) -> None:
    sink = MemoryStyleSink()
    manager = StyleApplicationManager(sink, scheduler)
    manager.update_properties({"--form-color-primary": "#FF0000"})
    manager.apply_properties({"--form-color-primary": "#00FF00"})
    assert scheduler.pending == []
    assert sink.table == {"--form-color-primary": "#00FF00"}
    manager.flush()
    assert sink.apply_count == 1


def test_reset_forgets_live_set(scheduler) -> None:
    sink = MemoryStyleSink()
    manager = StyleApplicationManager(sink, scheduler)
    manager.apply_properties({"--form-color-primary": "#3B82F6"})
    manager.update_properties({"--form-color-primary": "#000000"})
    manager.reset()
    assert manager.current_properties == {}
    assert not manager.has_pending
    manager.apply_properties({"--form-color-primary": "#3B82F6"})
    assert sink.apply_count == 2


def test_sink_failure_propagates(scheduler) -> None:
    sink = MagicMock()
    sink.apply_all.side_effect = RuntimeError("sink broke")
    manager = StyleApplicationManager(sink, scheduler)
    with pytest.raises(RuntimeError, match="sink broke"):
        manager.apply_properties({"--form-color-primary": "#3B82F6"})


def test_failed_apply_is_retried_with_same_table(scheduler) -> None:
    sink = MagicMock()
    sink.apply_all.side_effect = [OSError("disk full"), None]
    manager = StyleApplicationManager(sink, scheduler)
    table = {"--form-color-primary": "#3B82F6"}
    with pytest.raises(OSError):
        manager.apply_properties(table)
    assert manager.current_properties == {}

    manager.apply_properties(table)

    assert sink.apply_all.call_count == 2
    sink.flush.assert_called_once_with()
    assert manager.current_properties == table


class TestCssFileSink:
    """Writing the applied table to a stylesheet file."""

    def test_writes_root_block_on_flush(self, tmp_path) -> None:
        sink = CssFileSink(tmp_path / "out" / "theme.css")
        sink.apply_all({"--form-color-primary": "#3B82F6", "--form-spacing-md": "1rem"})
        assert not sink.path.exists()
        sink.flush()
        assert sink.path.read_text(encoding="utf-8") == (
            ":root {\n  --form-color-primary: #3B82F6;\n  --form-spacing-md: 1rem;\n}\n"
        )

    def test_clean_flush_does_not_rewrite(self, tmp_path) -> None:
        path = tmp_path / "theme.css"
        sink = CssFileSink(path, selector=".form")
        sink.apply_all({"--form-color-primary": "#3B82F6"})
        sink.flush()
        path.write_text("edited", encoding="utf-8")
        sink.flush()
        assert path.read_text(encoding="utf-8") == "edited"


def test_asyncio_scheduler_fires_and_cancels() -> None:
    fired: list[str] = []

    async def scenario() -> None:
        scheduler = AsyncioScheduler()
        scheduler.call_later(0, lambda: fired.append("kept"))
        scheduler.call_later(0, lambda: fired.append("dropped")).cancel()
        await asyncio.sleep(0.01)

    asyncio.run(scenario())
    assert fired == ["kept"]
