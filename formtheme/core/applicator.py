"""Debounced delivery of compiled style tables to a sink."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Mapping, Protocol

logger = logging.getLogger(__name__)


class StyleSink(Protocol):
    def apply_all(self, table: Mapping[str, str]) -> None: ...

    def flush(self) -> None: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle: ...


class MemoryStyleSink:
    """Keeps the last applied table; used by headless hosts and tests."""

    def __init__(self) -> None:
        self.table: dict[str, str] = {}
        self.apply_count = 0
        self.flush_count = 0

    def apply_all(self, table: Mapping[str, str]) -> None:
        self.table = dict(table)
        self.apply_count += 1

    def flush(self) -> None:
        self.flush_count += 1


class CssFileSink:
    """Writes the applied table as a ``:root`` block when flushed."""

    def __init__(self, path: Path, selector: str = ":root") -> None:
        self._path = Path(path)
        self._selector = selector
        self._table: dict[str, str] = {}
        self._dirty = False

    @property
    def path(self) -> Path:
        return self._path

    def apply_all(self, table: Mapping[str, str]) -> None:
        self._table = dict(table)
        self._dirty = True

    def flush(self) -> None:
        if not self._dirty:
            return
        declarations = "\n".join(f"  {name}: {value};" for name, value in self._table.items())
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(f"{self._selector} {{\n{declarations}\n}}\n", encoding="utf-8")
        self._dirty = False
        logger.debug("wrote %d style properties to %s", len(self._table), self._path)


class AsyncioScheduler:
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_seconds, callback)


class StyleApplicationManager:
    """Applies style tables to a sink, coalescing bursts of partial updates.

    ``apply_properties`` replaces the live set right away. ``update_properties``
    collects partial tables until the quiet window passes, then applies the
    merged result once.
    """

    def __init__(self, sink: StyleSink, scheduler: Scheduler, debounce_ms: int = 16) -> None:
        self._sink = sink
        self._scheduler = scheduler
        self._debounce_ms = max(0, int(debounce_ms))
        self._live: dict[str, str] = {}
        self._pending: dict[str, str] = {}
        self._timer: TimerHandle | None = None

    @property
    def current_properties(self) -> dict[str, str]:
        return dict(self._live)

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def apply_properties(self, table: Mapping[str, str]) -> None:
        self._cancel_timer()
        self._pending.clear()
        self._apply(dict(table))

    def update_properties(self, partial: Mapping[str, str]) -> None:
        if not partial:
            return
        self._pending.update(partial)
        self._cancel_timer()
        self._timer = self._scheduler.call_later(self._debounce_ms / 1000, self._on_timeout)

    def flush(self) -> None:
        self._cancel_timer()
        if not self._pending:
            return
        merged = {**self._live, **self._pending}
        self._pending.clear()
        self._apply(merged)

    def reset(self) -> None:
        """Drop pending updates and forget the live set without touching the sink."""
        self._cancel_timer()
        self._pending.clear()
        self._live = {}

    def _on_timeout(self) -> None:
        self._timer = None
        self.flush()

    def _apply(self, table: dict[str, str]) -> None:
        if table == self._live:
            return
        try:
            self._sink.apply_all(table)
            self._sink.flush()
        except Exception:
            logger.exception("style sink failed to apply %d properties", len(table))
            raise
        self._live = table

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
