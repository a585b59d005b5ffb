"""Asynchronous font loading with per-family state tracking.

A `FontLoader` is created by the hosting application and injected where it
is needed. Each font identity (family plus weights) moves through
``loading -> loaded | error | timeout`` exactly once; terminal states are
cached until `FontLoader.clear_cache` is called.

Two strategies are supported:

* web fonts: the loader fetches the font manifest (a CSS document listing
  ``@font-face`` blocks), then fetches each requested weight's font file
  once and hands it to a registrar;
* local fonts: a measurer compares the rendered text box of the family with
  a known fallback; a different box means the family is installed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Protocol
from urllib.parse import quote
from urllib.request import Request, urlopen

from formtheme import __version__
from formtheme.errors import ErrorCode, FontLoadError

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_URL = (
    "https://fonts.googleapis.com/css2?family={family}:wght@{weights}"
    "&subset={subsets}&display={display}"
)
DEFAULT_TIMEOUT_MS = 3000
FONT_DISPLAY_VALUES: tuple[str, ...] = ("auto", "block", "swap", "fallback", "optional")

LOADING = "loading"
LOADED = "loaded"
ERROR = "error"
TIMEOUT = "timeout"
TERMINAL_STATUSES = frozenset({LOADED, ERROR, TIMEOUT})

_FONT_FACE_RE = re.compile(r"@font-face\s*\{(.*?)\}", re.DOTALL)
_FONT_WEIGHT_RE = re.compile(r"font-weight:\s*(\d+)(?:\s+(\d+))?")
_SRC_URL_RE = re.compile(r"url\((['\"]?)(.+?)\1\)")


@dataclass(frozen=True, slots=True)
class WebFontDescriptor:
    """Remote font source: family, weights, subsets and display strategy."""

    family: str
    weights: tuple[int, ...] = (400,)
    subsets: tuple[str, ...] = ("latin",)
    display: str = "swap"


@dataclass(frozen=True, slots=True)
class FontFamilyConfig:
    """A font family with its fallback stack and optional web source."""

    id: str
    name: str
    family: str
    fallbacks: tuple[str, ...] = ()
    weights: tuple[int, ...] = (400,)
    web_font: WebFontDescriptor | None = field(default=None, metadata={"key": "googleFont"})

    @property
    def stack(self) -> str:
        return ", ".join((self.family, *self.fallbacks))


@dataclass(frozen=True, slots=True)
class FontLoadingState:
    family: str
    status: str
    error: str | None = None
    loaded_at: float | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


@dataclass(frozen=True, slots=True)
class FontFace:
    """One ``@font-face`` block of a font manifest."""

    weight_min: int
    weight_max: int
    url: str

    def covers(self, weight: int) -> bool:
        return self.weight_min <= weight <= self.weight_max


class FontFetcher(Protocol):
    async def fetch(self, url: str) -> bytes: ...


class FontMeasurer(Protocol):
    def measure(self, family: str) -> tuple[float, float]: ...

    def measure_fallback(self) -> tuple[float, float]: ...


class FontRegistrar(Protocol):
    def register(self, family: str, weights: tuple[int, ...], data: bytes) -> None: ...


FontObserver = Callable[[FontLoadingState], None]


class UrlFontFetcher:
    """Fetches font manifests and files with urllib on a worker thread."""

    def __init__(self, *, timeout: float = 12.0, attempts: int = 3) -> None:
        self._timeout = timeout
        self._attempts = max(1, attempts)

    async def fetch(self, url: str) -> bytes:
        return await asyncio.to_thread(self._fetch_blocking, url)

    def _fetch_blocking(self, url: str) -> bytes:
        for attempt in range(self._attempts):
            try:
                req = Request(
                    url,
                    headers={
                        "User-Agent": f"FormTheme/{__version__}",
                        "Accept": "text/css,font/ttf,font/otf,*/*;q=0.1",
                    },
                )
                with urlopen(req, timeout=self._timeout) as resp:
                    return resp.read()
            except Exception as exc:
                if attempt >= self._attempts - 1 or not _is_transient_network_error(exc):
                    raise
                time.sleep(0.25 * (attempt + 1))
        raise RuntimeError("retry loop reached an unexpected state")


class MemoryFontRegistry:
    """Keeps fetched font files in memory, keyed by family and weights."""

    def __init__(self) -> None:
        self._fonts: dict[tuple[str, tuple[int, ...]], bytes] = {}

    def register(self, family: str, weights: tuple[int, ...], data: bytes) -> None:
        self._fonts[(family, weights)] = data

    def registered(self) -> list[tuple[str, tuple[int, ...]]]:
        return list(self._fonts)

    def data_for(self, family: str, weights: tuple[int, ...]) -> bytes | None:
        return self._fonts.get((family, weights))


def build_manifest_url(descriptor: WebFontDescriptor, pattern: str = DEFAULT_MANIFEST_URL) -> str:
    """Expand a manifest URL pattern for a web font descriptor."""
    return pattern.format(
        family=quote(descriptor.family, safe=""),
        weights=",".join(str(weight) for weight in descriptor.weights),
        subsets=",".join(descriptor.subsets),
        display=descriptor.display or "swap",
    )


def parse_font_manifest(css: str) -> list[FontFace]:
    """Extract weight ranges and source URLs from a font manifest stylesheet."""
    faces: list[FontFace] = []
    for block in _FONT_FACE_RE.findall(css):
        weight_match = _FONT_WEIGHT_RE.search(block)
        url_match = _SRC_URL_RE.search(block)
        if url_match is None:
            continue
        if weight_match is None:
            weight_min = weight_max = 400
        else:
            weight_min = int(weight_match.group(1))
            weight_max = int(weight_match.group(2) or weight_min)
        faces.append(FontFace(weight_min=weight_min, weight_max=weight_max, url=url_match.group(2)))
    return faces


def font_key(config: FontFamilyConfig) -> str:
    """Identity of a font load: family plus requested weights."""
    return "-".join([config.family, *(str(weight) for weight in config.weights)])


class FontLoader:
    """Loads fonts once per identity and reports state transitions."""

    def __init__(
        self,
        *,
        fetcher: FontFetcher | None = None,
        measurer: FontMeasurer | None = None,
        registrar: FontRegistrar | None = None,
        manifest_url: str = DEFAULT_MANIFEST_URL,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._fetcher = fetcher if fetcher is not None else UrlFontFetcher()
        self._measurer = measurer
        self._registrar = registrar if registrar is not None else MemoryFontRegistry()
        self._manifest_url = manifest_url
        self._default_timeout_ms = default_timeout_ms
        self._clock = clock
        self._states: dict[str, FontLoadingState] = {}
        self._inflight: dict[str, asyncio.Task[FontLoadingState]] = {}
        self._observers: list[FontObserver] = []
        self._generation = 0

    @property
    def default_timeout_ms(self) -> int:
        return self._default_timeout_ms

    async def load_font(self, config: FontFamilyConfig, timeout_ms: int | None = None) -> FontLoadingState:
        """Load a font family, sharing any in-flight load for the same identity."""
        key = font_key(config)
        pending = self._inflight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)
        existing = self._states.get(key)
        if existing is not None:
            return existing

        self._set_state(key, FontLoadingState(family=config.family, status=LOADING))
        task = asyncio.ensure_future(self._run(config, key, timeout_ms))
        self._inflight[key] = task
        return await asyncio.shield(task)

    async def preload_fonts(self, configs: Iterable[FontFamilyConfig], timeout_ms: int | None = None) -> None:
        """Load every font; failures are recorded per font and never raised."""
        unique: dict[str, FontFamilyConfig] = {}
        for config in configs:
            unique.setdefault(font_key(config), config)
        results = await asyncio.gather(
            *(self.load_font(config, timeout_ms) for config in unique.values()),
            return_exceptions=True,
        )
        for config, result in zip(unique.values(), results):
            if isinstance(result, BaseException):
                logger.warning("font preload failed family=%s: %s", config.family, result)

    def get_state(self, config: FontFamilyConfig) -> FontLoadingState | None:
        return self._states.get(font_key(config))

    def is_loaded(self, config: FontFamilyConfig) -> bool:
        state = self.get_state(config)
        return state is not None and state.status == LOADED

    def all_states(self) -> list[FontLoadingState]:
        return list(self._states.values())

    def subscribe(self, callback: FontObserver) -> Callable[[], None]:
        """Register an observer; the returned callable removes it again."""
        self._observers.append(callback)

        def unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._observers.remove(callback)

        return unsubscribe

    def clear_cache(self) -> None:
        """Forget all states. Loads still in flight finish without recording results."""
        self._generation += 1
        self._states.clear()
        self._inflight.clear()

    async def _run(self, config: FontFamilyConfig, key: str, timeout_ms: int | None) -> FontLoadingState:
        generation = self._generation
        effective_ms = timeout_ms or self._default_timeout_ms
        try:
            await asyncio.wait_for(self._load(config), effective_ms / 1000)
        except TimeoutError:
            logger.warning("font load timed out family=%s after %sms", config.family, effective_ms)
            result = FontLoadingState(
                family=config.family,
                status=TIMEOUT,
                error=f"Font load exceeded {effective_ms}ms",
            )
        except Exception as exc:
            logger.warning("font load failed family=%s: %s", config.family, exc)
            result = FontLoadingState(
                family=config.family,
                status=ERROR,
                error=str(exc) or type(exc).__name__,
            )
        else:
            result = FontLoadingState(family=config.family, status=LOADED, loaded_at=self._clock())

        if generation != self._generation:
            logger.debug("dropping font result for %s after cache reset", config.family)
            return result
        self._inflight.pop(key, None)
        self._set_state(key, result)
        return result

    async def _load(self, config: FontFamilyConfig) -> None:
        if config.web_font is not None:
            await self._load_web_font(config.web_font)
        else:
            self._check_local_font(config)

    async def _load_web_font(self, descriptor: WebFontDescriptor) -> None:
        url = build_manifest_url(descriptor, self._manifest_url)
        payload = await self._fetcher.fetch(url)
        faces = parse_font_manifest(payload.decode("utf-8", errors="replace"))

        weights_by_url: dict[str, list[int]] = {}
        for weight in descriptor.weights:
            matching = [face for face in faces if face.covers(weight)]
            if not matching:
                raise FontLoadError(
                    ErrorCode.FONT_LOAD_FAILED,
                    message=f"Weight {weight} of {descriptor.family!r} is missing from the font manifest",
                    details={"url": url},
                )
            for face in matching:
                weights_by_url.setdefault(face.url, []).append(weight)

        for font_url, weights in weights_by_url.items():
            data = await self._fetcher.fetch(font_url)
            self._registrar.register(descriptor.family, tuple(weights), data)

    def _check_local_font(self, config: FontFamilyConfig) -> None:
        if self._measurer is None:
            logger.debug("no font measurer configured; assuming %s is installed", config.family)
            return
        if self._measurer.measure(config.family) == self._measurer.measure_fallback():
            raise FontLoadError(
                ErrorCode.FONT_NOT_AVAILABLE,
                message=f"Font family {config.family!r} is not available locally",
            )

    def _set_state(self, key: str, state: FontLoadingState) -> None:
        current = self._states.get(key)
        if current is not None and current.is_terminal:
            return
        self._states[key] = state
        self._notify(state)

    def _notify(self, state: FontLoadingState) -> None:
        for callback in list(self._observers):
            try:
                callback(state)
            except Exception:
                logger.exception("font state observer failed for %s", state.family)


def _is_transient_network_error(exc: Exception) -> bool:
    text = " ".join(str(exc).lower().split())
    transient_markers = (
        "timed out",
        "timeout",
        "connection reset",
        "remote end closed",
        "temporarily unavailable",
        "try again",
        "service unavailable",
        "http error 429",
        "http error 502",
        "http error 503",
        "http error 504",
    )
    return any(marker in text for marker in transient_markers)
