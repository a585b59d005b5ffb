"""Style sink that renders compiled tables into a Qt stylesheet."""

from __future__ import annotations

import logging
from typing import Mapping, Protocol

from formtheme.ui.stylesheet import build_form_stylesheet

logger = logging.getLogger(__name__)


class StyleSheetTarget(Protocol):
    def setStyleSheet(self, styleSheet: str) -> None: ...


class QtStyleSink:
    """Applies the form stylesheet to a QApplication or QWidget on flush."""

    def __init__(self, target: StyleSheetTarget, *, extra_stylesheet: str = "") -> None:
        self._target = target
        self._extra = extra_stylesheet
        self._table: dict[str, str] = {}
        self._dirty = False
        self._stylesheet = ""

    @property
    def stylesheet(self) -> str:
        return self._stylesheet

    def apply_all(self, table: Mapping[str, str]) -> None:
        self._table = dict(table)
        self._dirty = True

    def flush(self) -> None:
        if not self._dirty:
            return
        self._stylesheet = build_form_stylesheet(self._table, extra_stylesheet=self._extra)
        self._target.setStyleSheet(self._stylesheet)
        self._dirty = False
        logger.debug("applied form stylesheet (%d properties)", len(self._table))
