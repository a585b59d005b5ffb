"""Qt implementations of the font measurer and registrar."""

from __future__ import annotations

import logging

from PySide6.QtCore import QByteArray
from PySide6.QtGui import QFont, QFontDatabase, QFontMetricsF

from formtheme.errors import ErrorCode, FontLoadError

logger = logging.getLogger(__name__)

SAMPLE_TEXT = "mmmmmmmmmmlli"
SAMPLE_POINT_SIZE = 72
_MISSING_FAMILY = "FormTheme Missing Family"

_GENERIC_FAMILIES: dict[str, QFontDatabase.SystemFont] = {
    "system-ui": QFontDatabase.SystemFont.GeneralFont,
    "ui-sans-serif": QFontDatabase.SystemFont.GeneralFont,
    "monospace": QFontDatabase.SystemFont.FixedFont,
    "ui-monospace": QFontDatabase.SystemFont.FixedFont,
}


class QtFontMeasurer:
    """Measures a sample string so a missing family can be told from the fallback."""

    def measure(self, family: str) -> tuple[float, float]:
        return _measure(_font_for(family))

    def measure_fallback(self) -> tuple[float, float]:
        font = QFont(_MISSING_FAMILY, SAMPLE_POINT_SIZE)
        font.setStyleHint(QFont.StyleHint.Serif)
        return _measure(font)


class QtFontRegistrar:
    """Adds downloaded font files to the application font database."""

    def __init__(self) -> None:
        self._font_ids: dict[str, list[int]] = {}

    def register(self, family: str, weights: tuple[int, ...], data: bytes) -> None:
        font_id = QFontDatabase.addApplicationFontFromData(QByteArray(data))
        if font_id < 0:
            raise FontLoadError(
                ErrorCode.FONT_LOAD_FAILED,
                message=f"Qt rejected font data for {family!r}",
                details={"weights": list(weights), "bytes": len(data)},
            )
        self._font_ids.setdefault(family, []).append(font_id)
        logger.info(
            "registered font %s weights=%s as %s",
            family,
            weights,
            QFontDatabase.applicationFontFamilies(font_id),
        )

    def unregister_all(self) -> None:
        for font_ids in self._font_ids.values():
            for font_id in font_ids:
                QFontDatabase.removeApplicationFont(font_id)
        self._font_ids.clear()


def _font_for(family: str) -> QFont:
    generic = _GENERIC_FAMILIES.get(family.strip().lower())
    if generic is not None:
        font = QFontDatabase.systemFont(generic)
        font.setPointSize(SAMPLE_POINT_SIZE)
        return font
    return QFont(family, SAMPLE_POINT_SIZE)


def _measure(font: QFont) -> tuple[float, float]:
    metrics = QFontMetricsF(font)
    return metrics.horizontalAdvance(SAMPLE_TEXT), metrics.height()
