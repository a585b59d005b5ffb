"""Bundled font catalog: system and web fonts, pairings and fallback stacks."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml

from formtheme.core.fonts import FontFamilyConfig, WebFontDescriptor
from formtheme.errors import ThemeValidationError

_CATALOG_PATH = Path(__file__).with_name("font_presets.yaml")


@dataclass(frozen=True, slots=True)
class FontCategory:
    id: str
    name: str
    description: str
    fonts: tuple[FontFamilyConfig, ...]


@dataclass(frozen=True, slots=True)
class FontCombination:
    """A named primary/secondary/mono pairing."""

    id: str
    name: str
    description: str
    primary: FontFamilyConfig
    secondary: FontFamilyConfig
    mono: FontFamilyConfig


class FontCatalog:
    """Read-only view over the font catalog document."""

    def __init__(self, data: Mapping[str, object]) -> None:
        self._system = tuple(_parse_font(item, web_defaults=None) for item in _list(data, "system_fonts"))
        web_defaults = data.get("web_font_defaults") or {}
        if not isinstance(web_defaults, Mapping):
            raise ThemeValidationError("font catalog: web_font_defaults must be a mapping")
        self._web = tuple(_parse_font(item, web_defaults=web_defaults) for item in _list(data, "web_fonts"))
        self._by_id = {font.id: font for font in (*self._system, *self._web)}

        self._categories: dict[str, FontCategory] = {}
        for key, raw in _mapping(data, "categories").items():
            if not isinstance(raw, Mapping):
                raise ThemeValidationError(f"font catalog: category {key!r} must be a mapping")
            self._categories[key] = FontCategory(
                id=key,
                name=_required_str(raw, "name"),
                description=_required_str(raw, "description"),
                fonts=self._resolve_all(raw.get("fonts") or []),
            )

        self._combinations: dict[str, FontCombination] = {}
        for raw in _list(data, "combinations"):
            combo = FontCombination(
                id=_required_str(raw, "id"),
                name=_required_str(raw, "name"),
                description=_required_str(raw, "description"),
                primary=self._resolve(_required_str(raw, "primary")),
                secondary=self._resolve(_required_str(raw, "secondary")),
                mono=self._resolve(_required_str(raw, "mono")),
            )
            self._combinations[combo.id] = combo

        self._recommendations = {
            use_case: self._resolve_all(ids) for use_case, ids in _mapping(data, "recommendations").items()
        }
        defaults = _mapping(data, "defaults")
        self._defaults = (
            self._resolve(_required_str(defaults, "primary")),
            self._resolve(_required_str(defaults, "secondary")),
            self._resolve(_required_str(defaults, "mono")),
        )
        self._fallback_stacks = {
            key: tuple(str(name) for name in names) for key, names in _mapping(data, "fallback_stacks").items()
        }
        self._system_stack = tuple(str(name) for name in data.get("system_stack") or ())

    @classmethod
    def load(cls, path: Path = _CATALOG_PATH) -> FontCatalog:
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ThemeValidationError(f"Unable to read font catalog {path}: {exc}") from exc
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ThemeValidationError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ThemeValidationError(f"Expected a mapping in {path}")
        return cls(data)

    @property
    def system_fonts(self) -> tuple[FontFamilyConfig, ...]:
        return self._system

    @property
    def web_fonts(self) -> tuple[FontFamilyConfig, ...]:
        return self._web

    def all_fonts(self) -> list[FontFamilyConfig]:
        return [*self._system, *self._web]

    def get(self, font_id: str) -> FontFamilyConfig | None:
        return self._by_id.get(font_id)

    def categories(self) -> list[FontCategory]:
        return list(self._categories.values())

    def by_category(self, category: str) -> list[FontFamilyConfig]:
        found = self._categories.get(category)
        return list(found.fonts) if found is not None else []

    def search(self, query: str) -> list[FontFamilyConfig]:
        """Case-insensitive match on font name or family."""
        needle = query.strip().lower()
        return [
            font
            for font in self.all_fonts()
            if needle in font.name.lower() or needle in font.family.lower()
        ]

    def combinations(self) -> list[FontCombination]:
        return list(self._combinations.values())

    def combination(self, combo_id: str) -> FontCombination | None:
        return self._combinations.get(combo_id)

    def recommended(self, use_case: str) -> list[FontFamilyConfig]:
        """Fonts suited to a use case; unknown use cases return the whole catalog."""
        fonts = self._recommendations.get(use_case)
        if fonts is None:
            return self.all_fonts()
        # Catalog order, not recommendation order.
        wanted = {font.id for font in fonts}
        return [font for font in self.all_fonts() if font.id in wanted]

    def defaults(self) -> tuple[FontFamilyConfig, FontFamilyConfig, FontFamilyConfig]:
        return self._defaults

    def is_system_font(self, font: FontFamilyConfig) -> bool:
        return any(system.id == font.id for system in self._system)

    def build_font_stack(self, primary: str, category: str = "sans_serif") -> str:
        fallbacks = self._fallback_stacks.get(category, self._fallback_stacks.get("sans_serif", ()))
        return ", ".join((primary, *fallbacks))

    def system_font_stack(self) -> str:
        return ", ".join(self._system_stack)

    def _resolve(self, font_id: str) -> FontFamilyConfig:
        font = self._by_id.get(font_id)
        if font is None:
            raise ThemeValidationError(f"font catalog: unknown font id {font_id!r}")
        return font

    def _resolve_all(self, ids: object) -> tuple[FontFamilyConfig, ...]:
        if not isinstance(ids, list):
            raise ThemeValidationError("font catalog: font references must be a list")
        return tuple(self._resolve(str(font_id)) for font_id in ids)


@functools.lru_cache(maxsize=1)
def default_catalog() -> FontCatalog:
    """The bundled catalog, parsed once per process."""
    return FontCatalog.load()


def _parse_font(raw: object, *, web_defaults: Mapping[str, object] | None) -> FontFamilyConfig:
    if not isinstance(raw, Mapping):
        raise ThemeValidationError("font catalog: font entries must be mappings")
    family = _required_str(raw, "family")
    weights = tuple(int(weight) for weight in raw.get("weights") or (400,))
    web_font = None
    if web_defaults is not None:
        web_font = WebFontDescriptor(
            family=family,
            weights=weights,
            subsets=tuple(str(subset) for subset in web_defaults.get("subsets") or ("latin",)),
            display=str(web_defaults.get("display") or "swap"),
        )
    return FontFamilyConfig(
        id=_required_str(raw, "id"),
        name=_required_str(raw, "name"),
        family=family,
        fallbacks=tuple(str(name) for name in raw.get("fallbacks") or ()),
        weights=weights,
        web_font=web_font,
    )


def _list(data: Mapping[str, object], key: str) -> list[Mapping[str, object]]:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(item, Mapping) for item in value):
        raise ThemeValidationError(f"font catalog: {key!r} must be a list of mappings")
    return value


def _mapping(data: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = data.get(key) or {}
    if not isinstance(value, Mapping):
        raise ThemeValidationError(f"font catalog: {key!r} must be a mapping")
    return value


def _required_str(data: Mapping[str, object], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ThemeValidationError(f"font catalog: field {key!r} must be a non-empty string")
    return value.strip()
