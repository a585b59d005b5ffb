"""Static CSS rendering for compiled themes."""

from __future__ import annotations

from typing import Iterable, Mapping

from formtheme.core.fonts import build_manifest_url
from formtheme.themes.compiler import CssRule, compile_button_rules, compile_theme
from formtheme.themes.constants import TEXT_ELEMENT_ROLES
from formtheme.themes.defaults import default_typography_config
from formtheme.themes.models import Theme, TypographyConfig
from formtheme.themes.serialization import kebab_case

# Utility class suffix per role where it differs from the role name.
_UTILITY_NAMES: dict[str, str] = {
    "input_text": "input",
    "button_text": "button",
    "help_text": "help",
    "error_text": "error",
    "success_text": "success",
}


def render_root_block(table: Mapping[str, str], selector: str = ":root") -> str:
    declarations = "\n".join(f"  {name}: {value};" for name, value in table.items())
    return f"{selector} {{\n{declarations}\n}}"


def render_rules(rules: Iterable[CssRule]) -> str:
    return "\n\n".join(rule.render() for rule in rules)


def typography_utility_rules() -> list[CssRule]:
    rules = []
    for role in TEXT_ELEMENT_ROLES:
        name = kebab_case(role)
        utility = _UTILITY_NAMES.get(role, name)
        rules.append(CssRule(f".form-text-{utility}", {
            "font-family": f"var(--form-font-family-{name})",
            "font-size": f"var(--form-font-size-{name})",
            "font-weight": f"var(--form-font-weight-{name})",
            "line-height": f"var(--form-line-height-{name})",
            "letter-spacing": f"var(--form-letter-spacing-{name})",
        }))
    return rules


def render_responsive_css(config: TypographyConfig) -> str:
    """Media queries that pick the current font scale factor."""
    if not config.responsive.enable_scaling:
        return ""
    queries = (
        ("(max-width: 640px)", "sm"),
        ("(min-width: 641px) and (max-width: 1024px)", "md"),
        ("(min-width: 1025px)", "lg"),
    )
    blocks = [
        f"@media {query} {{\n  :root {{\n    --form-font-scale-current: var(--form-font-scale-{size});\n  }}\n}}"
        for query, size in queries
    ]
    blocks.append(render_rules([CssRule(".form-responsive-typography", {
        "--form-font-size-adjusted": "calc(var(--form-font-size-base) * var(--form-font-scale-current))",
    })]))
    return "\n\n".join(blocks)


def render_accessibility_css(config: TypographyConfig) -> str:
    blocks = [
        "@media (prefers-reduced-motion: reduce) {\n"
        "  .form-text-animated,\n  .form-button {\n"
        "    animation: none !important;\n    transition: none !important;\n  }\n}",
    ]
    if config.accessibility.enforce_min_size:
        min_size = f"{config.accessibility.min_body_size:g}px"
        blocks.append(render_rules([CssRule(".form-text-input,\n.form-text-question-label", {
            "font-size": f"max(var(--form-font-size-input-text), {min_size})",
        })]))
    blocks.append(render_rules([CssRule(".form-text-input:focus-visible", {
        "outline": "2px solid currentColor",
        "outline-offset": "2px",
    })]))
    return "\n\n".join(blocks)


def render_font_imports(config: TypographyConfig) -> str:
    """``@import`` lines for web fonts referenced by the configuration."""
    seen: set[str] = set()
    lines = []
    for font in (config.primary, config.secondary, config.mono):
        if font.web_font is None:
            continue
        url = build_manifest_url(font.web_font)
        if url not in seen:
            seen.add(url)
            lines.append(f"@import url('{url}');")
    return "\n".join(lines)


def build_stylesheet(theme: Theme) -> str:
    """Render a complete static stylesheet for a theme."""
    config = theme.advanced_typography or default_typography_config()
    parts = [
        render_font_imports(config),
        render_root_block(compile_theme(theme)),
        render_responsive_css(config),
        render_rules(typography_utility_rules()),
        render_rules(compile_button_rules(theme.button_customization)),
        render_accessibility_css(config),
    ]
    return "\n\n".join(part for part in parts if part) + "\n"
