"""Qt stylesheet for rendering a themed form preview."""

from __future__ import annotations

import re
from typing import Mapping

# Widgets opt in through object names and the ``intent`` and ``variant`` dynamic properties.
FORM_STYLESHEET = """
QWidget#FormRoot {
    background-color: var(--form-background-value);
    color: var(--form-color-text-primary);
    font-family: var(--form-font-family-input-text);
}

QLabel {
    background-color: transparent;
}

QLabel#FormTitle {
    color: var(--form-color-text-primary);
    font-family: var(--form-font-family-form-title);
    font-size: var(--form-font-size-form-title);
    font-weight: var(--form-font-weight-form-title);
}

QLabel#FormDescription {
    color: var(--form-color-text-secondary);
    font-family: var(--form-font-family-form-description);
    font-size: var(--form-font-size-form-description);
    font-weight: var(--form-font-weight-form-description);
}

QLabel#QuestionLabel {
    color: var(--form-color-text-primary);
    font-family: var(--form-font-family-question-label);
    font-size: var(--form-font-size-question-label);
    font-weight: var(--form-font-weight-question-label);
}

QLabel#HelpText {
    color: var(--form-color-text-muted);
    font-size: var(--form-font-size-help-text);
}

QLabel#ErrorText {
    color: var(--form-color-error);
    font-size: var(--form-font-size-error-text);
}

QLabel#SuccessText {
    color: var(--form-color-success);
    font-size: var(--form-font-size-success-text);
}

QLineEdit, QTextEdit, QPlainTextEdit, QComboBox {
    background-color: var(--form-color-surface);
    color: var(--form-color-text-primary);
    border: 1px solid var(--form-color-border);
    border-radius: var(--form-border-radius-md);
    padding: var(--form-spacing-xs) var(--form-spacing-sm);
    font-family: var(--form-font-family-input-text);
    font-size: var(--form-font-size-input-text);
    selection-background-color: var(--form-color-selection);
}

QLineEdit:hover, QTextEdit:hover, QPlainTextEdit:hover, QComboBox:hover {
    border-color: var(--form-color-border-hover);
}

QLineEdit:focus, QTextEdit:focus, QPlainTextEdit:focus, QComboBox:focus {
    border-color: var(--form-color-border-focus);
}

QPushButton {
    border-radius: var(--form-button-border-radius);
    border: var(--form-button-border-width) solid transparent;
    min-height: var(--form-button-min-height);
    padding: 0 var(--form-spacing-md);
    font-family: var(--form-font-family-button-text);
    font-size: var(--form-font-size-button-text);
    font-weight: var(--form-button-font-weight);
}

QPushButton[intent="primary"] {
    background-color: var(--form-color-primary);
    color: var(--form-color-text-inverse);
}

QPushButton[intent="primary"]:hover {
    background-color: var(--form-color-primary-hover);
}

QPushButton[intent="primary"]:pressed {
    background-color: var(--form-color-primary-active);
}

QPushButton[intent="primary"]:disabled {
    background-color: var(--form-color-primary-disabled);
}

QPushButton[intent="secondary"] {
    background-color: var(--form-color-secondary);
    color: var(--form-color-text-inverse);
}

QPushButton[intent="secondary"]:hover {
    background-color: var(--form-color-secondary-hover);
}

QPushButton[intent="secondary"]:pressed {
    background-color: var(--form-color-secondary-active);
}

QPushButton[variant="outlined"] {
    background-color: transparent;
    color: var(--form-color-primary);
    border-color: var(--form-color-primary);
}

QPushButton[variant="outlined"]:hover {
    background-color: var(--form-color-surface-hover);
}

QPushButton[variant="flat"] {
    background-color: transparent;
    color: var(--form-color-text-primary);
}

QPushButton[variant="flat"]:hover {
    background-color: var(--form-color-surface-hover);
}

QPushButton[intent="destructive"] {
    background-color: var(--form-color-error);
    color: var(--form-color-text-inverse);
}

QPushButton[intent="destructive"]:hover {
    background-color: var(--form-color-error-hover);
}

QPushButton[intent="success"] {
    background-color: var(--form-color-success);
    color: var(--form-color-text-inverse);
}

QPushButton[intent="success"]:hover {
    background-color: var(--form-color-success-hover);
}
"""

_VAR_RE = re.compile(r"var\(\s*(--[A-Za-z0-9-]+)\s*(?:,\s*([^()]*))?\)")
_REM_RE = re.compile(r"(-?\d*\.?\d+)rem\b")
_ROOT_FONT_PX = 16.0
_MAX_PASSES = 4


def qss_value(name: str, value: str) -> str:
    """Translate a compiled CSS value into something Qt stylesheets accept."""
    if name.startswith(("--form-font-family", "--form-font-primary", "--form-font-secondary", "--form-font-mono")):
        return first_family(value)
    return _REM_RE.sub(lambda match: f"{float(match.group(1)) * _ROOT_FONT_PX:g}px", value)


def first_family(stack: str) -> str:
    """Qt stylesheets take a single family; keep the head of the stack."""
    head = stack.split(",", 1)[0].strip()
    return head.strip("'\"") or "sans-serif"


def resolve_variables(template: str, table: Mapping[str, str]) -> str:
    """Replace ``var(--name[, fallback])`` references with values from `table`.

    Unknown names use their fallback, or are left in place when there is none.
    """
    resolved = {name: qss_value(name, value) for name, value in table.items()}

    def substitute(match: re.Match[str]) -> str:
        name, fallback = match.group(1), match.group(2)
        if name in resolved:
            return resolved[name]
        if fallback is not None:
            return fallback.strip()
        return match.group(0)

    result = template
    for _ in range(_MAX_PASSES):
        updated = _VAR_RE.sub(substitute, result)
        if updated == result:
            break
        result = updated
    return result


def build_form_stylesheet(table: Mapping[str, str], *, extra_stylesheet: str = "") -> str:
    """Build the form preview stylesheet from a compiled variable table."""
    stylesheet = resolve_variables(FORM_STYLESHEET, table)
    extra = extra_stylesheet.strip()
    if extra:
        stylesheet = f"{stylesheet}\n\n{resolve_variables(extra, table)}\n"
    return stylesheet
