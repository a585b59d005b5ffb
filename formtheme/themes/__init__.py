"""Theme engine exports."""

from formtheme.errors import ThemeValidationError
from formtheme.themes.compiler import compile_theme
from formtheme.themes.constants import DEFAULT_THEME_ID
from formtheme.themes.defaults import THEME_PRESETS, create_default_theme, preset_theme
from formtheme.themes.models import Theme, ThemeState
from formtheme.themes.persistence import ThemePersistence
from formtheme.themes.service import ThemeService
from formtheme.themes.store import ThemeStore
from formtheme.themes.validation import ValidationResult, validate_theme

__all__ = [
    "DEFAULT_THEME_ID",
    "THEME_PRESETS",
    "Theme",
    "ThemePersistence",
    "ThemeService",
    "ThemeState",
    "ThemeStore",
    "ThemeValidationError",
    "ValidationResult",
    "compile_theme",
    "create_default_theme",
    "preset_theme",
]
