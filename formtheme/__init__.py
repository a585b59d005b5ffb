"""FormTheme: theming and typography runtime for forms."""

__version__ = "0.1.0"
