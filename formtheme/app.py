"""Command line entry point and Qt preview bootstrap."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys

import yaml

from formtheme import __version__
from formtheme.config.settings import EngineSettings, QSettingsKeyValueStore
from formtheme.core.font_presets import default_catalog
from formtheme.core.fonts import FontLoader
from formtheme.errors import ErrorCode, FormThemeError, format_error_for_user
from formtheme.themes.compiler import compile_theme
from formtheme.themes.defaults import THEME_PRESETS, preset_theme
from formtheme.themes.models import Theme
from formtheme.themes.persistence import EXPORT_META_KEYS, ThemePersistence, parse_theme_data
from formtheme.themes.stylesheet import build_stylesheet, render_root_block
from formtheme.themes.validation import validate_theme
from formtheme.ui.stylesheet import build_form_stylesheet

COMPILE_FORMATS = ("css", "vars", "qss")
EXPORT_FORMATS = ("json", "yaml")


def _configure_logger(settings: EngineSettings) -> logging.Logger:
    logger = logging.getLogger("formtheme")
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    log_dir = settings.app_data_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / "formtheme.log",
        maxBytes=512_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="formtheme", description="Form theming and typography engine.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    compile_cmd = commands.add_parser("compile", help="compile a theme into CSS or Qt stylesheet text")
    _add_theme_source(compile_cmd)
    compile_cmd.add_argument("--format", choices=COMPILE_FORMATS, default="css")
    compile_cmd.add_argument("-o", "--output", type=Path)

    validate_cmd = commands.add_parser("validate", help="validate a theme file or preset")
    _add_theme_source(validate_cmd)

    export_cmd = commands.add_parser("export-preset", help="write a built-in preset as an export document")
    export_cmd.add_argument("name", choices=sorted(THEME_PRESETS))
    export_cmd.add_argument("--format", choices=EXPORT_FORMATS, default="json")
    export_cmd.add_argument("-o", "--output", type=Path)

    fonts_cmd = commands.add_parser("fonts", help="list catalog fonts or check one")
    fonts_cmd.add_argument("--category")
    fonts_cmd.add_argument("--search")
    fonts_cmd.add_argument("--check", metavar="FONT_ID", help="load a catalog font and report its state")

    preview_cmd = commands.add_parser("preview", help="show a themed form preview window")
    _add_theme_source(preview_cmd, required=False)
    return parser


def _add_theme_source(parser: argparse.ArgumentParser, *, required: bool = True) -> None:
    source = parser.add_mutually_exclusive_group(required=required)
    source.add_argument("--preset", choices=sorted(THEME_PRESETS))
    source.add_argument("--file", type=Path, help="theme document (.json, .yaml or .yml)")


def read_theme_document(path: Path) -> dict[str, object]:
    """Decode a JSON or YAML theme document without validating it."""
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, ValueError) as exc:
        raise FormThemeError(ErrorCode.IMPORT_MALFORMED, details={"file": str(path), "reason": str(exc)}) from exc
    if not isinstance(data, dict):
        raise FormThemeError(
            ErrorCode.IMPORT_MALFORMED,
            details={"file": str(path), "reason": f"expected a mapping, got {type(data).__name__}"},
        )
    return data


def load_theme_file(path: Path) -> Theme:
    """Read a JSON or YAML theme document and build a validated theme."""
    return parse_theme_data(read_theme_document(path))


def _resolve_theme(args: argparse.Namespace) -> Theme | None:
    if args.preset:
        return preset_theme(args.preset)
    if args.file:
        return load_theme_file(args.file)
    return None


def _write_output(text: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(text if text.endswith("\n") else f"{text}\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")


def cmd_compile(args: argparse.Namespace, logger: logging.Logger) -> int:
    theme = _resolve_theme(args)
    if args.format == "css":
        text = build_stylesheet(theme)
    elif args.format == "vars":
        text = render_root_block(compile_theme(theme)) + "\n"
    else:
        text = build_form_stylesheet(compile_theme(theme))
    _write_output(text, args.output)
    logger.info("compiled theme %s as %s", theme.id, args.format)
    return 0


def cmd_validate(args: argparse.Namespace, logger: logging.Logger) -> int:
    if args.file:
        document = read_theme_document(args.file)
        theme_id = str(document.get("id") or args.file.stem)
        result = validate_theme({key: value for key, value in document.items() if key not in EXPORT_META_KEYS})
        if result.is_valid:
            # shape problems such as unknown keys surface here
            parse_theme_data(document)
    else:
        theme = preset_theme(args.preset)
        theme_id = theme.id
        result = validate_theme(theme)

    for issue in result.errors:
        print(f"error: {issue.field}: {issue.message}")
    for issue in result.warnings:
        print(f"warning: {issue.field}: {issue.message}")
    status = "valid" if result.is_valid else "invalid"
    print(f"{theme_id}: {status} ({len(result.errors)} errors, {len(result.warnings)} warnings)")
    logger.info("validated theme %s: %s", theme_id, status)
    return 0 if result.is_valid else 1


def cmd_export_preset(args: argparse.Namespace, logger: logging.Logger) -> int:
    text = ThemePersistence().export_as_text(preset_theme(args.name))
    if args.format == "yaml":
        text = yaml.dump(json.loads(text), sort_keys=False, allow_unicode=True)
    _write_output(text, args.output)
    logger.info("exported preset %s as %s", args.name, args.format)
    return 0


def cmd_fonts(args: argparse.Namespace, logger: logging.Logger, settings: EngineSettings) -> int:
    catalog = default_catalog()
    if args.check:
        font = catalog.get(args.check)
        if font is None:
            print(f"Unknown font: {args.check}", file=sys.stderr)
            return 2
        loader = FontLoader(manifest_url=settings.font_manifest_url, default_timeout_ms=settings.font_timeout_ms)
        state = asyncio.run(loader.load_font(font))
        detail = f" ({state.error})" if state.error else ""
        print(f"{font.family}: {state.status}{detail}")
        logger.info("font check %s: %s", font.family, state.status)
        return 0 if state.status == "loaded" else 1

    if args.search:
        fonts = catalog.search(args.search)
    elif args.category:
        fonts = catalog.by_category(args.category)
    else:
        fonts = catalog.all_fonts()
    for font in fonts:
        kind = "system" if catalog.is_system_font(font) else "web"
        print(f"{font.id}\t{kind}\t{font.stack}")
    return 0


def cmd_preview(args: argparse.Namespace, logger: logging.Logger, settings: EngineSettings) -> int:
    from PySide6.QtWidgets import (
        QApplication,
        QHBoxLayout,
        QLabel,
        QLineEdit,
        QPushButton,
        QVBoxLayout,
        QWidget,
    )

    from formtheme.core.applicator import StyleApplicationManager
    from formtheme.themes.service import ThemeService
    from formtheme.themes.store import ThemeStore
    from formtheme.ui.qt_fonts import QtFontMeasurer, QtFontRegistrar
    from formtheme.ui.qt_scheduler import QtScheduler
    from formtheme.ui.qt_sink import QtStyleSink

    theme = _resolve_theme(args)
    app = QApplication.instance() or QApplication(sys.argv)
    app.setStyle("Fusion")
    app.setApplicationName("FormTheme")
    app.setOrganizationName("FormTheme")

    scheduler = QtScheduler(app)
    registrar = QtFontRegistrar()
    store = ThemeStore()
    service = ThemeService(
        store,
        StyleApplicationManager(QtStyleSink(app), scheduler, settings.debounce_ms),
        ThemePersistence(QSettingsKeyValueStore(settings.qsettings), settings.storage_prefix),
        scheduler,
        font_loader=FontLoader(
            measurer=QtFontMeasurer(),
            registrar=registrar,
            manifest_url=settings.font_manifest_url,
            default_timeout_ms=settings.font_timeout_ms,
        ),
        spawn=asyncio.run,
        storage_key=settings.storage_key,
        autosave_delay_ms=settings.autosave_delay_ms,
    )
    service.error_raised.connect(lambda message: logger.warning("theme error: %s", message))
    service.start()
    if theme is not None:
        ok, message = service.set_theme(theme)
    else:
        ok, message = service.load_saved()
    logger.info("preview theme: %s", message)
    if not ok and theme is not None:
        print(message, file=sys.stderr)
        return 1

    window = QWidget()
    window.setObjectName("FormRoot")
    window.setWindowTitle(f"FormTheme preview - {store.state.active_theme.name}")
    layout = QVBoxLayout(window)
    for object_name, text in (
        ("FormTitle", "Customer feedback"),
        ("FormDescription", "Tell us how we did. It takes two minutes."),
        ("QuestionLabel", "What is your email address?"),
    ):
        label = QLabel(text)
        label.setObjectName(object_name)
        layout.addWidget(label)
    layout.addWidget(QLineEdit())
    help_label = QLabel("We never share your address.")
    help_label.setObjectName("HelpText")
    layout.addWidget(help_label)

    buttons = QHBoxLayout()
    for intent, variant, text in (("primary", "filled", "Submit"), ("secondary", "outlined", "Back")):
        button = QPushButton(text)
        button.setProperty("intent", intent)
        button.setProperty("variant", variant)
        buttons.addWidget(button)
    layout.addLayout(buttons)

    app.aboutToQuit.connect(service.shutdown)
    app.aboutToQuit.connect(registrar.unregister_all)
    window.show()
    return app.exec()


def run_app(argv: list[str] | None = None, *, settings: EngineSettings | None = None) -> int:
    """Parse arguments and run one command."""
    args = build_parser().parse_args(argv)
    settings = settings or EngineSettings()
    logger = _configure_logger(settings)
    logger.info("formtheme %s command=%s", __version__, args.command)

    try:
        if args.command == "compile":
            return cmd_compile(args, logger)
        if args.command == "validate":
            return cmd_validate(args, logger)
        if args.command == "export-preset":
            return cmd_export_preset(args, logger)
        if args.command == "fonts":
            return cmd_fonts(args, logger, settings)
        return cmd_preview(args, logger, settings)
    except (FormThemeError, OSError) as exc:
        logger.error("command %s failed: %s", args.command, exc)
        print(format_error_for_user(exc), file=sys.stderr)
        return 1
