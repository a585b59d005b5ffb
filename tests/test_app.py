"""Tests for the command line entry point."""

from __future__ import annotations

import json

import pytest
import yaml

from formtheme.app import build_parser, load_theme_file, run_app
from formtheme.config.settings import EngineSettings
from formtheme.errors import ErrorCode, FormThemeError
from formtheme.themes.defaults import create_dark_theme
from formtheme.themes.persistence import ThemePersistence


@pytest.fixture
def settings(tmp_path, monkeypatch, ini_settings) -> EngineSettings:
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))
    return EngineSettings(ini_settings)


def test_compile_css_to_stdout(settings, capsys) -> None:
    assert run_app(["compile", "--preset", "dark"], settings=settings) == 0
    out = capsys.readouterr().out
    assert out.startswith(":root {")
    assert "--form-color-background: #111827;" in out
    assert ".form-button {" in out


def test_compile_variables_to_file(settings, tmp_path) -> None:
    target = tmp_path / "build" / "vars.css"
    assert run_app(["compile", "--preset", "default", "--format", "vars", "-o", str(target)], settings=settings) == 0
    text = target.read_text(encoding="utf-8")
    assert text.startswith(":root {\n")
    assert "  --form-color-primary: #3B82F6;" in text


def test_compile_qss_resolves_variables(settings, capsys) -> None:
    assert run_app(["compile", "--preset", "default", "--format", "qss"], settings=settings) == 0
    out = capsys.readouterr().out
    assert "QPushButton" in out
    assert "var(--form-color-primary)" not in out
    assert "#3B82F6" in out


def test_validate_preset(settings, capsys) -> None:
    assert run_app(["validate", "--preset", "highContrast"], settings=settings) == 0
    assert "high-contrast: valid" in capsys.readouterr().out


def test_validate_file_lists_errors(settings, tmp_path, capsys) -> None:
    path = tmp_path / "broken.json"
    path.write_text(json.dumps({"id": "broken", "name": "Broken", "colors": {"primary": "nope"}}), encoding="utf-8")
    assert run_app(["validate", "--file", str(path)], settings=settings) == 1
    out = capsys.readouterr().out
    assert "error: colors.primary:" in out
    assert "broken: invalid" in out


def test_validate_file_with_unknown_keys_fails(settings, tmp_path, capsys) -> None:
    path = tmp_path / "extra.json"
    path.write_text(json.dumps({"id": "extra", "name": "Extra", "glitter": 1}), encoding="utf-8")
    assert run_app(["validate", "--file", str(path)], settings=settings) == 1
    assert "not a valid theme document" in capsys.readouterr().err


def test_export_preset_as_yaml_round_trips(settings, tmp_path) -> None:
    target = tmp_path / "dark.yaml"
    assert run_app(["export-preset", "dark", "--format", "yaml", "-o", str(target)], settings=settings) == 0
    document = yaml.safe_load(target.read_text(encoding="utf-8"))
    assert document["schemaVersion"] == "2.0.0"
    assert load_theme_file(target).colors == create_dark_theme().colors


def test_fonts_listing_by_category(settings, capsys) -> None:
    assert run_app(["fonts", "--category", "system"], settings=settings) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines
    assert all(line.split("\t")[1] == "system" for line in lines)


def test_fonts_check_unknown_font(settings, capsys) -> None:
    assert run_app(["fonts", "--check", "comic-neue-xl"], settings=settings) == 2
    assert "Unknown font" in capsys.readouterr().err


def test_missing_file_reports_error(settings, tmp_path, capsys) -> None:
    assert run_app(["compile", "--file", str(tmp_path / "absent.json")], settings=settings) == 1
    assert capsys.readouterr().err


class TestLoadThemeFile:
    """Reading theme documents from disk."""

    def test_json_export(self, tmp_path) -> None:
        path = tmp_path / "dark.json"
        path.write_text(ThemePersistence().export_as_text(create_dark_theme()), encoding="utf-8")
        assert load_theme_file(path).id == "dark"

    def test_non_mapping_rejected(self, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(FormThemeError) as excinfo:
            load_theme_file(path)
        assert excinfo.value.code is ErrorCode.IMPORT_MALFORMED

    def test_undecodable_rejected(self, tmp_path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(FormThemeError):
            load_theme_file(path)


def test_parser_requires_a_source() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["compile"])
