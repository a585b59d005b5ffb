"""Conversion between theme models and their JSON document form."""

from __future__ import annotations

import dataclasses
import re
import types
import typing
from datetime import datetime, timezone
from typing import Any, Mapping

from formtheme.errors import ThemeValidationError
from formtheme.themes.models import Theme

_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY_RE.sub("_", name).lower()


def kebab_case(name: str) -> str:
    """``surfaceElevated`` and ``surface_elevated`` both become ``surface-elevated``."""
    return _CAMEL_BOUNDARY_RE.sub("-", name).replace("_", "-").lower()


def json_key(model_field: dataclasses.Field) -> str:
    return model_field.metadata.get("key") or camel_case(model_field.name)


def format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_datetime(raw: str) -> datetime:
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_document(value: Any) -> Any:
    """Convert a model (or any nested value) into JSON-compatible data.

    Optional sections that are ``None`` are left out of the document.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        document: dict[str, Any] = {}
        for model_field in dataclasses.fields(value):
            item = getattr(value, model_field.name)
            if item is None:
                continue
            if model_field.metadata.get("camel_keys") and isinstance(item, Mapping):
                document[json_key(model_field)] = {camel_case(key): to_document(sub) for key, sub in item.items()}
            else:
                document[json_key(model_field)] = to_document(item)
        return document
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, (list, tuple)):
        return [to_document(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): to_document(item) for key, item in value.items()}
    return value


def from_document(model: type, data: object, path: str = "") -> Any:
    """Build a model from document data, raising ThemeValidationError on shape errors."""
    return _convert(model, data, path or model.__name__)


def theme_to_dict(theme: Theme) -> dict[str, Any]:
    return to_document(theme)


def theme_from_dict(data: Mapping[str, object]) -> Theme:
    return from_document(Theme, data, "theme")


def _convert(annotation: Any, raw: object, path: str) -> Any:
    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin in (typing.Union, types.UnionType):
        if raw is None and type(None) in args:
            return None
        concrete = [arg for arg in args if arg is not type(None)]
        return _convert(concrete[0], raw, path)

    if annotation is object or annotation is Any:
        return raw
    if dataclasses.is_dataclass(annotation):
        return _build(annotation, raw, path)
    if origin is tuple:
        if not isinstance(raw, (list, tuple)):
            raise ThemeValidationError(f"{path}: expected a list")
        return tuple(_convert(args[0], item, f"{path}[{index}]") for index, item in enumerate(raw))
    if origin is dict:
        if not isinstance(raw, Mapping):
            raise ThemeValidationError(f"{path}: expected an object")
        return {str(key): _convert(args[1], item, f"{path}.{key}") for key, item in raw.items()}
    if annotation is datetime:
        if isinstance(raw, datetime):
            return raw
        if not isinstance(raw, str):
            raise ThemeValidationError(f"{path}: expected an ISO-8601 date string")
        try:
            return parse_datetime(raw)
        except ValueError as exc:
            raise ThemeValidationError(f"{path}: invalid date {raw!r}") from exc
    if annotation is bool:
        if not isinstance(raw, bool):
            raise ThemeValidationError(f"{path}: expected a boolean")
        return raw
    if annotation is int:
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ThemeValidationError(f"{path}: expected an integer")
        if isinstance(raw, float):
            if not raw.is_integer():
                raise ThemeValidationError(f"{path}: expected an integer, got {raw!r}")
            return int(raw)
        return raw
    if annotation is float:
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ThemeValidationError(f"{path}: expected a number")
        return raw
    if annotation is str:
        if not isinstance(raw, str):
            raise ThemeValidationError(f"{path}: expected a string")
        return raw
    raise ThemeValidationError(f"{path}: unsupported field type {annotation!r}")


def _build(model: type, raw: object, path: str) -> Any:
    if not isinstance(raw, Mapping):
        raise ThemeValidationError(f"{path}: expected an object")
    hints = typing.get_type_hints(model)
    model_fields = {json_key(model_field): model_field for model_field in dataclasses.fields(model)}
    _reject_unknown_keys(raw, allowed=set(model_fields), context=path)

    kwargs: dict[str, Any] = {}
    for key, model_field in model_fields.items():
        if key not in raw:
            if model_field.default is dataclasses.MISSING and model_field.default_factory is dataclasses.MISSING:
                raise ThemeValidationError(f"{path}: missing required key {key!r}")
            continue
        value = raw[key]
        field_path = f"{path}.{key}"
        if model_field.metadata.get("camel_keys"):
            if not isinstance(value, Mapping):
                raise ThemeValidationError(f"{field_path}: expected an object")
            value_type = typing.get_args(hints[model_field.name])[1]
            kwargs[model_field.name] = {
                snake_case(str(sub_key)): _convert(value_type, sub_value, f"{field_path}.{sub_key}")
                for sub_key, sub_value in value.items()
            }
        else:
            kwargs[model_field.name] = _convert(hints[model_field.name], value, field_path)
    return model(**kwargs)


def _reject_unknown_keys(data: Mapping[str, object], *, allowed: set[str], context: str) -> None:
    unknown = sorted(str(key) for key in data.keys() if key not in allowed)
    if unknown:
        joined = ", ".join(unknown)
        raise ThemeValidationError(f"{context}: unsupported keys found: {joined}")
