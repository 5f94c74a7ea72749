"""
Shape adapter for transport input.

Clients hand list-query parts over as native dicts/lists, as object-like
structures (decoded JSON objects, SimpleNamespace, dataclasses, pydantic
models) or as a serialized JSON string. Everything is turned into plain
dicts and lists here, before any filter or ordering logic looks at it.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from app.core.errors import MalformedFilterInput


def adapt_input(value: Any, path: str) -> Any:
    """Decode a top-level JSON string if needed, then convert to plain form."""
    if isinstance(value, (bytes, bytearray)):
        try:
            value = value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedFilterInput("is not valid UTF-8 text.", path) from exc

    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            value = json.loads(value)
        except RecursionError as exc:
            raise MalformedFilterInput("nesting is too deep.", path) from exc
        except ValueError as exc:
            raise MalformedFilterInput("is a string but not valid JSON.", path) from exc

    try:
        return to_plain(value)
    except RecursionError as exc:
        raise MalformedFilterInput("nesting is too deep.", path) from exc


def to_plain(value: Any) -> Any:
    if value is None or isinstance(value, (str, bool, int, float)):
        return value

    if isinstance(value, BaseModel):
        return to_plain(value.model_dump(by_alias=True))

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_plain(dataclasses.asdict(value))

    if isinstance(value, Mapping):
        return {key: to_plain(item) for key, item in value.items()}

    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]

    if hasattr(value, "__dict__") and not isinstance(value, type):
        return {
            key: to_plain(item)
            for key, item in vars(value).items()
            if not key.startswith("_")
        }

    return value
