"""Schema helpers for the application settings file."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from jsonschema import Draft202012Validator

from pinAlbum.config import (
    FLICKR_API_ENDPOINT,
    FLICKR_IMAGE_HOST,
    HTTP_TIMEOUT_SEC,
    MAX_CONCURRENT_HYDRATIONS,
    MAX_PHOTOS_PER_ALBUM,
)

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "pinAlbum/settings.schema.json",
    "type": "object",
    "required": ["schema", "flickr", "storage", "workers", "logging"],
    "properties": {
        "schema": {"const": "pinAlbum/settings@1"},
        "flickr": {
            "type": "object",
            "properties": {
                "api_key": {"type": ["string", "null"]},
                "endpoint": {"type": "string", "minLength": 1},
                "image_host": {"type": "string", "minLength": 1},
                "max_results": {"type": "integer", "minimum": 1, "maximum": 250},
                "timeout_sec": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": True,
        },
        "storage": {
            "type": "object",
            "properties": {
                "database_path": {"type": ["string", "null"]},
            },
            "additionalProperties": True,
        },
        "workers": {
            "type": "object",
            "properties": {
                "max_hydrations": {"type": "integer", "minimum": 1},
            },
            "additionalProperties": True,
        },
        "logging": {
            "type": "object",
            "properties": {
                "level": {
                    "type": "string",
                    "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                },
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "pinAlbum/settings@1",
    "flickr": {
        "api_key": None,
        "endpoint": FLICKR_API_ENDPOINT,
        "image_host": FLICKR_IMAGE_HOST,
        "max_results": MAX_PHOTOS_PER_ALBUM,
        "timeout_sec": HTTP_TIMEOUT_SEC,
    },
    "storage": {
        "database_path": None,
    },
    "workers": {
        "max_hydrations": MAX_CONCURRENT_HYDRATIONS,
    },
    "logging": {
        "level": "INFO",
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)

_SECTIONS = ("flickr", "storage", "workers", "logging")


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _SECTIONS and isinstance(value, dict):
                target = merged.setdefault(key, {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


class SettingsSource(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...


@dataclass(frozen=True)
class FlickrSettings:
    """The ``flickr`` section with its values coerced to their runtime types."""

    api_key: Optional[str]
    endpoint: str
    image_host: str
    max_results: int
    timeout_sec: float

    @classmethod
    def from_source(cls, source: SettingsSource) -> "FlickrSettings":
        defaults = DEFAULT_SETTINGS["flickr"]

        def value(name: str) -> Any:
            return source.get(f"flickr.{name}", defaults[name])

        return cls(
            api_key=value("api_key") or None,
            endpoint=str(value("endpoint")),
            image_host=str(value("image_host")),
            max_results=int(value("max_results")),
            timeout_sec=float(value("timeout_sec")),
        )


__all__ = [
    "DEFAULT_SETTINGS",
    "FlickrSettings",
    "SETTINGS_SCHEMA",
    "SettingsSource",
    "merge_with_defaults",
    "validate_settings",
]
