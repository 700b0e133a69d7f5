"""
Field-update parsing and merge.

Incoming `updates` use key prefixes to pick how a value is written:

- `date_<name>`      value parsed into a datetime, stored under `<name>`
- `safebool_<name>`  True iff value is one of True, "true", 1, "1"
- `refs_<name>`      list of item ids; replaces the reference list of `<name>`
- `image_<name>`     source URL; imported into media and written back later
- anything else      stored verbatim

Keys are parsed once into `FieldUpdate` variants; the rest of the code never
looks at prefixes again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Union

DATE_PREFIX = "date_"
SAFEBOOL_PREFIX = "safebool_"
REFS_PREFIX = "refs_"
IMAGE_PREFIX = "image_"


class FieldUpdateError(ValueError):
    pass


@dataclass(frozen=True)
class Plain:
    field: str
    value: Any


@dataclass(frozen=True)
class DateValue:
    field: str
    value: datetime


@dataclass(frozen=True)
class BoolValue:
    field: str
    value: bool


@dataclass(frozen=True)
class References:
    field: str
    ids: tuple[str, ...]


@dataclass(frozen=True)
class ImageImport:
    field: str
    url: str


FieldUpdate = Union[Plain, DateValue, BoolValue, References, ImageImport]


@dataclass
class MergeResult:
    record: dict[str, Any]
    references: list[References] = field(default_factory=list)
    images: list[ImageImport] = field(default_factory=list)


def parse_date(value: Any) -> datetime:
    """
    Accepts ISO-8601 strings or epoch milliseconds. Naive values are UTC.
    """
    if isinstance(value, bool):
        raise FieldUpdateError(f"Invalid date value: {value!r}")

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise FieldUpdateError(f"Invalid date value: {value!r}") from e

    if not isinstance(value, str) or not value.strip():
        raise FieldUpdateError(f"Invalid date value: {value!r}")

    raw = value.strip()
    # fromisoformat only learned "Z" in 3.11.
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as e:
        raise FieldUpdateError(f"Invalid date value: {value!r}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value in ("true", "1")
    if isinstance(value, (int, float)):
        return value == 1
    return False


def _parse_ids(key: str, value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise FieldUpdateError(f"'{key}' must be a list of item ids.")
    ids: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise FieldUpdateError(f"'{key}' must contain only non-empty id strings.")
        ids.append(item)
    return tuple(ids)


def parse_update(key: str, value: Any) -> FieldUpdate:
    if key.startswith(DATE_PREFIX):
        name = key[len(DATE_PREFIX):]
        try:
            return DateValue(name, parse_date(value))
        except FieldUpdateError as e:
            raise FieldUpdateError(f"'{key}': {e}") from e

    if key.startswith(SAFEBOOL_PREFIX):
        return BoolValue(key[len(SAFEBOOL_PREFIX):], coerce_bool(value))

    if key.startswith(REFS_PREFIX):
        return References(key[len(REFS_PREFIX):], _parse_ids(key, value))

    if key.startswith(IMAGE_PREFIX):
        if not isinstance(value, str) or not value.strip():
            raise FieldUpdateError(f"'{key}' must be an image URL string.")
        return ImageImport(key[len(IMAGE_PREFIX):], value.strip())

    return Plain(key, value)


def parse_updates(updates: Mapping[str, Any]) -> list[FieldUpdate]:
    """
    Parse every entry, keeping the order of `updates`.
    """
    return [parse_update(str(key), value) for key, value in updates.items()]


def parse_image_updates(updates: Mapping[str, Any]) -> list[ImageImport]:
    """
    Parse only the `image_` entries, in order. Other keys are left alone.
    """
    images: list[ImageImport] = []
    for key, value in updates.items():
        key = str(key)
        if key.startswith(IMAGE_PREFIX):
            images.append(parse_update(key, value))
    return images


def merge_updates(existing: Mapping[str, Any], updates: list[FieldUpdate]) -> MergeResult:
    """
    Shallow-merge plain/date/bool updates over `existing`.

    Reference and image updates are returned separately and never touch the
    merged record.
    """
    cleaned: dict[str, Any] = {}
    references: list[References] = []
    images: list[ImageImport] = []

    for update in updates:
        match update:
            case Plain(name, value) | DateValue(name, value) | BoolValue(name, value):
                cleaned[name] = value
            case References():
                references.append(update)
            case ImageImport():
                images.append(update)

    return MergeResult(record={**existing, **cleaned}, references=references, images=images)
