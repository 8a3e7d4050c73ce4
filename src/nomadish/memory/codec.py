"""FoodMemory <-> JSON mapping.

Wire form (server) and durable form (local cache) share one schema:

    {
      "id": "…", "name": "Ramen", "date_added": "2025-08-16T10:15:30.123456Z",
      "notes": "", "rating": 4, "latitude": 35.0, "longitude": 139.0,
      "image_url": "https://…/srv-1.jpg"        # only when one exists
    }

Coordinates are always flattened into named ``latitude``/``longitude`` keys.
The durable form additionally carries ``sync_state``. Photo bytes are never
encoded.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from nomadish.errors import (
    InvalidDateError,
    InvalidValueError,
    MissingFieldError,
    TypeMismatchError,
)
from nomadish.memory.models import MAX_RATING, MIN_RATING, Coordinate, FoodMemory, SyncState

REQUIRED_FIELDS = ("id", "name", "date_added", "notes", "rating", "latitude", "longitude")

# Attempted in order; the first two require an offset or "Z".
_AWARE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
)
_NAIVE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,6})?$")


# ── Dates ─────────────────────────────────────────────────────


def format_date(value: datetime) -> str:
    """UTC ISO-8601 with microseconds and a trailing Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_date(text: str) -> datetime:
    """Parse a server or cache timestamp into an aware UTC datetime."""
    raw = text.strip()
    for fmt in _AWARE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).astimezone(timezone.utc)
        except ValueError:
            continue

    # Python backends often emit naive isoformat() strings; treat them as UTC.
    if _NAIVE_PATTERN.match(raw):
        fmt = "%Y-%m-%dT%H:%M:%S.%f" if "." in raw else "%Y-%m-%dT%H:%M:%S"
        try:
            return datetime.strptime(raw, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            pass

    raise InvalidDateError(text)


# ── Encode ────────────────────────────────────────────────────


def encode(record: FoodMemory, *, durable: bool = False) -> dict[str, Any]:
    """Map a record to its JSON object. ``durable`` adds local-only keys."""
    obj: dict[str, Any] = {
        "id": record.id,
        "name": record.name,
        "date_added": format_date(record.date_added),
        "notes": record.notes,
        "rating": record.rating,
        "latitude": record.coordinate.latitude,
        "longitude": record.coordinate.longitude,
    }
    if record.image_url:
        obj["image_url"] = record.image_url
    if durable:
        obj["sync_state"] = record.sync_state.value
    return obj


# ── Decode ────────────────────────────────────────────────────


def _require(obj: dict[str, Any], key: str) -> Any:
    if key not in obj or obj[key] is None:
        raise MissingFieldError(key)
    return obj[key]


def _require_str(obj: dict[str, Any], key: str) -> str:
    value = _require(obj, key)
    if not isinstance(value, str):
        raise TypeMismatchError(key, "a string")
    return value


def _require_number(obj: dict[str, Any], key: str) -> float:
    value = _require(obj, key)
    # bool is an int subclass but never a valid coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeMismatchError(key, "a number")
    return float(value)


def _require_int(obj: dict[str, Any], key: str) -> int:
    value = _require(obj, key)
    if isinstance(value, bool):
        raise TypeMismatchError(key, "an integer")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if not isinstance(value, int):
        raise TypeMismatchError(key, "an integer")
    return value


def decode(obj: Any) -> FoodMemory:
    """Build a FoodMemory from a wire or durable object.

    Raises a DecodeError subclass naming the offending field.
    """
    if not isinstance(obj, dict):
        raise TypeMismatchError("<record>", "a JSON object")

    memory_id = _require_str(obj, "id")
    name = _require_str(obj, "name")
    date_added = parse_date(_require_str(obj, "date_added"))
    notes = _require_str(obj, "notes")

    rating = _require_int(obj, "rating")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidValueError("rating", f"{rating} not in [{MIN_RATING}, {MAX_RATING}]")

    latitude = _require_number(obj, "latitude")
    longitude = _require_number(obj, "longitude")
    if not -90.0 <= latitude <= 90.0:
        raise InvalidValueError("latitude", f"{latitude} not in [-90, 90]")
    if not -180.0 <= longitude <= 180.0:
        raise InvalidValueError("longitude", f"{longitude} not in [-180, 180]")
    coordinate = Coordinate(latitude=latitude, longitude=longitude)

    image_url = obj.get("image_url")
    if image_url is not None and not isinstance(image_url, str):
        raise TypeMismatchError("image_url", "a string")

    raw_state = obj.get("sync_state", SyncState.SYNCED.value)
    try:
        sync_state = SyncState(raw_state)
    except ValueError:
        raise TypeMismatchError(
            "sync_state", "one of " + ", ".join(s.value for s in SyncState)
        ) from None

    return FoodMemory(
        id=memory_id,
        name=name,
        date_added=date_added,
        notes=notes,
        rating=rating,
        coordinate=coordinate,
        image_url=image_url or None,
        sync_state=sync_state,
    )


def decode_many(items: Iterable[Any]) -> list[FoodMemory]:
    """Decode a whole collection; the first bad record fails the call."""
    return [decode(item) for item in items]
