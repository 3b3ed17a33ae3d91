"""Normalization of raw backend place records."""

import uuid
from collections.abc import Mapping
from typing import Any

from tripstage.coercion import as_record, first_present, to_int, to_number
from tripstage.schemas import PLACE_PLACEHOLDER_NAME, Place, Stage2Place

STAGE1_CATEGORY_KEYS = ("category", "subCategory")
STAGE2_CATEGORY_KEYS = ("category", "type", "subCategory")


def synthetic_place_id() -> str:
    """Fresh id for records that carry none; not stable across calls."""
    return f"place_{uuid.uuid4().hex[:11]}"


def _text(value: Any, default: str | None) -> str | None:
    return str(value) if value is not None else default


def _place_id(record: Mapping[str, Any]) -> str:
    for key in ("id", "placeId", "name"):
        value = record.get(key)
        if value is not None and str(value) != "":
            return str(value)
    return synthetic_place_id()


def _place_fields(record: Mapping[str, Any], category_keys: tuple[str, ...]) -> dict[str, Any]:
    return {
        "id": _place_id(record),
        "name": _text(first_present(record, "name", "placeName"), PLACE_PLACEHOLDER_NAME),
        "category": _text(first_present(record, *category_keys), ""),
        "sub_category": _text(record.get("subCategory"), None),
        "address": _text(first_present(record, "address", "roadAddress", "formattedAddress"), ""),
        "latitude": to_number(first_present(record, "latitude", "lat", "y")),
        "longitude": to_number(first_present(record, "longitude", "lng", "x", "lon")),
        "rating": to_number(record.get("rating")),
        "is_recommended": bool(record.get("isRecommended")),
        "description": _text(record.get("description"), ""),
    }


def normalize_place(raw: Any) -> Place:
    """Map an arbitrary Stage1 place record to a Place."""
    return Place(**_place_fields(as_record(raw), STAGE1_CATEGORY_KEYS))


def normalize_day_place(raw: Any, day_fallback: int | None = None) -> Stage2Place:
    """Map a Stage2 place record, resolving its day from the record or its day."""
    record = as_record(raw)
    day = to_int(first_present(record, "day", "dayNumber"))
    return Stage2Place(
        **_place_fields(record, STAGE2_CATEGORY_KEYS),
        day=day if day is not None else day_fallback,
    )
