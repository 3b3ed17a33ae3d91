"""Extraction of per-stage planning data from assistant payloads.

Each extractor takes the ``data`` payload of an assistant turn and returns the
canonical model for its stage, or None when the payload does not have a shape
it recognizes. Missing or malformed fields fall back to defaults; extractors
never raise on bad input.
"""

from collections.abc import Mapping
from typing import Any

from tripstage.coercion import first_present, to_int, to_number
from tripstage.places import normalize_day_place, normalize_place
from tripstage.schemas import (
    OTHER_CATEGORY,
    Category,
    Place,
    QuickFormPrefill,
    Stage1Data,
    Stage2Data,
    Stage2Day,
    Stage3Data,
    TravelDates,
)


def _supplied_count(payload: Mapping[str, Any], key: str, computed: int) -> int:
    supplied = to_int(payload.get(key))
    return supplied if supplied is not None else computed


def _stage1_totals(payload: Mapping[str, Any], categories: list[Category]) -> Stage1Data:
    places = [place for category in categories for place in category.places]
    return Stage1Data(
        categories=categories,
        total_count=_supplied_count(payload, "totalCount", len(places)),
        recommended_count=_supplied_count(
            payload, "recommendedCount", sum(1 for place in places if place.is_recommended)
        ),
    )


def _categorized_places(categorized: Mapping[Any, Any]) -> list[Category]:
    categories = []
    for name, raw_places in categorized.items():
        if not isinstance(raw_places, list):
            continue
        places = [normalize_place(raw) for raw in raw_places]
        if places:
            categories.append(Category(name=str(name or OTHER_CATEGORY), places=places))

    # sorted() is stable: equal counts keep their insertion order.
    return sorted(categories, key=lambda category: len(category.places), reverse=True)


def _grouped_places(all_places: list[Any]) -> list[Category]:
    groups: dict[str, list[Place]] = {}
    for raw in all_places:
        place = normalize_place(raw)
        groups.setdefault(place.category or OTHER_CATEGORY, []).append(place)
    return [Category(name=name, places=places) for name, places in groups.items()]


def extract_stage1(payload: Any) -> Stage1Data | None:
    """Extract place candidates from a categorized map or a flat ``allPlaces`` list."""
    if not isinstance(payload, Mapping):
        return None

    categorized = payload.get("places")
    if not isinstance(categorized, Mapping):
        categorized = payload.get("categorizedPlaces")
    if isinstance(categorized, Mapping):
        return _stage1_totals(payload, _categorized_places(categorized))

    all_places = payload.get("allPlaces")
    if isinstance(all_places, list):
        return _stage1_totals(payload, _grouped_places(all_places))

    return None


def extract_stage2(payload: Any) -> Stage2Data | None:
    """Extract the daily distribution from ``dailyDistribution`` or ``dailyPlans``."""
    if not isinstance(payload, Mapping):
        return None

    daily = payload.get("dailyDistribution")
    if not isinstance(daily, list):
        daily = payload.get("dailyPlans")
    if not isinstance(daily, list):
        return None

    days = []
    for index, entry in enumerate(daily):
        record = entry if isinstance(entry, Mapping) else {}
        day_number = to_int(first_present(record, "day", "dayNumber"))
        if day_number is None:
            day_number = index + 1

        raw_places = record.get("places")
        if not isinstance(raw_places, list):
            raw_places = []
        places = [normalize_day_place(raw, day_number) for raw in raw_places]
        place_count = to_int(record.get("placeCount"))

        days.append(
            Stage2Day(
                day=day_number,
                place_count=place_count if place_count is not None else len(places),
                places=places,
            )
        )

    return Stage2Data(
        days=days,
        total_days=_supplied_count(payload, "totalDays", len(days)),
        selected_count=_supplied_count(payload, "selectedCount", sum(day.place_count for day in days)),
    )


def extract_stage3(payload: Any) -> Stage3Data | None:
    """Extract the final itinerary summary; day plans pass through untouched."""
    if not isinstance(payload, Mapping):
        return None

    itinerary = payload.get("itinerary")
    if not isinstance(itinerary, list):
        itinerary = None

    total_days = to_int(payload.get("totalDays"))
    if total_days is None:
        total_days = len(itinerary) if itinerary is not None else 0

    destination = payload.get("destination")
    budget = payload.get("budget")

    return Stage3Data(
        itinerary=itinerary,
        total_days=total_days,
        total_distance=to_number(payload.get("totalDistance")),
        total_time=to_number(payload.get("totalTime")),
        destination=destination if isinstance(destination, str) and destination else None,
        budget_total=to_number(budget.get("total")) if isinstance(budget, Mapping) else None,
    )


def extract_quick_form_initial(payload: Any) -> QuickFormPrefill | None:
    """Collect only the prefill fields the payload actually carries."""
    if not isinstance(payload, Mapping):
        return None

    initial: dict[str, Any] = {}

    destinations = payload.get("prefillDestinations")
    if isinstance(destinations, list):
        initial["destinations"] = destinations

    if payload.get("prefillDeparture"):
        initial["departure_location"] = payload["prefillDeparture"]

    dates = payload.get("prefillTravelDates")
    if isinstance(dates, Mapping):
        initial["travel_dates"] = TravelDates(
            start_date=str(dates.get("startDate") or ""),
            end_date=str(dates.get("endDate") or ""),
        )

    style = payload.get("prefillTravelStyle")
    if style:
        initial["travel_style"] = style if isinstance(style, list) else [style]

    travelers = to_int(payload.get("prefillTravelers"))
    if travelers:
        initial["travelers"] = travelers

    budget = to_number(payload.get("prefillBudget"))
    if budget:
        initial["budget"] = budget

    if not initial:
        return None
    return QuickFormPrefill(**initial)
