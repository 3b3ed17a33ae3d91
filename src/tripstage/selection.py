"""Default place selections and the stage-transfer requests built from them."""

from typing import Any

from tripstage.schemas import Place, Stage1Data, Stage2Data, Stage2Place

STAGE1_TRANSFER_TYPE = "STAGE1_TO_STAGE2_TRANSFER"
STAGE2_TRANSFER_TYPE = "STAGE2_TO_STAGE3_TRANSFER"


def all_stage1_places(stage1: Stage1Data | None) -> dict[str, Place]:
    if stage1 is None:
        return {}
    return {place.id: place for category in stage1.categories for place in category.places}


def default_stage1_selection(stage1: Stage1Data | None) -> dict[str, Place]:
    """Recommended places, keyed by id; the preselection shown to the traveler."""
    return {place_id: place for place_id, place in all_stage1_places(stage1).items() if place.is_recommended}


def default_stage2_selection(stage2: Stage2Data | None) -> dict[str, Stage2Place]:
    """Every distributed place, with its day resolved from the containing day."""
    if stage2 is None:
        return {}
    selection = {}
    for day in stage2.days:
        for place in day.places:
            if place.day is None:
                place = place.model_copy(update={"day": day.day})
            selection[place.id] = place
    return selection


def _require_places(places: list[Any], stage: int) -> None:
    if not places:
        raise ValueError(f"Stage {stage} transfer needs at least one selected place")


def stage1_transfer_request(places: list[Place]) -> dict[str, Any]:
    """Message and metadata asking the backend to distribute Stage1 picks into days."""
    _require_places(places, 1)
    return {
        "message": f"Stage 1에서 선택한 {len(places)}개 장소를 Stage 2로 진행합니다.",
        "metadata": {
            "type": STAGE1_TRANSFER_TYPE,
            "selectedPlaces": [
                {
                    "id": place.id,
                    "name": place.name,
                    "category": place.category,
                    "subCategory": place.sub_category,
                    "address": place.address,
                    "latitude": place.latitude,
                    "longitude": place.longitude,
                    "rating": place.rating,
                    "isRecommended": place.is_recommended,
                }
                for place in places
            ],
        },
    }


def stage2_transfer_request(places: list[Stage2Place]) -> dict[str, Any]:
    """Message and metadata asking the backend to build the final itinerary."""
    _require_places(places, 2)
    return {
        "message": f"Stage 2의 {len(places)}개 장소로 Stage 3 최종 일정을 생성합니다.",
        "metadata": {
            "type": STAGE2_TRANSFER_TYPE,
            "selectedPlaces": [
                {
                    "id": place.id,
                    "name": place.name,
                    "category": place.category,
                    "address": place.address,
                    "day": place.day,
                    "latitude": place.latitude,
                    "longitude": place.longitude,
                    "rating": place.rating,
                }
                for place in places
            ],
        },
    }
