"""Tests for the Stage1/Stage2/Stage3 and quick-form extractors."""

import pytest

from tripstage.extractors import extract_quick_form_initial, extract_stage1, extract_stage2, extract_stage3
from tripstage.schemas import OTHER_CATEGORY


def test_flat_places_group_by_category_in_first_seen_order():
    data = extract_stage1(
        {
            "allPlaces": [
                {"name": "A", "category": "Attraction"},
                {"name": "B", "category": "Food", "isRecommended": True},
            ]
        }
    )

    assert [(c.name, len(c.places)) for c in data.categories] == [("Attraction", 1), ("Food", 1)]
    assert data.total_count == 2
    assert data.recommended_count == 1


def test_flat_places_without_category_land_in_other_bucket():
    data = extract_stage1({"allPlaces": [{"name": "A"}, {"name": "B", "category": "카페"}, {"name": "C"}]})

    assert [c.name for c in data.categories] == [OTHER_CATEGORY, "카페"]
    assert [p.name for p in data.categories[0].places] == ["A", "C"]


def test_categorized_places_sort_by_count_with_stable_ties():
    data = extract_stage1(
        {
            "places": {
                "카페": [{"name": "c1"}],
                "관광지": [{"name": "a1"}, {"name": "a2"}],
                "쇼핑": [],
                "맛집": [{"name": "m1"}],
                "공원": [{"name": "p1"}, {"name": "p2"}],
            }
        }
    )

    assert [c.name for c in data.categories] == ["관광지", "공원", "카페", "맛집"]
    assert data.total_count == 6


def test_categorized_alias_and_blank_category_name():
    data = extract_stage1({"categorizedPlaces": {"": [{"name": "x"}]}})
    assert data.categories[0].name == OTHER_CATEGORY


@pytest.mark.parametrize(
    "payload",
    [
        {"places": {"a": [{"name": "1"}], "b": [{"name": "2", "isRecommended": True}, {"name": "3"}]}},
        {"allPlaces": [{"name": "1"}, {"name": "2", "category": "x"}, {"name": "3", "category": "x"}]},
        {"allPlaces": []},
    ],
)
def test_total_count_is_sum_of_category_sizes_when_not_supplied(payload):
    data = extract_stage1(payload)
    assert data.total_count == sum(len(c.places) for c in data.categories)


def test_supplied_totals_win():
    data = extract_stage1({"allPlaces": [{"name": "A"}], "totalCount": "75", "recommendedCount": 10})
    assert data.total_count == 75
    assert data.recommended_count == 10


@pytest.mark.parametrize("payload", [None, "text", [], {}, {"places": [{"name": "A"}]}, {"allPlaces": "A"}])
def test_stage1_unrecognized_shapes_return_none(payload):
    assert extract_stage1(payload) is None


def test_stage2_resolves_days_and_counts():
    data = extract_stage2(
        {
            "dailyDistribution": [
                {"dayNumber": 2, "places": [{"name": "A"}, {"name": "B", "day": 5}]},
                {"places": [{"name": "C"}], "placeCount": 4},
                {"places": None},
            ]
        }
    )

    assert [d.day for d in data.days] == [2, 2, 3]
    assert [p.day for p in data.days[0].places] == [2, 5]
    assert data.days[1].places[0].day == 2
    assert [d.place_count for d in data.days] == [2, 4, 0]
    assert data.total_days == 3
    assert data.selected_count == 6


def test_stage2_daily_plans_alias_and_supplied_totals():
    data = extract_stage2({"dailyPlans": [{"places": []}], "totalDays": 4, "selectedCount": 12})
    assert data.total_days == 4
    assert data.selected_count == 12


@pytest.mark.parametrize("payload", [None, {}, {"dailyDistribution": {"day": 1}}])
def test_stage2_without_daily_list_returns_none(payload):
    assert extract_stage2(payload) is None


def test_stage3_passes_itinerary_through_and_coerces_numbers():
    itinerary = [{"day": 1, "places": [{"name": "A", "custom": {"nested": True}}]}]
    data = extract_stage3(
        {
            "itinerary": itinerary,
            "totalDistance": "25.5",
            "totalTime": 480,
            "destination": "부산",
            "budget": {"total": "1200000"},
        }
    )

    assert data.itinerary == itinerary
    assert data.total_days == 1
    assert data.total_distance == 25.5
    assert data.total_time == 480
    assert data.destination == "부산"
    assert data.budget_total == 1200000


def test_stage3_defaults():
    data = extract_stage3({"totalDistance": "far"})
    assert data.itinerary is None
    assert data.total_days == 0
    assert data.total_distance is None
    assert extract_stage3(None) is None


def test_stage3_supplied_total_days_wins():
    assert extract_stage3({"itinerary": [{}, {}], "totalDays": 5}).total_days == 5


def test_quick_form_copies_only_present_fields():
    initial = extract_quick_form_initial(
        {
            "prefillDestinations": ["제주"],
            "prefillTravelDates": {"startDate": "2025-05-01"},
            "prefillTravelStyle": "여유로운",
            "prefillTravelers": "3",
        }
    )

    assert initial.destinations == ["제주"]
    assert initial.travel_dates.start_date == "2025-05-01"
    assert initial.travel_dates.end_date == ""
    assert initial.travel_style == ["여유로운"]
    assert initial.travelers == 3
    assert initial.departure_location is None
    assert initial.budget is None


@pytest.mark.parametrize("payload", [None, {}, {"type": "QUICK_FORM"}, {"prefillBudget": "lots"}])
def test_quick_form_without_fields_is_none_not_empty(payload):
    assert extract_quick_form_initial(payload) is None


def test_quick_form_empty_travel_dates_yield_blank_range():
    initial = extract_quick_form_initial({"prefillTravelDates": {}})

    assert initial.travel_dates.start_date == ""
    assert initial.travel_dates.end_date == ""
