"""Tests for the budget calculator and its price book."""

import pytest
from pydantic import ValidationError

from tests.fixtures.scenarios import itinerary
from tripstage.budget import (
    DEFAULT_PRICE_BOOK,
    PriceBook,
    budget_multiplier,
    calculate_budget,
    count_meal_places,
    iter_itinerary_places,
)
from tripstage.schemas import AccommodationTier, BudgetBreakdown, BudgetTier, TransportMode, TripConfig


def test_three_day_hotel_trip_for_two():
    config = TripConfig(days=3, travelers=2, accommodation="hotel", transportation="public")
    plan = itinerary(["관광지", "맛집"], ["카페"], [])

    budget = calculate_budget(plan, config)

    assert budget.accommodation == 240000
    assert budget.food == 540000
    assert budget.transportation == 30000
    assert budget.activities == 30000
    assert budget.total == 840000


def test_meal_places_beyond_three_per_day_raise_food():
    config = TripConfig(days=1, travelers=1)
    plan = itinerary(["맛집", "식당", "레스토랑", "한식 맛집"])

    assert count_meal_places(plan) == 4
    assert calculate_budget(plan, config).food == 4 * 30000


def test_cafes_are_neither_meals_nor_activities():
    config = TripConfig(days=1, travelers=1)
    plan = itinerary(["카페", "디저트카페"])

    budget = calculate_budget(plan, config)

    assert count_meal_places(plan) == 0
    assert budget.food == 3 * 30000
    assert budget.activities == 0


@pytest.mark.parametrize(
    ("category", "price"),
    [
        ("쇼핑몰", 50000),
        ("역사박물관", 12000),
        ("전통시장", 20000),
        ("관광지시장", 15000),
        ("공원", 0),
        ("해변", 0),
        ("Museum", 20000),
        ("기타", 20000),
    ],
)
def test_category_price_lookup(category, price):
    assert DEFAULT_PRICE_BOOK.category_price(category) == price


def test_places_without_category_price_at_baseline():
    config = TripConfig(days=1)
    plan = [{"places": [{"name": "somewhere"}, {"name": "park", "category": "공원"}]}]
    assert calculate_budget(plan, config).activities == 20000


def test_one_day_trip_has_no_lodging():
    config = TripConfig(days=1, accommodation="resort")
    assert calculate_budget([], config).accommodation == 0


def test_negative_days_are_floored_at_zero():
    config = TripConfig(days=-2, travelers=3, accommodation="hotel", transportation="taxi")

    budget = calculate_budget(itinerary(["관광지"]), config)

    assert budget.accommodation == 0
    assert budget.food == 0
    assert budget.transportation == 0
    assert budget.activities == 45000
    assert budget.total == 45000


@pytest.mark.parametrize("plan", [None, "itinerary", [None, {"places": "x"}, {"places": [None, 3]}]])
def test_malformed_itineraries_are_skipped(plan):
    assert list(iter_itinerary_places(plan)) == []
    budget = calculate_budget(plan, TripConfig(days=2))
    assert budget.activities == 0
    assert budget.total == budget.accommodation + budget.food + budget.transportation


@pytest.mark.parametrize(
    ("tier", "multiplier"),
    [(BudgetTier.LUXURY, 3), (BudgetTier.PREMIUM, 2), (BudgetTier.STANDARD, 1), (BudgetTier.ECONOMY, 0.6)],
)
def test_budget_multipliers(tier, multiplier):
    assert budget_multiplier(tier) == multiplier


def test_scaled_price_book_scales_items_only():
    economy = DEFAULT_PRICE_BOOK.for_tier(BudgetTier.ECONOMY)

    assert economy.meal_price == 18000
    assert economy.default_activity_price == 12000
    assert economy.category_price("카페") == 4800
    assert economy.nightly_rates == DEFAULT_PRICE_BOOK.nightly_rates
    assert economy.daily_transport_rates == DEFAULT_PRICE_BOOK.daily_transport_rates


def test_calculator_does_not_apply_tier_itself():
    plan = itinerary(["관광지"])
    standard = calculate_budget(plan, TripConfig(days=2, budget="standard"))
    luxury = calculate_budget(plan, TripConfig(days=2, budget="luxury"))
    assert standard == luxury

    scaled = calculate_budget(plan, TripConfig(days=2), DEFAULT_PRICE_BOOK.for_tier(BudgetTier.LUXURY))
    assert scaled.food == 6 * 90000
    assert scaled.activities == 45000


def test_custom_price_book():
    prices = PriceBook(meal_price=10000, category_prices={"체험": 1000})
    budget = calculate_budget(itinerary(["도자기 체험"]), TripConfig(days=1), prices)

    assert budget.food == 30000
    assert budget.activities == 1000


@pytest.mark.parametrize(
    ("value", "expected"),
    [("호텔", AccommodationTier.HOTEL), ("HANOK", AccommodationTier.HANOK), ("신라호텔 스위트", AccommodationTier.GUESTHOUSE)],
)
def test_accommodation_labels(value, expected):
    assert TripConfig(days=1, accommodation=value).accommodation is expected


def test_trip_config_label_and_traveler_defaults():
    config = TripConfig(days=2, travelers="0", transportation="렌터카", budget="저예산")

    assert config.travelers == 1
    assert config.transportation is TransportMode.RENTAL_CAR
    assert config.budget is BudgetTier.ECONOMY
    assert TripConfig(days=1, travelers="4명").travelers == 4


def test_breakdown_rejects_inconsistent_total():
    with pytest.raises(ValidationError):
        BudgetBreakdown(accommodation=1, food=1, transportation=1, activities=1, total=5)
