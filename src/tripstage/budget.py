"""Deterministic cost breakdown derived from a final itinerary."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from tripstage.schemas import (
    OTHER_CATEGORY,
    AccommodationTier,
    BudgetBreakdown,
    BudgetTier,
    TransportMode,
    TripConfig,
)
from tripstage.tracing import trace_operation

MEALS_PER_DAY = 3

# Places that count as a meal toward the food budget.
MEAL_KEYWORDS = ("맛집", "식당", "레스토랑")
# Places excluded from activity pricing; cafes are neither a meal nor an activity.
DINING_KEYWORDS = MEAL_KEYWORDS + ("카페",)

# Iteration order is load-bearing: substring fallback takes the first key found.
CATEGORY_PRICES: dict[str, int] = {
    "관광지": 15000,
    "명소": 15000,
    "맛집": 30000,
    "식당": 30000,
    "레스토랑": 30000,
    "카페": 8000,
    "쇼핑": 50000,
    "쇼핑몰": 50000,
    "박물관": 12000,
    "미술관": 15000,
    "공원": 0,
    "해변": 0,
    "시장": 20000,
    "테마파크": 50000,
    "액티비티": 40000,
    "체험": 30000,
}

NIGHTLY_RATES: dict[AccommodationTier, int] = {
    AccommodationTier.HOTEL: 120000,
    AccommodationTier.RESORT: 150000,
    AccommodationTier.PENSION: 80000,
    AccommodationTier.HANOK: 100000,
    AccommodationTier.GUESTHOUSE: 50000,
}

DAILY_TRANSPORT_RATES: dict[TransportMode, int] = {
    TransportMode.RENTAL_CAR: 50000,
    TransportMode.TAXI: 40000,
    TransportMode.WALKING: 5000,
    TransportMode.PUBLIC: 10000,
}

BUDGET_MULTIPLIERS: dict[BudgetTier, float] = {
    BudgetTier.LUXURY: 3,
    BudgetTier.PREMIUM: 2,
    BudgetTier.STANDARD: 1,
    BudgetTier.ECONOMY: 0.6,
}


def budget_multiplier(tier: BudgetTier) -> float:
    """Scale factor the caller applies to per-item prices for a budget tier."""
    return BUDGET_MULTIPLIERS[tier]


def _scale(price: int, multiplier: float) -> int:
    # Half-up rounding; prices are never negative.
    return int(price * multiplier + 0.5)


@dataclass(frozen=True)
class PriceBook:
    """Unit prices the calculator sums; never scaled by the calculator itself."""

    meal_price: int = 30000
    default_activity_price: int = 20000
    category_prices: Mapping[str, int] = field(default_factory=lambda: dict(CATEGORY_PRICES))
    nightly_rates: Mapping[AccommodationTier, int] = field(default_factory=lambda: dict(NIGHTLY_RATES))
    daily_transport_rates: Mapping[TransportMode, int] = field(
        default_factory=lambda: dict(DAILY_TRANSPORT_RATES)
    )

    def scaled(self, multiplier: float) -> PriceBook:
        """Per-item prices (meals and activities) scaled for a budget tier.

        Lodging and transport rates are left as they are.
        """
        return replace(
            self,
            meal_price=_scale(self.meal_price, multiplier),
            default_activity_price=_scale(self.default_activity_price, multiplier),
            category_prices={key: _scale(price, multiplier) for key, price in self.category_prices.items()},
        )

    def for_tier(self, tier: BudgetTier) -> PriceBook:
        return self.scaled(budget_multiplier(tier))

    def category_price(self, category: str) -> int:
        """Exact match first, then the first key contained in the category, then the baseline."""
        if category in self.category_prices:
            return self.category_prices[category]
        lowered = category.lower()
        for key, price in self.category_prices.items():
            if key.lower() in lowered:
                return price
        return self.default_activity_price


DEFAULT_PRICE_BOOK = PriceBook()


def iter_itinerary_places(itinerary: Any) -> Iterator[Mapping[str, Any]]:
    """Yield place records from day plans, skipping anything malformed."""
    if not isinstance(itinerary, list):
        return
    for day in itinerary:
        if not isinstance(day, Mapping):
            continue
        places = day.get("places")
        if not isinstance(places, list):
            continue
        for place in places:
            if isinstance(place, Mapping):
                yield place


def _place_category(place: Mapping[str, Any]) -> str:
    category = place.get("category")
    return str(category) if category else ""


def _matches(category: str, keywords: tuple[str, ...]) -> bool:
    lowered = category.lower()
    return any(keyword in lowered for keyword in keywords)


def count_meal_places(itinerary: Any) -> int:
    return sum(1 for place in iter_itinerary_places(itinerary) if _matches(_place_category(place), MEAL_KEYWORDS))


def calculate_budget(
    itinerary: Any, config: TripConfig, prices: PriceBook = DEFAULT_PRICE_BOOK
) -> BudgetBreakdown:
    """Derive the four-component cost estimate for an itinerary.

    Args:
        itinerary: Day plans as delivered in Stage3, each with a ``places`` list.
        config: Traveler choices; ``config.days`` is floored at zero.
        prices: Unit prices, already scaled for the budget tier if wanted.

    Returns:
        A BudgetBreakdown whose total is the exact sum of its components.
    """
    days = max(config.days, 0)
    travelers = config.travelers

    with trace_operation(
        "tripstage.budget.calculate",
        {"days": days, "travelers": travelers, "accommodation": config.accommodation},
    ) as span:
        accommodation = prices.nightly_rates[config.accommodation] * max(days - 1, 0)

        meals = max(count_meal_places(itinerary), days * MEALS_PER_DAY)
        food = meals * prices.meal_price * travelers

        transportation = prices.daily_transport_rates[config.transportation] * days

        activities = 0
        for place in iter_itinerary_places(itinerary):
            category = _place_category(place) or OTHER_CATEGORY
            if _matches(category, DINING_KEYWORDS):
                continue
            activities += prices.category_price(category) * travelers

        total = accommodation + food + transportation + activities
        span.set_attribute("budget.total", total)

        return BudgetBreakdown(
            accommodation=accommodation,
            food=food,
            transportation=transportation,
            activities=activities,
            total=total,
        )
