"""Data schemas for the stage engine."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tripstage.coercion import to_int

OTHER_CATEGORY = "기타"
PLACE_PLACEHOLDER_NAME = "장소"


class MessageRole(StrEnum):
    """Author of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class MessageKind(StrEnum):
    """Tagged classification of an assistant turn."""

    STAGE1 = "stage1"
    STAGE2 = "stage2"
    STAGE3 = "stage3"
    QUICK_FORM = "quick_form"
    NOOP = "noop"


class RawMessage(BaseModel):
    """A persisted conversation turn, exactly as received."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    role: MessageRole
    content: str = ""
    timestamp: str = ""
    type: str | None = None
    data: Any = None
    id: str | None = None
    thread_id: str | None = None
    phase: str | None = None
    next_action: str | None = None


class Place(BaseModel):
    """Canonical place candidate."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = PLACE_PLACEHOLDER_NAME
    category: str = ""
    sub_category: str | None = None
    address: str = ""
    latitude: float | None = None
    longitude: float | None = None
    rating: float | None = None
    is_recommended: bool = False
    description: str = ""


class Stage2Place(Place):
    """Place assigned to a trip day."""

    day: int | None = None


class Category(BaseModel):
    """Named group of Stage1 places; never empty."""

    model_config = ConfigDict(frozen=True)

    name: str
    places: list[Place] = Field(min_length=1)


class Stage1Data(BaseModel):
    """Place candidates grouped by category."""

    model_config = ConfigDict(frozen=True)

    categories: list[Category] = Field(default_factory=list)
    total_count: int = 0
    recommended_count: int = 0


class Stage2Day(BaseModel):
    """Places distributed to one day."""

    model_config = ConfigDict(frozen=True)

    day: int
    place_count: int = 0
    places: list[Stage2Place] = Field(default_factory=list)


class Stage2Data(BaseModel):
    """Daily distribution of the selected places."""

    model_config = ConfigDict(frozen=True)

    days: list[Stage2Day] = Field(default_factory=list)
    total_days: int = 0
    selected_count: int = 0


class Stage3Data(BaseModel):
    """Final itinerary; day plans are kept exactly as the backend sent them."""

    model_config = ConfigDict(frozen=True)

    itinerary: list[Any] | None = None
    total_days: int = 0
    total_distance: float | None = None
    total_time: float | None = None
    destination: str | None = None
    budget_total: float | None = None


class TravelDates(BaseModel):
    """Prefilled travel date range."""

    model_config = ConfigDict(frozen=True)

    start_date: str = ""
    end_date: str = ""


class QuickFormPrefill(BaseModel):
    """Fields the backend asked to prefill in the quick travel form."""

    model_config = ConfigDict(frozen=True)

    destinations: list[Any] | None = None
    departure_location: Any = None
    travel_dates: TravelDates | None = None
    travel_style: list[Any] | None = None
    travelers: int | None = None
    budget: float | None = None


class StageUpdate(BaseModel):
    """What a single assistant turn contributes to the planning state."""

    model_config = ConfigDict(frozen=True)

    stage1: Stage1Data | None = None
    stage2: Stage2Data | None = None
    stage3: Stage3Data | None = None
    travel_plan_link: str | None = None
    quick_form_initial: QuickFormPrefill | None = None
    show_travel_form: bool = False

    def is_empty(self) -> bool:
        return (
            self.stage1 is None
            and self.stage2 is None
            and self.stage3 is None
            and self.travel_plan_link is None
            and self.quick_form_initial is None
            and not self.show_travel_form
        )


class Classification(BaseModel):
    """Result of classifying a message: a kind and the payload it applies to."""

    model_config = ConfigDict(frozen=True)

    kind: MessageKind = MessageKind.NOOP
    payload: Any = None


class StageState(BaseModel):
    """Replay-derivable snapshot of one thread's progress through the stages."""

    model_config = ConfigDict(frozen=True)

    stage1: Stage1Data | None = None
    stage2: Stage2Data | None = None
    stage3: Stage3Data | None = None
    travel_plan_link: str | None = None

    def is_empty(self) -> bool:
        return self.stage1 is None and self.stage2 is None and self.stage3 is None

    @property
    def current_stage(self) -> int:
        """Highest stage reached, 0 when nothing has been loaded."""
        if self.stage3 is not None:
            return 3
        if self.stage2 is not None:
            return 2
        if self.stage1 is not None:
            return 1
        return 0


class AccommodationTier(StrEnum):
    """Lodging choice from the travel form."""

    HOTEL = "hotel"
    RESORT = "resort"
    PENSION = "pension"
    HANOK = "hanok"
    GUESTHOUSE = "guesthouse"


class TransportMode(StrEnum):
    """Getting-around choice from the travel form."""

    RENTAL_CAR = "rental_car"
    TAXI = "taxi"
    WALKING = "walking"
    PUBLIC = "public"


class BudgetTier(StrEnum):
    """Spending level from the travel form."""

    LUXURY = "luxury"
    PREMIUM = "premium"
    STANDARD = "standard"
    ECONOMY = "economy"


# Labels the Korean travel form submits.
ACCOMMODATION_LABELS = {
    "호텔": AccommodationTier.HOTEL,
    "리조트": AccommodationTier.RESORT,
    "펜션": AccommodationTier.PENSION,
    "한옥": AccommodationTier.HANOK,
    "게스트하우스": AccommodationTier.GUESTHOUSE,
}

TRANSPORT_LABELS = {
    "렌터카": TransportMode.RENTAL_CAR,
    "택시": TransportMode.TAXI,
    "도보중심": TransportMode.WALKING,
    "대중교통": TransportMode.PUBLIC,
}

BUDGET_LABELS = {
    "럭셔리": BudgetTier.LUXURY,
    "고급": BudgetTier.PREMIUM,
    "중간": BudgetTier.STANDARD,
    "저예산": BudgetTier.ECONOMY,
}


def _resolve_label(value: Any, labels: dict[str, StrEnum], enum_type: type[StrEnum], default: StrEnum):
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text in labels:
            return labels[text]
        try:
            return enum_type(text.lower())
        except ValueError:
            return default
    return default


class TripConfig(BaseModel):
    """Traveler choices the budget is priced against.

    Unrecognized tier labels (for example a free-text hotel name typed into the
    form) price at the default tier rather than failing.
    """

    model_config = ConfigDict(frozen=True)

    days: int
    travelers: int = 1
    accommodation: AccommodationTier = AccommodationTier.GUESTHOUSE
    transportation: TransportMode = TransportMode.PUBLIC
    budget: BudgetTier = BudgetTier.STANDARD

    @field_validator("travelers", mode="before")
    @classmethod
    def travelers_default_to_one(cls, value: Any) -> int:
        count = to_int(value)
        if not count or count < 1:
            return 1
        return count

    @field_validator("accommodation", mode="before")
    @classmethod
    def accommodation_from_label(cls, value: Any) -> AccommodationTier:
        return _resolve_label(value, ACCOMMODATION_LABELS, AccommodationTier, AccommodationTier.GUESTHOUSE)

    @field_validator("transportation", mode="before")
    @classmethod
    def transportation_from_label(cls, value: Any) -> TransportMode:
        return _resolve_label(value, TRANSPORT_LABELS, TransportMode, TransportMode.PUBLIC)

    @field_validator("budget", mode="before")
    @classmethod
    def budget_from_label(cls, value: Any) -> BudgetTier:
        return _resolve_label(value, BUDGET_LABELS, BudgetTier, BudgetTier.STANDARD)


class BudgetBreakdown(BaseModel):
    """Four-component cost estimate and its exact sum."""

    model_config = ConfigDict(frozen=True)

    accommodation: int
    food: int
    transportation: int
    activities: int
    total: int

    @model_validator(mode="after")
    def total_must_equal_components(self) -> BudgetBreakdown:
        expected = self.accommodation + self.food + self.transportation + self.activities
        if self.total != expected:
            raise ValueError(f"total {self.total} does not equal component sum {expected}")
        return self
