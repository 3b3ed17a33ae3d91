"""Trip-creation draft handed to the plan-completed collaborator."""

from collections.abc import Mapping
from datetime import date

from pydantic import BaseModel, ConfigDict

from tripstage.config import Config, get_config
from tripstage.schemas import Stage3Data


class TripDraft(BaseModel):
    """Fields of the trip record created once a plan is complete."""

    model_config = ConfigDict(frozen=True)

    destination: str
    start_date: str
    end_date: str
    number_of_travelers: int
    budget: float | None = None
    trip_style: str


def _day_date(day: object) -> str | None:
    if isinstance(day, Mapping):
        value = day.get("date")
        if isinstance(value, str) and value:
            return value
    return None


def trip_draft_from_stage3(
    stage3: Stage3Data, config: Config | None = None, today: date | None = None
) -> TripDraft:
    """Derive the trip record from a final itinerary.

    Dates come from the first and last day plans; without them the trip starts
    ``today`` and ends on its start date.
    """
    config = config or get_config()
    itinerary = stage3.itinerary or []

    start_date = (_day_date(itinerary[0]) if itinerary else None) or (today or date.today()).isoformat()
    end_date = (_day_date(itinerary[-1]) if itinerary else None) or start_date

    return TripDraft(
        destination=stage3.destination or config.default_destination,
        start_date=start_date,
        end_date=end_date,
        number_of_travelers=config.default_travelers,
        budget=stage3.budget_total,
        trip_style=config.trip_style,
    )
