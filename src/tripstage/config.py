"""Configuration management for the stage engine."""

import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if it exists
env_path = Path.cwd() / ".env"
if env_path.exists():
    load_dotenv(env_path)


class PlanCompletionMode(StrEnum):
    """When the plan-completed signal fires."""

    EDGE = "edge"  # first transition into Stage3 only
    EVERY = "every"  # every Stage3-bearing message


@dataclass(frozen=True)
class Config:
    """Library configuration."""

    plan_completion: PlanCompletionMode = PlanCompletionMode.EDGE
    travel_plan_path: str = "/travel-plan"
    default_destination: str = "서울"
    trip_style: str = "CULTURAL"
    default_travelers: int = 1


def get_config() -> Config:
    """Get configuration from environment variables."""
    mode = os.getenv("TRIPSTAGE_PLAN_COMPLETION", "edge").strip().lower()
    try:
        plan_completion = PlanCompletionMode(mode)
    except ValueError:
        raise ValueError(
            f"TRIPSTAGE_PLAN_COMPLETION must be one of "
            f"{', '.join(m.value for m in PlanCompletionMode)}, got {mode!r}"
        ) from None

    return Config(
        plan_completion=plan_completion,
        travel_plan_path=os.getenv("TRIPSTAGE_TRAVEL_PLAN_PATH", "/travel-plan"),
        default_destination=os.getenv("TRIPSTAGE_DEFAULT_DESTINATION", "서울"),
        trip_style=os.getenv("TRIPSTAGE_TRIP_STYLE", "CULTURAL"),
        default_travelers=int(os.getenv("TRIPSTAGE_DEFAULT_TRAVELERS", "1")),
    )
