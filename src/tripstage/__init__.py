"""Public package exports."""

from tripstage.budget import DEFAULT_PRICE_BOOK, PriceBook, budget_multiplier, calculate_budget
from tripstage.coercion import to_number
from tripstage.config import Config, PlanCompletionMode, get_config
from tripstage.extractors import extract_quick_form_initial, extract_stage1, extract_stage2, extract_stage3
from tripstage.places import normalize_day_place, normalize_place
from tripstage.router import classify, evaluate_message
from tripstage.schemas import (
    BudgetBreakdown,
    Classification,
    MessageKind,
    Place,
    RawMessage,
    Stage1Data,
    Stage2Data,
    Stage3Data,
    StageState,
    StageUpdate,
    TripConfig,
)
from tripstage.state import PlanCompleted, ReduceStep, StageSession, apply_message, rebuild

__all__ = [
    "DEFAULT_PRICE_BOOK",
    "BudgetBreakdown",
    "Classification",
    "Config",
    "MessageKind",
    "Place",
    "PlanCompleted",
    "PlanCompletionMode",
    "PriceBook",
    "RawMessage",
    "ReduceStep",
    "Stage1Data",
    "Stage2Data",
    "Stage3Data",
    "StageSession",
    "StageState",
    "StageUpdate",
    "TripConfig",
    "apply_message",
    "budget_multiplier",
    "calculate_budget",
    "classify",
    "evaluate_message",
    "extract_quick_form_initial",
    "extract_stage1",
    "extract_stage2",
    "extract_stage3",
    "get_config",
    "normalize_day_place",
    "normalize_place",
    "rebuild",
    "to_number",
]
