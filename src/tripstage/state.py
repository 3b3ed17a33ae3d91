"""Stage reducer and per-thread planning state.

``apply_message`` is the single fold step: ``rebuild`` is nothing more than
``apply_message`` folded over a persisted history from an empty state, so the
incremental and replay paths cannot drift apart.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from tripstage.config import Config, PlanCompletionMode, get_config
from tripstage.router import evaluate_message
from tripstage.schemas import RawMessage, Stage3Data, StageState, StageUpdate
from tripstage.tracing import record_side_effect_failure, trace_operation

logger = logging.getLogger(__name__)

EMPTY_STATE = StageState()


@dataclass(frozen=True)
class PlanCompleted:
    """Signal that a fold step delivered a final itinerary."""

    thread_id: str | None
    stage3: Stage3Data
    travel_plan_link: str | None
    first_completion: bool


@dataclass(frozen=True)
class ReduceStep:
    """Outcome of folding one message: the new state plus its side signals."""

    state: StageState
    update: StageUpdate | None = None
    plan_completed: PlanCompleted | None = None


def merge_update(state: StageState, update: StageUpdate | None) -> StageState:
    """Replace the slots an update addresses; carry the rest over."""
    if update is None:
        return state

    changes: dict[str, Any] = {}
    for slot in ("stage1", "stage2", "stage3", "travel_plan_link"):
        value = getattr(update, slot)
        if value is not None:
            changes[slot] = value
    if not changes:
        return state
    return state.model_copy(update=changes)


def apply_message(
    state: StageState,
    message: RawMessage,
    thread_id: str | None = None,
    config: Config | None = None,
) -> ReduceStep:
    """Fold one message into the planning state."""
    config = config or get_config()
    with trace_operation(
        "tripstage.state.apply",
        {"thread_id": thread_id or message.thread_id, "stage.before": state.current_stage},
    ) as span:
        update = evaluate_message(message, thread_id, config)
        new_state = merge_update(state, update)
        span.set_attribute("stage.after", new_state.current_stage)

        completed = None
        if update is not None and update.stage3 is not None:
            first_completion = state.stage3 is None
            if first_completion or config.plan_completion is PlanCompletionMode.EVERY:
                completed = PlanCompleted(
                    thread_id=thread_id or message.thread_id,
                    stage3=update.stage3,
                    travel_plan_link=new_state.travel_plan_link,
                    first_completion=first_completion,
                )
                span.set_attribute("plan.completed", True)

        return ReduceStep(state=new_state, update=update, plan_completed=completed)


def replay(
    messages: Iterable[RawMessage],
    thread_id: str | None = None,
    config: Config | None = None,
    state: StageState = EMPTY_STATE,
) -> list[ReduceStep]:
    """Fold messages in persisted order, keeping every intermediate step."""
    config = config or get_config()
    steps = []
    for message in messages:
        step = apply_message(state, message, thread_id, config)
        steps.append(step)
        state = step.state
    return steps


def rebuild(
    messages: Iterable[RawMessage],
    thread_id: str | None = None,
    config: Config | None = None,
) -> StageState:
    """Reconstruct a thread's state from its full persisted history."""
    with trace_operation("tripstage.state.rebuild", {"thread_id": thread_id}) as span:
        steps = replay(messages, thread_id, config)
        span.set_attribute("history_length", len(steps))
        return steps[-1].state if steps else EMPTY_STATE


# In-memory state store keyed by thread id
_STATE_STORE: dict[str, StageState] = {}


def load_state(thread_id: str) -> StageState:
    """Load a thread's state, empty when the thread is unknown."""
    return _STATE_STORE.get(thread_id, EMPTY_STATE)


def save_state(thread_id: str, state: StageState) -> None:
    """Save a thread's state."""
    _STATE_STORE[thread_id] = state


def clear_all_states() -> None:
    """Clear all stored state (for testing)."""
    _STATE_STORE.clear()


PlanCompletedListener = Callable[[PlanCompleted], Any]


class StageSession:
    """Planning state of the active conversation thread.

    Incoming assistant turns are folded with ``receive``; opening a thread
    rebuilds from its history. Plan-completed listeners run after the new
    state is stored, and a failing listener never undoes or blocks that.
    """

    def __init__(self, config: Config | None = None):
        self.config = config or get_config()
        self.thread_id: str | None = None
        self.state: StageState = EMPTY_STATE
        self._listeners: list[PlanCompletedListener] = []

    def on_plan_completed(self, listener: PlanCompletedListener) -> None:
        self._listeners.append(listener)

    def open_thread(self, thread_id: str | None, messages: Iterable[RawMessage] | None = None) -> StageState:
        """Switch to a thread; a new or empty thread starts from an empty state.

        Rebuilding never notifies listeners: those turns were already handled
        when they first arrived.
        """
        self.thread_id = thread_id
        history = list(messages or [])
        self.state = rebuild(history, thread_id, self.config) if history else EMPTY_STATE
        if thread_id:
            save_state(thread_id, self.state)
        return self.state

    def reset(self) -> None:
        self.thread_id = None
        self.state = EMPTY_STATE

    def receive(self, message: RawMessage) -> ReduceStep:
        """Fold a newly arrived message into the active thread's state."""
        step = apply_message(self.state, message, self.thread_id, self.config)
        self.state = step.state
        if self.thread_id:
            save_state(self.thread_id, self.state)
        if step.plan_completed is not None:
            self._notify(step.plan_completed)
        return step

    def _notify(self, event: PlanCompleted) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                logger.exception("Plan-completed listener failed for thread %s", event.thread_id)
                record_side_effect_failure(e, getattr(listener, "__name__", repr(listener)))
