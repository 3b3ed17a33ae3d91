"""Message classifier: decides which stage extractor, if any, applies to a turn."""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from tripstage.config import Config, get_config
from tripstage.extractors import (
    extract_quick_form_initial,
    extract_stage1,
    extract_stage2,
    extract_stage3,
)
from tripstage.schemas import Classification, MessageKind, MessageRole, RawMessage, StageUpdate
from tripstage.tracing import trace_operation

# Backend event names; several aliases mean the same stage.
TYPE_ALIASES: dict[str, MessageKind] = {
    "STAGE1_PLACES_LOADED": MessageKind.STAGE1,
    "PLACE_DISPLAY": MessageKind.STAGE1,
    "PLACES_DISTRIBUTED": MessageKind.STAGE2,
    "STAGE2_DAILY_DISTRIBUTION": MessageKind.STAGE2,
    "FINAL_ITINERARY_CREATED": MessageKind.STAGE3,
    "TRAVEL_PLAN_GENERATED": MessageKind.STAGE3,
    "QUICK_FORM": MessageKind.QUICK_FORM,
}

# payload["stage"] discriminator -> (kind, key that must be truthy)
STAGE_SHAPES: dict[int, tuple[MessageKind, str]] = {
    1: (MessageKind.STAGE1, "places"),
    2: (MessageKind.STAGE2, "dailyDistribution"),
    3: (MessageKind.STAGE3, "itinerary"),
}

_NOOP = Classification(kind=MessageKind.NOOP)

# Characters encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def effective_type(message: RawMessage) -> str | None:
    """Explicit message type, else the payload's own ``type`` tag."""
    if message.type:
        return message.type
    payload = message.data
    if isinstance(payload, Mapping):
        tag = payload.get("type")
        if isinstance(tag, str) and tag:
            return tag
    return None


def _has_value(value: Any) -> bool:
    # Empty lists and maps still count; only null, false, zero and "" do not.
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, (str, int, float)):
        return bool(value)
    return True


def _classify_by_stage(payload: Any) -> MessageKind:
    if not isinstance(payload, Mapping):
        return MessageKind.NOOP
    stage = payload.get("stage")
    if isinstance(stage, bool) or not isinstance(stage, (int, float)):
        return MessageKind.NOOP
    if isinstance(stage, float):
        if not stage.is_integer():
            return MessageKind.NOOP
        stage = int(stage)
    shape = STAGE_SHAPES.get(stage)
    if shape is None:
        return MessageKind.NOOP
    kind, required_key = shape
    return kind if _has_value(payload.get(required_key)) else MessageKind.NOOP


def classify(message: RawMessage) -> Classification:
    """Tag a message with the kind of stage data it carries.

    Only assistant turns are ever classified. A known type tag wins; anything
    else falls back to the numeric ``stage`` discriminator combined with a
    shape check on the payload.
    """
    if message.role != MessageRole.ASSISTANT:
        return _NOOP

    tag = effective_type(message)
    kind = TYPE_ALIASES.get(tag) if tag else None
    if kind is None:
        kind = _classify_by_stage(message.data)
    if kind is MessageKind.NOOP:
        return _NOOP
    return Classification(kind=kind, payload=message.data)


def travel_plan_link(thread_id: str, config: Config | None = None) -> str:
    """Route to the full travel plan of a thread."""
    config = config or get_config()
    return f"{config.travel_plan_path}?threadId={quote(thread_id, safe=_URI_COMPONENT_SAFE)}"


def evaluate_message(
    message: RawMessage, thread_id: str | None = None, config: Config | None = None
) -> StageUpdate | None:
    """Run the extractor a message classifies to.

    Returns None for user turns, unrecognized payloads, and recognized kinds
    whose payload yields nothing.
    """
    with trace_operation(
        "tripstage.router.evaluate",
        {"message.role": message.role, "message.type": message.type},
    ) as span:
        classification = classify(message)
        span.set_attribute("route.kind", str(classification.kind))
        payload = classification.payload
        fields: dict[str, Any] = {}

        kind = classification.kind
        if kind is MessageKind.NOOP:
            return None
        if kind is MessageKind.STAGE1:
            fields["stage1"] = extract_stage1(payload)
        elif kind is MessageKind.STAGE2:
            fields["stage2"] = extract_stage2(payload)
        elif kind is MessageKind.STAGE3:
            fields["stage3"] = extract_stage3(payload)
            link_thread = thread_id or message.thread_id
            if link_thread:
                fields["travel_plan_link"] = travel_plan_link(link_thread, config)
        elif kind is MessageKind.QUICK_FORM:
            fields["show_travel_form"] = True
            fields["quick_form_initial"] = extract_quick_form_initial(payload)

        update = StageUpdate(**fields)
        if update.is_empty():
            span.set_attribute("route.empty", True)
            return None
        return update
