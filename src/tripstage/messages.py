"""Mapping of backend message records onto RawMessage."""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from tripstage.config import Config
from tripstage.router import travel_plan_link
from tripstage.schemas import MessageRole, RawMessage

FINAL_ITINERARY_TYPE = "FINAL_ITINERARY_CREATED"
PLAN_READY_TEXT = "✨ 여행 계획이 준비되었습니다! 아래 링크를 눌러 상세 일정을 확인해주세요."


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _optional_text(value: Any) -> str | None:
    return str(value) if value is not None else None


def message_from_record(record: Mapping[str, Any], thread_id: str | None = None) -> RawMessage:
    """Build a RawMessage from a message-history record.

    Records without a role are assistant turns; a missing timestamp falls back
    to the current time, which is the only non-replayable field.
    """
    role = record.get("role") or MessageRole.ASSISTANT
    try:
        role = MessageRole(role)
    except (TypeError, ValueError):
        role = MessageRole.ASSISTANT

    return RawMessage(
        id=_optional_text(record.get("id")),
        thread_id=thread_id or _optional_text(record.get("threadId")),
        role=role,
        content=str(record.get("content") or ""),
        timestamp=str(record.get("createdAt") or record.get("timestamp") or _now_iso()),
        type=_optional_text(record.get("type")),
        data=record.get("data"),
        phase=_optional_text(record.get("phase")),
        next_action=_optional_text(record.get("nextAction")),
    )


def messages_from_records(records: list[Any], thread_id: str | None = None) -> list[RawMessage]:
    """Map a history listing, dropping entries that are not records."""
    return [message_from_record(record, thread_id) for record in records if isinstance(record, Mapping)]


def prepare_assistant_message(
    message: RawMessage, thread_id: str, config: Config | None = None
) -> RawMessage:
    """Finalize a freshly received assistant turn before it is folded.

    A final-itinerary turn gets the default "plan ready" text when its content
    is blank, and its payload gains an ``itineraryLink`` unless it already has
    one.
    """
    changes: dict[str, Any] = {"thread_id": message.thread_id or thread_id}
    if message.type == FINAL_ITINERARY_TYPE:
        if not message.content.strip():
            changes["content"] = PLAN_READY_TEXT
        data = message.data if isinstance(message.data, Mapping) else {}
        changes["data"] = {"itineraryLink": travel_plan_link(thread_id, config), **data}
    return message.model_copy(update=changes)
