"""Tests for history record mapping and assistant message preparation."""

from tests.fixtures.scenarios import THREAD_ID, assistant
from tripstage.messages import (
    PLAN_READY_TEXT,
    message_from_record,
    messages_from_records,
    prepare_assistant_message,
)
from tripstage.schemas import MessageRole


def test_record_fields_map_onto_message():
    message = message_from_record(
        {
            "id": 12,
            "role": "user",
            "content": "안녕",
            "createdAt": "2025-02-01T10:00:00Z",
            "type": "TEXT",
            "data": {"a": 1},
            "phase": "PLANNING",
            "nextAction": "WAIT",
        }
    )

    assert message.id == "12"
    assert message.role is MessageRole.USER
    assert message.content == "안녕"
    assert message.timestamp == "2025-02-01T10:00:00Z"
    assert message.type == "TEXT"
    assert message.data == {"a": 1}
    assert message.phase == "PLANNING"
    assert message.next_action == "WAIT"


def test_missing_or_unknown_role_is_assistant():
    assert message_from_record({}).role is MessageRole.ASSISTANT
    assert message_from_record({"role": "system"}).role is MessageRole.ASSISTANT


def test_missing_timestamp_falls_back_to_now():
    message = message_from_record({"content": None})
    assert message.content == ""
    assert message.timestamp


def test_thread_id_argument_overrides_record():
    assert message_from_record({"threadId": "a"}).thread_id == "a"
    assert message_from_record({"threadId": "a"}, "b").thread_id == "b"


def test_non_record_entries_are_dropped():
    messages = messages_from_records([{"role": "user"}, "noise", None, {"type": "QUICK_FORM"}])
    assert [m.role for m in messages] == [MessageRole.USER, MessageRole.ASSISTANT]


def test_final_itinerary_gets_default_text_and_link(config):
    prepared = prepare_assistant_message(assistant("FINAL_ITINERARY_CREATED", {"itinerary": []}), THREAD_ID, config)

    assert prepared.content == PLAN_READY_TEXT
    assert prepared.thread_id == THREAD_ID
    assert prepared.data == {"itineraryLink": "/travel-plan?threadId=thread-42", "itinerary": []}


def test_existing_content_and_link_are_kept(config):
    message = assistant("FINAL_ITINERARY_CREATED", {"itineraryLink": "/custom"}, content="완성!")

    prepared = prepare_assistant_message(message, THREAD_ID, config)

    assert prepared.content == "완성!"
    assert prepared.data["itineraryLink"] == "/custom"


def test_other_messages_only_gain_thread_id(config):
    message = assistant("PLACES_DISTRIBUTED", {"dailyDistribution": []})

    prepared = prepare_assistant_message(message, THREAD_ID, config)

    assert prepared.data == message.data
    assert prepared.content == ""
    assert prepared.thread_id == THREAD_ID
