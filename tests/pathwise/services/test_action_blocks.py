"""
Tests for action block extraction from chat replies.
"""

from __future__ import annotations

from pathwise.models.goal import ActionType
from pathwise.services.action_blocks import extract_action_block


def test_plain_reply_has_no_action():
    parsed = extract_action_block("  Saving 20% of income is a good start.  ")
    assert parsed.text == "Saving 20% of income is a good start."
    assert parsed.action is None


def test_action_fence_is_parsed_and_removed():
    reply = (
        "Sure, I'll create that goal for you!\n"
        "```action\n"
        '{"type": "CREATE_GOAL", "data": {"name": "New Car", "targetAmount": 8000}}\n'
        "```"
    )
    parsed = extract_action_block(reply)

    assert parsed.text == "Sure, I'll create that goal for you!"
    assert parsed.action.type == ActionType.CREATE_GOAL
    assert parsed.action.data == {"name": "New Car", "targetAmount": 8000}


def test_json_fence_is_accepted():
    reply = 'Done.\n```json\n{"type": "DELETE_GOAL", "data": {"goalName": "Trip"}}\n```\nAnything else?'
    parsed = extract_action_block(reply)

    assert parsed.action.type == ActionType.DELETE_GOAL
    assert parsed.text == "Done.\n\nAnything else?"


def test_malformed_block_is_left_in_text():
    reply = "Here:\n```json\n{\"example\": true}\n```"
    parsed = extract_action_block(reply)

    assert parsed.action is None
    assert "```json" in parsed.text


def test_first_valid_block_wins():
    reply = (
        "```json\n{not json}\n```\n"
        '```action\n{"type": "UPDATE_GOAL", "data": {"goalName": "Trip", "priority": "LOW"}}\n```\n'
        '```action\n{"type": "DELETE_GOAL", "data": {"goalName": "Car"}}\n```'
    )
    parsed = extract_action_block(reply)

    assert parsed.action.type == ActionType.UPDATE_GOAL
    assert "DELETE_GOAL" in parsed.text
    assert "{not json}" in parsed.text
