"""
Tests for the AI coach client.
"""

from __future__ import annotations

import pytest

from pathwise.lib.exceptions import ServiceError
from pathwise.services.coach_client import CoachClient


@pytest.mark.asyncio
async def test_chat_sends_message(coach_client: CoachClient, fake_backend, token):
    reply = await coach_client.chat(token, "How much should I save?")

    assert reply.message == "Happy to help!"
    call = fake_backend.calls("POST", "/api/ai/chat")[0]
    assert call["json"] == {"message": "How much should I save?"}
    assert call["authorization"] == f"Bearer {token}"


@pytest.mark.asyncio
async def test_chat_failure_raises_service_error(coach_client: CoachClient, fake_backend, token):
    fake_backend.failures[("POST", "/api/ai/chat")] = (502, {"message": "AI is resting"})

    with pytest.raises(ServiceError, match="AI is resting"):
        await coach_client.chat(token, "hi")


@pytest.mark.asyncio
async def test_weekly_advice(coach_client: CoachClient, fake_backend, token):
    reply = await coach_client.weekly_advice(token)

    assert reply.message == fake_backend.advice_reply
    assert len(fake_backend.calls("GET", "/api/ai/advice")) == 1


@pytest.mark.asyncio
async def test_context_event_payload(coach_client: CoachClient, fake_backend, token):
    assert await coach_client.send_context_event(token, "goal_created", {"goalName": "Trip"}) is True

    call = fake_backend.calls("POST", "/api/ai/context-event")[0]
    assert call["json"] == {"event": "goal_created", "goalName": "Trip"}


@pytest.mark.asyncio
async def test_context_event_failure_is_swallowed(coach_client: CoachClient, fake_backend, token):
    fake_backend.failures[("POST", "/api/ai/context-event")] = (500, {})

    assert await coach_client.send_context_event(token, "goal_created") is False
