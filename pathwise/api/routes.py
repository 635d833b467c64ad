"""
REST API Routes for PathWise Coach.

All responses use the success/error envelope from ``pathwise.api.schemas``.

Endpoints (all under /api/v1 prefix):
- /health - Health check
- /coach/sessions/{session_id}/open - Greet and return the transcript
- /coach/sessions/{session_id}/messages - Submit a user message
- /coach/sessions/{session_id}/transcript - Read the transcript
- /coach/sessions/{session_id}/advice - Append weekly check-in tips
- /coach/sessions/{session_id} (DELETE) - Clear the conversation
- /goals/{goal_id}/projection - Projection for a monthly savings rate
- /goals/simulate - What-if spending cut simulation
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter as FastAPIRouter
from fastapi import Depends

from pathwise.api.dependencies import (
    get_bearer_token,
    get_goal_service,
    get_registry,
    get_session,
)
from pathwise.api.schemas import (
    HealthCheckResponse,
    MessageResponse,
    QuickReplyResponse,
    SendMessageRequest,
    SendMessageResponse,
    TranscriptResponse,
    success_response,
)
from pathwise.lib.logging import bind_session
from pathwise.models.goal import ProjectionRequest, SimulationRequest
from pathwise.services.coach_session import CoachSession, CoachSessionRegistry
from pathwise.services.goal_service import GoalServiceClient

logger = logging.getLogger(__name__)

# =============================================================================
# FastAPI Router with /api/v1 prefix
# =============================================================================

router = FastAPIRouter(prefix="/api/v1")


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Health check endpoint (unauthenticated)."""
    return success_response(HealthCheckResponse(status="ok").model_dump())


# =============================================================================
# Coach Endpoints
# =============================================================================


async def _transcript_payload(session: CoachSession) -> dict[str, Any]:
    step = await session.wizard_step()
    return TranscriptResponse(
        session_id=session.session_id,
        messages=[MessageResponse.from_message(m) for m in session.transcript.messages],
        wizard_step=step.value,
    ).model_dump(mode="json")


@router.post("/coach/sessions/{session_id}/open")
async def open_session(
    session: CoachSession = Depends(get_session),
    _token: str = Depends(get_bearer_token),
) -> dict[str, Any]:
    """Open a chat session, greeting the user when the transcript is empty."""
    bind_session(session.session_id)
    await session.open()
    return success_response(await _transcript_payload(session))


@router.post("/coach/sessions/{session_id}/messages")
async def send_message(
    body: SendMessageRequest,
    session: CoachSession = Depends(get_session),
    token: str = Depends(get_bearer_token),
) -> dict[str, Any]:
    """
    Submit one user message to the coach.

    Returns:
        Envelope with the transcript entries this message produced, the
        current wizard step and the quick replies offered for it

    Raises:
        RequestInFlightError: Mapped to 409 by the app exception handlers
        ValidationError: Mapped to 422 by the app exception handlers
    """
    bind_session(session.session_id)
    reply = await session.send(body.message, token)
    return success_response(
        SendMessageResponse(
            session_id=session.session_id,
            messages=[MessageResponse.from_message(m) for m in reply.messages],
            wizard_step=reply.wizard_step.value,
            quick_replies=[QuickReplyResponse.from_button(b) for b in reply.buttons],
            goals_changed=reply.goals_changed,
            transcript=[MessageResponse.from_message(m) for m in session.transcript.messages],
        ).model_dump(mode="json")
    )


@router.get("/coach/sessions/{session_id}/transcript")
async def get_transcript(
    session: CoachSession = Depends(get_session),
    _token: str = Depends(get_bearer_token),
) -> dict[str, Any]:
    """Return the full transcript of a session."""
    return success_response(await _transcript_payload(session))


@router.post("/coach/sessions/{session_id}/advice")
async def weekly_advice(
    session: CoachSession = Depends(get_session),
    token: str = Depends(get_bearer_token),
) -> dict[str, Any]:
    """Append the weekly check-in tips to the transcript."""
    bind_session(session.session_id)
    message = await session.weekly_advice(token)
    return success_response(MessageResponse.from_message(message).model_dump(mode="json"))


@router.delete("/coach/sessions/{session_id}")
async def clear_session(
    session: CoachSession = Depends(get_session),
    registry: CoachSessionRegistry = Depends(get_registry),
    token: str = Depends(get_bearer_token),
) -> dict[str, Any]:
    """Clear the transcript and discard any unfinished goal draft."""
    bind_session(session.session_id)
    await session.reset()
    await registry.drop(session.session_id, token)
    logger.info("coach_session_cleared session=%s", session.session_id)
    return success_response({"cleared": True})


# =============================================================================
# Goal Insight Endpoints
# =============================================================================


@router.post("/goals/{goal_id}/projection")
async def goal_projection(
    goal_id: str,
    body: ProjectionRequest,
    goal_service: GoalServiceClient = Depends(get_goal_service),
    token: str = Depends(get_bearer_token),
) -> dict[str, Any]:
    """
    Project a goal's completion for a monthly savings rate.

    Raises:
        ServiceError: Mapped to 502 by the app exception handlers
    """
    projection = await goal_service.projection(token, goal_id, body)
    return success_response(projection)


@router.post("/goals/simulate")
async def goal_simulation(
    body: SimulationRequest,
    goal_service: GoalServiceClient = Depends(get_goal_service),
    token: str = Depends(get_bearer_token),
) -> dict[str, Any]:
    """Simulate how spending cuts move a goal's timeline."""
    simulation = await goal_service.simulate(token, body)
    return success_response(simulation)
