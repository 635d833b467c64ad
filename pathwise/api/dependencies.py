"""
FastAPI Dependencies for the coach endpoints.

The bearer token is not decoded here: it belongs to the PathWise backend and
is forwarded to it unchanged on every goal and chat call.
"""

from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Path, Request, status
from fastapi.security import OAuth2PasswordBearer

from pathwise.lib.errors import AUTH_REQUIRED, get_error_message
from pathwise.services.coach_session import CoachSession, CoachSessionRegistry
from pathwise.services.goal_service import GoalServiceClient

logger = logging.getLogger(__name__)

# Tokens are issued by the backend login endpoint
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


async def get_bearer_token(token: str | None = Depends(oauth2_scheme)) -> str:
    """
    Dependency returning the caller's bearer token.

    Raises HTTPException 401 if no token was sent.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=get_error_message(AUTH_REQUIRED),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def get_registry(request: Request) -> CoachSessionRegistry:
    """Dependency returning the session registry built by ``create_app``."""
    return request.app.state.registry


async def get_session(
    session_id: str = Path(..., min_length=1, max_length=128),
    token: str = Depends(get_bearer_token),
    registry: CoachSessionRegistry = Depends(get_registry),
) -> CoachSession:
    """Dependency resolving the ``session_id`` path parameter to the caller's session."""
    return await registry.get(session_id, token)


def get_goal_service(
    registry: CoachSessionRegistry = Depends(get_registry),
) -> GoalServiceClient:
    """Dependency returning the goal service client shared by all sessions."""
    return registry.goal_service
