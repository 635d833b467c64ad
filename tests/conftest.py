"""
Shared test fixtures for PathWise Coach.

This module provides common fixtures used across all test modules:
- Environment setup (dev mode)
- A fixed "today" so deadline parsing is reproducible
- An in-process fake of the remote PathWise backend (httpx.MockTransport)
- Wired goal/coach clients, wizard and session registry

Usage:
    All fixtures are automatically available to any test in the tests/ directory.
"""

from __future__ import annotations

import json
import os
from datetime import date
from typing import Any

import httpx
import pytest

# ---------------------------------------------------------------------------
# 1. Environment setup -- must run before any application imports
# ---------------------------------------------------------------------------

os.environ.setdefault("PATHWISE_DEV_MODE", "1")
os.environ.setdefault("PATHWISE_ENVIRONMENT", "development")

from pathwise.config.settings import Settings  # noqa: E402
from pathwise.modules.goal_wizard import GoalWizardModule  # noqa: E402
from pathwise.services.backend import BackendClient  # noqa: E402
from pathwise.services.coach_client import CoachClient  # noqa: E402
from pathwise.services.coach_session import CoachSessionRegistry  # noqa: E402
from pathwise.services.goal_service import GoalServiceClient  # noqa: E402
from pathwise.services.state_store import BoundedStateStore  # noqa: E402
from pathwise.services.transcript import InMemoryTranscriptStore  # noqa: E402

TODAY = date(2026, 10, 17)
BACKEND_URL = "http://backend.test"
TOKEN = "test-token"


# ---------------------------------------------------------------------------
# 2. Fake remote backend
# ---------------------------------------------------------------------------

class FakeBackend:
    """In-process stand-in for the PathWise REST backend.

    Records every request and serves goals from a dict. ``failures`` maps
    ``(method, path)`` to ``(status, body)`` to force an error reply.
    """

    def __init__(self) -> None:
        self.goals: dict[str, dict[str, Any]] = {}
        self.requests: list[dict[str, Any]] = []
        self.failures: dict[tuple[str, str], tuple[int, Any]] = {}
        self.chat_reply = "Happy to help!"
        self.advice_reply = "Try moving BD 50 more into savings this week."
        self._next_id = 1

    def add_goal(self, **fields: Any) -> dict[str, Any]:
        goal_id = fields.pop("id", None) or f"g{self._next_id}"
        self._next_id += 1
        goal = {"id": goal_id, "status": "ACTIVE", **fields}
        self.goals[goal_id] = goal
        return goal

    def calls(self, method: str, path: str) -> list[dict[str, Any]]:
        return [r for r in self.requests if r["method"] == method and r["path"] == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content) if request.content else None
        self.requests.append({
            "method": request.method,
            "path": path,
            "json": body,
            "authorization": request.headers.get("authorization"),
        })

        failure = self.failures.get((request.method, path))
        if failure is not None:
            status, payload = failure
            return httpx.Response(status, json=payload)

        if path == "/api/goals" and request.method == "GET":
            return httpx.Response(200, json=list(self.goals.values()))
        if path == "/api/goals" and request.method == "POST":
            return httpx.Response(201, json=self.add_goal(**body))
        if path == "/api/goals/simulate":
            return httpx.Response(200, json={"monthsSaved": 3})
        if path.startswith("/api/goals/") and path.endswith("/projection"):
            return httpx.Response(200, json={"monthsToGoal": 10})
        if path.startswith("/api/goals/"):
            goal_id = path.rsplit("/", 1)[-1]
            goal = self.goals.get(goal_id)
            if goal is None:
                return httpx.Response(404, json={"message": "Goal not found"})
            if request.method == "GET":
                return httpx.Response(200, json=goal)
            if request.method == "PUT":
                goal.update(body)
                return httpx.Response(200, json=goal)
            if request.method == "DELETE":
                del self.goals[goal_id]
                return httpx.Response(204)
        if path == "/api/ai/chat":
            return httpx.Response(200, json={"message": self.chat_reply, "timestamp": "2026-10-17T09:00:00"})
        if path == "/api/ai/advice":
            return httpx.Response(200, json={"message": self.advice_reply})
        if path == "/api/ai/context-event":
            return httpx.Response(200, json={})
        return httpx.Response(404, json={"message": f"No route for {path}"})


# ---------------------------------------------------------------------------
# 3. Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def fixed_today():
    """Callable returning the fixed test date (injected as ``today``)."""
    return lambda: TODAY


@pytest.fixture()
def token() -> str:
    return TOKEN


@pytest.fixture()
def settings() -> Settings:
    return Settings(backend_url=BACKEND_URL)


@pytest.fixture()
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
async def backend(fake_backend: FakeBackend, settings: Settings):
    """BackendClient whose transport is the fake backend."""
    client = BackendClient.from_settings(settings, transport=httpx.MockTransport(fake_backend.handle))
    yield client
    await client.aclose()


@pytest.fixture()
def goal_service(backend: BackendClient) -> GoalServiceClient:
    return GoalServiceClient(backend)


@pytest.fixture()
def coach_client(backend: BackendClient) -> CoachClient:
    return CoachClient(backend)


@pytest.fixture()
def state_store() -> BoundedStateStore:
    """Memory-only state store."""
    return BoundedStateStore(max_size=100, default_ttl=3600)


@pytest.fixture()
def wizard(state_store: BoundedStateStore) -> GoalWizardModule:
    return GoalWizardModule(state_store=state_store)


@pytest.fixture()
def transcript_store() -> InMemoryTranscriptStore:
    return InMemoryTranscriptStore()


@pytest.fixture()
def registry(
    settings: Settings,
    goal_service: GoalServiceClient,
    coach_client: CoachClient,
    transcript_store: InMemoryTranscriptStore,
    wizard: GoalWizardModule,
    fixed_today,
) -> CoachSessionRegistry:
    return CoachSessionRegistry(
        settings=settings,
        goal_service=goal_service,
        coach=coach_client,
        transcript_store=transcript_store,
        wizard=wizard,
        today=fixed_today,
    )
