"""
Coach session: one chat conversation with the PathWise AI coach.

Routes each user message:
    1. wizard active        -> next wizard step
    2. goal-creation intent -> wizard entry
    3. anything else        -> remote AI chat (action blocks dispatched)

Side effects returned by the wizard are executed here, after the reply has
been appended to the transcript. A session processes one message at a time;
a second submission while one is in flight is rejected.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from pathwise.config.settings import Settings
from pathwise.core.buttons import Button
from pathwise.core.module_context import ModuleContext
from pathwise.core.module_response import ModuleResponse
from pathwise.core.side_effects import SideEffect, SideEffectType
from pathwise.infra.monitoring import record_coach_message
from pathwise.lib.exceptions import RequestInFlightError, ServiceError, ValidationError
from pathwise.modules.goal_wizard import GoalWizardModule
from pathwise.modules.goal_wizard_state import WizardStep
from pathwise.services.action_blocks import extract_action_block
from pathwise.services.action_dispatcher import ActionDispatcher, ActionKind
from pathwise.services.coach_client import CoachClient
from pathwise.models.goal import GoalRecord
from pathwise.services.goal_service import GoalServiceClient
from pathwise.services.transcript import DialogueMessage, Role, Transcript, TranscriptStore

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Hi! I'm your PathWise AI Coach 👋 Ask me anything about your goals, "
    "savings strategy, or financial planning."
)

# Sent to the AI service after the wizard changed the user's goals
GOAL_CREATED_EVENT = "goal_created"

_EFFECT_KINDS: dict[SideEffectType, ActionKind] = {
    SideEffectType.CREATE_GOAL: ActionKind.CREATE,
    SideEffectType.UPDATE_GOAL: ActionKind.UPDATE,
    SideEffectType.DELETE_GOAL: ActionKind.DELETE,
}


def session_key(session_id: str, token: str | None) -> str:
    """Storage key of a session, scoped to the caller's bearer token.

    Two callers using the same ``session_id`` get separate transcripts and
    wizard drafts. The token itself is never stored, only a digest of it.
    """
    if not token:
        return f"anonymous:{session_id}"
    digest = hashlib.sha256(token.encode("utf-8")).hexdigest()[:32]
    return f"{digest}:{session_id}"


@dataclass(frozen=True)
class SessionReply:
    """Messages appended while handling one submission.

    ``goals_changed`` is True when a goal was created, updated or deleted
    while handling it, so clients know to refresh their goal list.
    """

    messages: list[DialogueMessage]
    wizard_step: WizardStep
    buttons: list[Button] = field(default_factory=list)
    goals_changed: bool = False


class CoachSession:
    """A single chat session.

    Args:
        session_id: Public id the client addresses the session by
        transcript: Transcript of this session
        wizard: Shared goal wizard module
        coach: Remote AI chat client
        dispatcher: Goal action dispatcher writing into ``transcript``
        today: Clock used for date parsing
        key: Caller-scoped storage key (defaults to ``session_id``)
    """

    def __init__(
        self,
        session_id: str,
        transcript: Transcript,
        wizard: GoalWizardModule,
        coach: CoachClient,
        dispatcher: ActionDispatcher,
        today: Callable[[], date] = date.today,
        key: str | None = None,
    ) -> None:
        self.session_id = session_id
        self.key = key or session_id
        self.transcript = transcript
        self._wizard = wizard
        self._coach = coach
        self._dispatcher = dispatcher
        self._today = today
        self._in_flight = False
        self._goals_changed = False
        dispatcher.add_listener(self._on_goal_changed)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def _on_goal_changed(self, kind: ActionKind, goal: GoalRecord | None) -> None:
        logger.debug("goal_changed session=%s kind=%s", self.session_id, kind)
        self._goals_changed = True

    def _context(self) -> ModuleContext:
        return ModuleContext(
            session_id=self.key,
            module_name=self._wizard.name,
            today=self._today,
        )

    async def open(self) -> list[DialogueMessage]:
        """Greet the user on a fresh transcript and return the transcript."""
        if len(self.transcript) == 0:
            await self.transcript.append(Role.ASSISTANT, WELCOME_MESSAGE)
        return self.transcript.messages

    async def wizard_step(self) -> WizardStep:
        state = await self._wizard.load_state(self.key)
        return state.step

    async def send(self, message: str, token: str | None) -> SessionReply:
        """Process one user message.

        Args:
            message: The user's text
            token: Bearer token forwarded to the backend

        Returns:
            SessionReply with every transcript entry this message produced

        Raises:
            ValidationError: If the message is blank
            RequestInFlightError: If another message is still being processed
        """
        text = message.strip()
        if not text:
            raise ValidationError("Message must not be empty")
        if self._in_flight:
            raise RequestInFlightError(self.session_id)

        self._in_flight = True
        self._goals_changed = False
        try:
            new_messages = [await self.transcript.append(Role.USER, text)]
            ctx = self._context()
            buttons: list[Button] = []

            if await self._wizard.is_active(ctx) or self._wizard.wants_to_start(text):
                record_coach_message("wizard")
                response = await self._wizard.handle(text, ctx)
                new_messages.append(await self.transcript.append(Role.ASSISTANT, response.text))
                new_messages.extend(await self._run_side_effects(response, ctx, token))
                step = WizardStep(ctx.state) if ctx.state else WizardStep.IDLE
                if step != WizardStep.IDLE:
                    buttons = list(response.buttons or [])
            else:
                record_coach_message("chat")
                new_messages.extend(await self._chat(text, token))
                step = WizardStep.IDLE

            return SessionReply(
                messages=new_messages,
                wizard_step=step,
                buttons=buttons,
                goals_changed=self._goals_changed,
            )
        finally:
            self._in_flight = False

    async def weekly_advice(self, token: str | None) -> DialogueMessage:
        """Append the weekly check-in tips from the AI service."""
        if self._in_flight:
            raise RequestInFlightError(self.session_id)
        self._in_flight = True
        try:
            reply = await self._coach.weekly_advice(token)
        except ServiceError as exc:
            return await self.transcript.append(Role.ASSISTANT, exc.message, is_error=True)
        else:
            return await self.transcript.append(Role.ASSISTANT, reply.message)
        finally:
            self._in_flight = False

    async def reset(self) -> None:
        """Clear the transcript and discard any wizard draft."""
        await self._wizard.on_exit(self._context())
        await self.transcript.clear()

    async def _chat(self, text: str, token: str | None) -> list[DialogueMessage]:
        try:
            reply = await self._coach.chat(token, text)
        except ServiceError as exc:
            return [await self.transcript.append(Role.ASSISTANT, exc.message, is_error=True)]

        parsed = extract_action_block(reply.message)
        messages: list[DialogueMessage] = []
        if parsed.text:
            messages.append(await self.transcript.append(Role.ASSISTANT, parsed.text))
        if parsed.action is not None:
            logger.info("action_block_received session=%s type=%s", self.session_id, parsed.action.type)
            outcome = await self._dispatcher.dispatch(
                ActionKind.from_action_type(parsed.action.type),
                parsed.action.data,
                token,
            )
            messages.append(outcome.message)
        return messages

    async def _run_side_effects(
        self,
        response: ModuleResponse,
        ctx: ModuleContext,
        token: str | None,
    ) -> list[DialogueMessage]:
        messages: list[DialogueMessage] = []
        for effect in response.side_effects or []:
            if effect.effect_type == SideEffectType.CONTEXT_EVENT:
                await self._send_context_event(effect, token)
                continue

            kind = _EFFECT_KINDS.get(effect.effect_type)
            if kind is None:
                logger.warning("side_effect_unsupported type=%s", effect.effect_type)
                continue

            outcome = await self._dispatcher.dispatch(kind, effect.payload, token)
            messages.append(outcome.message)
            await self._wizard.on_submit_result(ctx, outcome.succeeded)
            if outcome.succeeded:
                event = SideEffect.context_event(GOAL_CREATED_EVENT, goalName=effect.payload.get("name"))
                await self._send_context_event(event, token)
        return messages

    async def _send_context_event(self, effect: SideEffect, token: str | None) -> None:
        details = {key: value for key, value in effect.payload.items() if key != "event"}
        await self._coach.send_context_event(token, effect.payload["event"], details)


# =============================================================================
# Session registry
# =============================================================================

class CoachSessionRegistry:
    """Builds coach sessions on first use and keeps the most recent ones."""

    MAX_SESSIONS = 10000

    def __init__(
        self,
        settings: Settings,
        goal_service: GoalServiceClient,
        coach: CoachClient,
        transcript_store: TranscriptStore,
        wizard: GoalWizardModule,
        today: Callable[[], date] = date.today,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        self._settings = settings
        self._goal_service = goal_service
        self._coach = coach
        self._transcripts = transcript_store
        self._wizard = wizard
        self._today = today
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, CoachSession] = OrderedDict()
        self._lock = asyncio.Lock()

    @property
    def goal_service(self) -> GoalServiceClient:
        return self._goal_service

    async def get(self, session_id: str, token: str | None = None) -> CoachSession:
        """Return the caller's session, loading its transcript once on first use.

        Args:
            session_id: Public session id from the request path
            token: Caller's bearer token; sessions are scoped to it

        Returns:
            The cached or newly built session
        """
        key = session_key(session_id, token)
        async with self._lock:
            session = self._sessions.get(key)
            if session is not None:
                self._sessions.move_to_end(key)
                return session

            transcript = await Transcript.load(
                key,
                self._transcripts,
                limit=self._settings.transcript_limit,
            )
            session = CoachSession(
                session_id=session_id,
                transcript=transcript,
                wizard=self._wizard,
                coach=self._coach,
                dispatcher=ActionDispatcher(self._goal_service, transcript),
                today=self._today,
                key=key,
            )
            self._sessions[key] = session
            while len(self._sessions) > self._max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.debug("coach_session_evicted key=%s", evicted)
            return session

    async def drop(self, session_id: str, token: str | None = None) -> None:
        """Forget the caller's in-memory session (stored transcript is untouched)."""
        async with self._lock:
            self._sessions.pop(session_key(session_id, token), None)
