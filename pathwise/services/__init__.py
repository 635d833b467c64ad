"""
Services for PathWise Coach.

Services:
    - BackendClient: authenticated HTTP transport to the PathWise backend
    - GoalServiceClient: goal CRUD, projection and simulation calls
    - CoachClient: AI chat, weekly advice, context events
    - ActionDispatcher: goal actions -> goal service, outcomes -> transcript
    - Transcript / TranscriptStore: capped per-session dialogue history
    - BoundedStateStore / RedisService: ephemeral session state
    - CoachSession / CoachSessionRegistry: message routing per chat session

Import from the submodules directly, e.g.
``from pathwise.services.coach_session import CoachSession``.
"""
