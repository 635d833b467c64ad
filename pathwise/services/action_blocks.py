"""
Action blocks embedded in AI chat replies.

The remote coach may append a machine-actionable command to a reply inside a
fenced block::

    Sure, I'll create that goal for you!
    ```action
    {"type": "CREATE_GOAL", "data": {"name": "New Car", ...}}
    ```

A ```` ```json ```` fence is accepted too. The block is removed from the text
shown to the user and parsed into an ``ActionBlock``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError

from pathwise.models.goal import ActionBlock

logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"```(?:action|json)\s*\n?(?P<body>.*?)```", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True)
class ParsedReply:
    """A chat reply split into display text and an optional action."""

    text: str
    action: ActionBlock | None = None


def extract_action_block(reply: str) -> ParsedReply:
    """Split an action block out of a chat reply.

    Only the first well-formed block is used. Malformed blocks are left in the
    text untouched.

    Args:
        reply: Raw reply text from the chat service

    Returns:
        ParsedReply with the cleaned text and the parsed action, if any
    """
    for match in _FENCE_PATTERN.finditer(reply):
        try:
            action = ActionBlock.model_validate(json.loads(match.group("body")))
        except (json.JSONDecodeError, PydanticValidationError) as exc:
            logger.debug("action_block_ignored error=%s", exc)
            continue
        text = (reply[: match.start()] + reply[match.end():]).strip()
        return ParsedReply(text=text, action=action)
    return ParsedReply(text=reply.strip())
