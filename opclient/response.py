"""
Response classification for op output.

The op wrapper reports failures on stdout as an envelope:

    [bin-error] <exit info>---[LOG] 2019/01/01 10:00:00 (ERROR) Item 3142 not found

Anything else is a success payload: a raw string (sign-in token) or JSON.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from opclient.errors import ProtocolError, QueryError, SessionError

logger = logging.getLogger(__name__)

ERROR_SENTINEL = "[bin-error]"

_ENVELOPE = re.compile(
    r"^\[bin-error\].*?---(?P<log>.*?)\(ERROR\)(?P<message>.*)$",
    re.DOTALL,
)

SESSION_REJECTIONS = (
    "You are not currently signed in",
    "401: Authentication required",
)


def is_session_rejection(text: str) -> bool:
    return any(phrase in text for phrase in SESSION_REJECTIONS)


def parse_error(text: str) -> str:
    """Extract the human-readable message from an error envelope."""
    match = _ENVELOPE.match(text)
    if match is None:
        raise ProtocolError("Malformed op error envelope", output=text)
    return match.group("message").strip()


def classify(text: str, raw: bool = False) -> Any:
    """Return the payload carried by ``text`` or raise the matching error.

    raw=True returns successful output untouched instead of decoding JSON.
    """
    if text.startswith(ERROR_SENTINEL):
        if is_session_rejection(text):
            raise SessionError("Session invalid")
        message = parse_error(text)
        logger.debug("op rejected query: %s", message)
        raise QueryError(message)

    if raw:
        return text

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        if is_session_rejection(text):
            raise SessionError("Session invalid") from None
        raise ProtocolError(f"op output is not valid JSON: {e}", output=text) from e

    if not isinstance(payload, (dict, list)):
        raise ProtocolError(
            f"Expected a JSON object or array, got {type(payload).__name__}", output=text
        )
    return payload
