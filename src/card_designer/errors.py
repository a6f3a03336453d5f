"""
Error taxonomy for the card designer.

Every failure that can reach a user is one of four kinds:

- ConfigurationError: no credential configured (fixed by reconfiguring)
- RequestError: the completion endpoint answered with a non-success status
  or could not be reached (user may retry the same action)
- ParseError: the analysis stage returned something that is not a blueprint
- ExportError: rasterizing a card to PNG failed

The workflow controller shows the first three inline; export failures are
reported to the caller as a blocking notification.
"""

import json
import logging
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)

INVALID_KEY_MESSAGE = (
    "The API key is not valid. Check that API_KEY is set correctly in the "
    "environment and that the key is accepted by the configured endpoint."
)
GENERIC_REQUEST_MESSAGE = "The generation request was rejected. Check your network or configuration."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred, please try again."
EXPORT_FAILED_MESSAGE = "Image export failed. Try copying the markup and saving it manually."


class ErrorKind(str, Enum):
    """Closed set of user-facing failure kinds."""
    CONFIGURATION = "configuration"
    REQUEST = "request"
    PARSE = "parse"
    EXPORT = "export"


class CardDesignerError(Exception):
    """Base class for all card designer failures."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(CardDesignerError):
    kind = ErrorKind.CONFIGURATION


class RequestError(CardDesignerError):
    """Non-success response (or transport failure) from the completion endpoint."""

    kind = ErrorKind.REQUEST

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[Any] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ParseError(CardDesignerError):
    kind = ErrorKind.PARSE


class ExportError(CardDesignerError):
    kind = ErrorKind.EXPORT


def _message_from_payload(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    if isinstance(payload.get("message"), str):
        return payload["message"]
    return None


def describe_error(error: Any) -> str:
    """
    Turn any failure into a message that can be shown to the user.

    Known error kinds map directly. Anything else goes through the fallback
    chain: credential message, JSON payload with ``error.message`` or
    ``message``, then a generic text. This function never raises.

    Args:
        error: Exception (or any other value) caught at an action boundary

    Returns:
        Non-empty display string
    """
    if isinstance(error, CardDesignerError):
        message = str(error.message) if error.message is not None else ""
        if error.kind == ErrorKind.REQUEST and "API key not valid" in message:
            return INVALID_KEY_MESSAGE
        return message or GENERIC_REQUEST_MESSAGE

    text = error if isinstance(error, str) else str(getattr(error, "message", None) or error or "")

    if not text:
        return UNKNOWN_ERROR_MESSAGE
    if "API_KEY" in text:
        return text

    try:
        payload = json.loads(text)
    except ValueError:
        return text

    message = _message_from_payload(payload)
    if message and "API key not valid" in message:
        return INVALID_KEY_MESSAGE
    if message:
        return message
    logger.debug(f"No message field in error payload: {text[:200]}")
    return GENERIC_REQUEST_MESSAGE
