"""
Common utilities for Gemini clients: retry and permissive JSON parsing.
"""

import json
import logging
import random
import re
import time
from functools import wraps

from ..errors import ExamGeniusError

logger = logging.getLogger(__name__)

# Malformed output or bad requests are not worth a second attempt
_NON_RETRYABLE_ERRORS = (
    ExamGeniusError,
    ValueError,
    TypeError,
    KeyError,
    PermissionError,
)

_FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, _NON_RETRYABLE_ERRORS):
        return False
    # google-genai ClientError covers 4xx responses
    if type(exc).__name__ in ("ClientError", "InvalidArgument", "PermissionDenied"):
        return False
    status = getattr(exc, "status_code", None) or getattr(exc, "code", None)
    if isinstance(status, int) and 400 <= status < 500 and status != 429:
        return False
    return True


def retry_llm_call(max_retries: int = 3, base_delay: float = 2.0):
    """Retry transient Gemini failures (network, 429, 5xx) with exponential backoff."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if attempt == max_retries - 1 or not _is_retryable(e):
                        raise
                    delay = base_delay * (2**attempt) + random.uniform(0, 1)
                    logger.warning(
                        "Gemini call failed (attempt %d/%d): %s. Retrying in %.1fs...",
                        attempt + 1,
                        max_retries,
                        e,
                        delay,
                    )
                    time.sleep(delay)

        return wrapper

    return decorator


def parse_json_safe(text: str):
    """Parse a model response that should contain one JSON object.

    Tries, in order: the raw text, the first ```json fenced block, and the
    substring from the first '{' to the last '}'.

    Raises:
        ValueError: if none of those parse.
    """
    if text is None:
        raise ValueError("Failed to parse JSON response")
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    match = _FENCED_JSON_RE.search(text)
    if match and match.group(1):
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        try:
            return json.loads(text[start : end + 1])
        except json.JSONDecodeError:
            pass

    raise ValueError("Failed to parse JSON response")
