"""
Error helpers shared by the content services
"""

import json
import logging
from typing import Any, Optional

from fastapi import HTTPException

logger = logging.getLogger(__name__)


class ContentValidationError(ValueError):
    """Raised by the pure content layer before any backend call is made.

    `key` names the UI label for the message (see config.content_config.LABELS).
    """

    def __init__(self, key: str, message: Optional[str] = None, **params):
        self.key = key
        self.params = params
        super().__init__(message or key)


def format_backend_error(err: Any) -> str:
    """Turn a Supabase/PostgREST error into a display string"""
    if err is None:
        return "Unknown error"
    for attr in ("message", "details", "hint"):
        value = getattr(err, attr, None)
        if isinstance(value, str) and value.strip():
            return value
    if isinstance(err, dict):
        for key in ("message", "error_description", "hint", "details"):
            value = err.get(key)
            if isinstance(value, str) and value.strip():
                return value
    parts = []
    code = getattr(err, "code", None)
    if code:
        parts.append(f"code={code}")
    if isinstance(err, (dict, list)):
        try:
            raw = json.dumps(err, default=str)
            if raw not in ("{}", "[]"):
                parts.append(raw)
        except (TypeError, ValueError):
            pass
    elif str(err):
        parts.append(str(err))
    return " | ".join(parts) if parts else "Unknown error"


def backend_failure(err: Exception, action: str) -> HTTPException:
    """Log a failed backend call and build the HTTP error the route returns"""
    message = format_backend_error(err)
    logger.error(f"{action} failed: {message}")
    return HTTPException(status_code=502, detail=message)


def validation_failure(err: ContentValidationError, locale: str) -> HTTPException:
    from cfahub.config.content_config import label

    text = label(locale, err.key)
    if err.params:
        text = text.format(**err.params)
    return HTTPException(status_code=400, detail=text)
