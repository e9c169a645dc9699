# This project was developed with assistance from AI tools.
"""Redaction of sensitive intake answers in application responses.

Landlords and property managers review an application's ``fields`` map
without the applicant's SSN; its value is replaced with ``REDACTED`` and an
``ssnProvided`` flag tells the reviewer one was given. Date of birth keeps
only the year so age checks remain possible. The applicant and admins see
stored values.

Which keys are sensitive comes from the intake form (``IntakeStep.sensitive``).
The ``request.state.pii_mask`` flag is set by ``get_current_user``.
"""

import json
import logging
import re
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ..services.intake import SENSITIVE_FIELD_KEYS

logger = logging.getLogger(__name__)

REDACTED = "REDACTED"


def mask_dob(value: str) -> str:
    """Keep the year of a date of birth: ``1991-**-**``."""
    match = re.match(r"(\d{4})", value)
    return f"{match.group(1)}-**-**" if match else "****-**-**"


# Sensitive keys without a partial mask are redacted outright
_PARTIAL_MASKS = {"dateOfBirth": mask_dob}


def redact_fields(fields: dict) -> dict:
    """Return a copy of an application field map safe for staff review."""
    redacted = dict(fields)
    for key in SENSITIVE_FIELD_KEYS & fields.keys():
        value = fields[key]
        if value is None or value == "":
            continue
        partial = _PARTIAL_MASKS.get(key)
        if partial is not None and isinstance(value, str):
            redacted[key] = partial(value)
        else:
            redacted[key] = REDACTED
            redacted[f"{key}Provided"] = True
    return redacted


def redact_applications(body: Any) -> Any:
    """Redact every application ``fields`` map in a response body."""
    if isinstance(body, list):
        return [redact_applications(item) for item in body]
    if not isinstance(body, dict):
        return body
    out = {}
    for key, value in body.items():
        if key == "fields" and isinstance(value, dict):
            out[key] = redact_fields(value)
        else:
            out[key] = redact_applications(value)
    return out


class PIIMaskingMiddleware(BaseHTTPMiddleware):
    """Rewrite JSON responses for callers whose data scope masks PII."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        if not getattr(request.state, "pii_mask", False):
            return response
        if "application/json" not in response.headers.get("content-type", ""):
            return response

        chunks = [chunk async for chunk in response.body_iterator]
        raw = b"".join(c.encode("utf-8") if isinstance(c, str) else c for c in chunks)
        try:
            body = json.dumps(redact_applications(json.loads(raw))).encode("utf-8")
        except json.JSONDecodeError:
            logger.warning("Response for %s is not valid JSON; sent unredacted", request.url.path)
            body = raw

        headers = {k: v for k, v in response.headers.items() if k.lower() != "content-length"}
        return Response(
            content=body,
            status_code=response.status_code,
            headers=headers,
            media_type=response.media_type,
        )
