"""Response error extraction for load test observability.

Parses Dispatch API error responses into human-readable messages.
Handles these response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Validation errors (400): {"error": {"field": ["msg"]}}
- Business errors (403/409/422/502): {"error": "ConflictError", "message": "msg", ...}
- HTTP errors (400/403): {"detail": "msg"}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    Gracefully handles unparseable bodies and missing fields.
    """
    try:
        body = response.json()
    except Exception:
        # Not JSON — return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    # Pydantic validation errors: {"detail": [{"loc": [...], "msg": "..."}]}
    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    # Domain errors: {"error": {"field": ["msg"]}} or {"error": "Kind", "message": "msg"}
    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(f"{k}: {v}" for k, v in error.items())
        if "message" in body:
            return f"{error}: {body['message']}"
        return str(error)

    # HTTPException: {"detail": "msg"}
    if "detail" in body:
        return str(body["detail"])

    # Unknown shape — stringify and truncate
    return str(body)[:300]
