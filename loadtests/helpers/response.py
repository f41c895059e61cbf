"""Response error extraction for load test observability.

Parses Warehouse API error responses into human-readable messages.
Handles two response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Domain errors (400/404/409): {"error": "msg"} or {"error": {"field": ["msg"]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Compact error string suitable for Locust failure messages and log lines."""
    try:
        body = response.json()
    except Exception:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            return " | ".join(
                f"{k}: {', '.join(map(str, v)) if isinstance(v, list) else v}" for k, v in error.items()
            )
        code = body.get("code")
        return f"[{code}] {error}" if code else str(error)

    return str(body)[:300]


def is_business_rejection(response: Response) -> bool:
    """A reservation that was refused for lack of stock is an expected outcome, not a failure."""
    if response.status_code != 200:
        return False
    try:
        body = response.json()
    except Exception:
        return False
    return body.get("success") is False and body.get("shortage") is not None
