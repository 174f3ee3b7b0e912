"""Response error extraction for load test observability.

Parses commerce API error responses into human-readable messages. Every
error body carries an ``error`` key:

- Validation (400): {"error": {"field": ["msg", ...]}}
- Everything else (401/403/404/409): {"error": "msg"}, with stock
  conflicts also reporting product_id, requested and available
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a compact error message for Locust failure messages and log lines."""
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict) or "error" not in body:
        return str(body)[:300]

    error = body["error"]
    if isinstance(error, dict):
        return " | ".join(
            f"{field}: {'; '.join(messages) if isinstance(messages, list) else messages}"
            for field, messages in error.items()
        )
    if "available" in body:
        return f"{error} (product {body.get('product_id')}, available {body['available']})"
    return str(error)
