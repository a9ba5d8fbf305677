from __future__ import annotations

import json
import logging
import os
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from .errors import ExternalServiceError

logger = logging.getLogger(__name__)


def require_secret(name: str, service: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ExternalServiceError(service, message=f"Missing required environment variable: {name}")
    return value


def fetch_json(
    service: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    method: str = "GET",
    form: dict[str, Any] | None = None,
    json_body: Any = None,
    timeout_seconds: int = 30,
) -> Any:
    """
    Call a platform API and decode the JSON body.

    `form` is sent url-encoded and `json_body` as JSON; either one implies a request body (use with POST).

    Single attempt: retry/backoff belongs to the calling job, not here.
    Non-2xx responses, transport failures and undecodable bodies raise ExternalServiceError.
    """
    if params:
        url = f"{url}?{urlencode(params)}"
    data: bytes | None = None
    content_type: str | None = None
    if form is not None:
        data = urlencode(form).encode("utf-8")
        content_type = "application/x-www-form-urlencoded"
    elif json_body is not None:
        data = json.dumps(json_body).encode("utf-8")
        content_type = "application/json"

    req = Request(url, data=data, method=method)
    req.add_header("Accept", "application/json")
    if content_type:
        req.add_header("Content-Type", content_type)
    for key, value in (headers or {}).items():
        req.add_header(key, value)

    try:
        with urlopen(req, timeout=timeout_seconds) as resp:
            raw = resp.read().decode("utf-8")
    except HTTPError as exc:
        body = exc.read().decode("utf-8", errors="replace") if exc.fp else None
        logger.warning("%s request failed with HTTP %s", service, exc.code)
        raise ExternalServiceError(
            service,
            status=exc.code,
            message=f"{service} API request failed",
            detail=body,
        ) from exc
    except URLError as exc:
        logger.warning("%s request failed: %s", service, exc.reason)
        raise ExternalServiceError(service, message=f"{service} API unreachable", detail=str(exc.reason)) from exc

    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ExternalServiceError(service, message=f"{service} returned a malformed response body", detail=raw) from exc
