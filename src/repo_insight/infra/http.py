from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from ..core.domain.exceptions import NotFoundError, RateLimitError, RemoteError


def _reset_time(response: httpx.Response) -> Optional[datetime]:
    raw = response.headers.get("x-ratelimit-reset")
    if raw is None or not raw.isdigit():
        return None
    return datetime.fromtimestamp(int(raw), tz=timezone.utc)


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.reason_phrase or response.text[:200]
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or response.reason_phrase)
    return response.reason_phrase


def is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == 429:
        return True
    return response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0"


def check_response(
    response: httpx.Response,
    *,
    subject: str,
    resource: str,
    token_env: Optional[str] = None,
) -> None:
    """Raise the typed error matching a non-2xx response.

    Raises:
        NotFoundError: 404
        RateLimitError: 429, or 403 with an exhausted quota
        RemoteError: any other 4xx/5xx
    """
    if response.is_success:
        return
    status = response.status_code
    if status == 404:
        raise NotFoundError(subject=subject, resource=resource, status=status)
    if is_rate_limited(response):
        raise RateLimitError(
            subject=subject,
            resource=resource,
            status=status,
            reset_at=_reset_time(response),
            token_env=token_env,
        )
    raise RemoteError(subject=subject, resource=resource, status=status, detail=_error_detail(response))


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    subject: str,
    resource: str,
    params: Optional[dict[str, Any]] = None,
    token_env: Optional[str] = None,
) -> Any:
    """GET a JSON document, mapping every failure to a RemoteError subclass.

    ``token_env`` is named in rate-limit errors as the way to raise the quota.
    """
    return await _request_json(
        client, "GET", url, subject=subject, resource=resource, token_env=token_env, params=params
    )


async def post_json(
    client: httpx.AsyncClient,
    url: str,
    body: Any,
    *,
    subject: str,
    resource: str,
) -> Any:
    return await _request_json(client, "POST", url, subject=subject, resource=resource, json=body)


async def _request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    subject: str,
    resource: str,
    token_env: Optional[str] = None,
    **kwargs: Any,
) -> Any:
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        raise RemoteError(subject=subject, resource=resource, detail=f"request timed out ({e})") from e
    except httpx.RequestError as e:
        raise RemoteError(subject=subject, resource=resource, detail=f"network error ({e})") from e

    check_response(response, subject=subject, resource=resource, token_env=token_env)
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise RemoteError(
            subject=subject,
            resource=resource,
            status=response.status_code,
            detail="response is not valid JSON",
        ) from e
