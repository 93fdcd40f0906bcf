from __future__ import annotations

import httpx
from pydantic_ai.models import get_user_agent


def create_async_http_client(
    *,
    extra_headers: dict[str, str] | None = None,
    timeout: float = 900,
    connect: float = 5,
    read: float = 300,
) -> httpx.AsyncClient:
    """Create a new httpx.AsyncClient for a backend provider.

    Requests are not retried at the transport level; a failed generation is
    reported to the user, who decides whether to try again.

    Args:
        extra_headers: Additional headers to include in all requests.
        timeout: Total timeout in seconds.
        connect: Connection timeout in seconds.
        read: Read timeout in seconds.

    Returns:
        A new httpx.AsyncClient instance owned by the caller.
    """
    headers = {"User-Agent": get_user_agent()}
    if extra_headers:
        headers.update(extra_headers)

    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout=timeout, connect=connect, read=read),
        headers=headers,
    )
