from __future__ import annotations

import json
import logging
import time
from typing import Any
from urllib.parse import urlencode

import httpx

from oauth_consumer.core.errors import ConsumerError, ErrorKind
from oauth_consumer.models.exchange import (
    ExchangeOutcome,
    OtherStatus,
    RemoteRejected,
    Success,
    TokenExchangeRequest,
)

logger = logging.getLogger(__name__)

TOKEN_TIMEOUT_SEC = 30.0


class TokenExchangeClient:
    """Back-channel code-for-token exchange.

    One POST per call, no retries.  The body is always expected to be
    JSON whatever the status code; the caller classifies the status.
    """

    def __init__(
        self,
        *,
        timeout: float = TOKEN_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def exchange(
        self, token_url: str, request: TokenExchangeRequest
    ) -> tuple[int, Any]:
        try:
            body = urlencode(request.form_pairs())
        except (TypeError, UnicodeError) as exc:
            raise ConsumerError(
                ErrorKind.ENCODE, f"Could not encode token exchange params: {exc}"
            ) from exc

        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }

        # NOTE: never log the code or client_secret.
        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(token_url, content=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning(
                "Token exchange transport failure  error=%s",
                exc,
                extra={"token_url": token_url},
            )
            raise ConsumerError(
                ErrorKind.TRANSPORT, f"Could not reach token endpoint: {exc}"
            ) from exc
        except (httpx.InvalidURL, ValueError) as exc:
            # httpx rejects some URLs before any request is sent
            raise ConsumerError(
                ErrorKind.URL, f"Could not use token URL {token_url!r}: {exc}"
            ) from exc

        duration_ms = round((time.perf_counter() - start) * 1000, 1)
        logger.info(
            "Token endpoint responded  status=%d duration_ms=%.1f",
            response.status_code,
            duration_ms,
            extra={
                "token_url": token_url,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ConsumerError(
                ErrorKind.DECODE, f"Could not decode token response: {exc}"
            ) from exc

        return response.status_code, data


def classify(status_code: int, body: Any) -> ExchangeOutcome:
    if status_code == 200:
        return Success(body=body)
    if status_code == 400:
        return RemoteRejected(body=body)
    return OtherStatus(status_code=status_code)
