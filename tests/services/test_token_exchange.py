from __future__ import annotations

import asyncio
from urllib.parse import parse_qsl

import httpx
import pytest

from oauth_consumer.core.errors import ConsumerError, ErrorKind
from oauth_consumer.models.exchange import (
    OtherStatus,
    RemoteRejected,
    Success,
    TokenExchangeRequest,
)
from oauth_consumer.services.token_exchange import TokenExchangeClient, classify

TOKEN_URL = "https://auth.example.com/oauth/token"

REQUEST = TokenExchangeRequest(
    grant_type="code",
    code="the-code",
    client_id="test-client",
    client_secret="test-secret",
)


def _exchange(handler, request: TokenExchangeRequest = REQUEST):
    client = TokenExchangeClient(transport=httpx.MockTransport(handler))
    return asyncio.run(client.exchange(TOKEN_URL, request))


def test_exchange_posts_form_encoded_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"access_token": "abc"})

    status_code, body = _exchange(handler)

    assert status_code == 200
    assert body == {"access_token": "abc"}
    (sent,) = seen
    assert sent.method == "POST"
    assert str(sent.url) == TOKEN_URL
    assert sent.headers["content-type"] == "application/x-www-form-urlencoded"
    assert parse_qsl(sent.content.decode()) == [
        ("grant_type", "code"),
        ("code", "the-code"),
        ("client_id", "test-client"),
        ("client_secret", "test-secret"),
    ]


def test_exchange_includes_redirect_uri_when_set() -> None:
    seen: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.content)
        return httpx.Response(200, json={})

    request = TokenExchangeRequest(
        grant_type="authorization_code",
        code="c",
        client_id="id",
        client_secret="s",
        redirect_uri="http://127.0.0.1:4000/return",
    )
    _exchange(handler, request)
    assert dict(parse_qsl(seen[0].decode()))["redirect_uri"] == (
        "http://127.0.0.1:4000/return"
    )


def test_exchange_returns_error_status_with_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_grant"})

    assert _exchange(handler) == (400, {"error": "invalid_grant"})


def test_exchange_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ConsumerError, match="Could not reach token endpoint") as exc:
        _exchange(handler)
    assert exc.value.kind is ErrorKind.TRANSPORT


def test_exchange_rejected_url_is_url_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request may be sent")

    client = TokenExchangeClient(transport=httpx.MockTransport(handler))
    with pytest.raises(ConsumerError, match="Could not use token URL") as exc:
        asyncio.run(client.exchange("http://a\x01b/token", REQUEST))
    assert exc.value.kind is ErrorKind.URL


def test_exchange_timeout_is_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ConsumerError) as exc:
        _exchange(handler)
    assert exc.value.kind is ErrorKind.TRANSPORT


def test_exchange_non_json_body() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    with pytest.raises(ConsumerError, match="Could not decode token response") as exc:
        _exchange(handler)
    assert exc.value.kind is ErrorKind.DECODE


def test_exchange_empty_body_is_decode_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502)

    with pytest.raises(ConsumerError) as exc:
        _exchange(handler)
    assert exc.value.kind is ErrorKind.DECODE


# ---- classification ----


def test_classify_200_is_success() -> None:
    body = {"access_token": "abc"}
    assert classify(200, body) == Success(body=body)


def test_classify_400_is_remote_rejected() -> None:
    assert classify(400, {"error": "x"}) == RemoteRejected(body={"error": "x"})


@pytest.mark.parametrize("status_code", [201, 401, 403, 500])
def test_classify_other_status(status_code: int) -> None:
    assert classify(status_code, {"error": "x"}) == OtherStatus(status_code=status_code)
