from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import oauth_consumer` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from oauth_consumer.api.callback import CallbackFlow, create_callback_app  # noqa: E402
from oauth_consumer.models.consumer import Consumer  # noqa: E402
from oauth_consumer.services.shutdown import ShutdownSignal  # noqa: E402
from oauth_consumer.services.token_exchange import TokenExchangeClient  # noqa: E402

TokenHandler = Callable[[httpx.Request], httpx.Response]


def _issue_token(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"access_token": "abc"})


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """setup_logging() replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def consumer() -> Consumer:
    return Consumer(
        client_id="test-client",
        client_secret="test-secret",
        auth_url="https://auth.example.com/oauth/authorize",
        token_url="https://auth.example.com/oauth/token",
        scopes=("openid", "profile"),
    )


@pytest.fixture
def make_flow(consumer: Consumer) -> Callable[..., CallbackFlow]:
    """Factory for a CallbackFlow whose token endpoint is served by *handler*."""

    def factory(
        handler: TokenHandler = _issue_token,
        *,
        consumer: Consumer = consumer,
        state: str = "XYZ",
    ) -> CallbackFlow:
        return CallbackFlow(
            consumer=consumer,
            state=state,
            signal=ShutdownSignal(),
            exchange_client=TokenExchangeClient(
                transport=httpx.MockTransport(handler)
            ),
        )

    return factory


@pytest.fixture
def make_client() -> Callable[[CallbackFlow], TestClient]:
    def factory(flow: CallbackFlow) -> TestClient:
        return TestClient(create_callback_app(flow))

    return factory
