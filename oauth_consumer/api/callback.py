from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from urllib.parse import urlunsplit

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.responses import HTMLResponse

from oauth_consumer.api.render import render_error, render_error_detail, render_response
from oauth_consumer.core import console
from oauth_consumer.core.errors import ConsumerError
from oauth_consumer.models.consumer import Consumer
from oauth_consumer.models.exchange import (
    DEFAULT_GRANT_TYPE,
    RemoteRejected,
    Success,
    TokenExchangeRequest,
)
from oauth_consumer.services import state_service
from oauth_consumer.services.authorize_service import parse_url
from oauth_consumer.services.shutdown import ShutdownSignal
from oauth_consumer.services.token_exchange import TokenExchangeClient, classify

# ---------------------------------------------------------------------------
# Callback listener: receives the authorization server's redirect.
#
#   GET /return?code=...&state=...   (or ?error=...)
#
# Every local validation failure and every failed exchange call is answered
# with an error page and the listener KEEPS RUNNING, so the operator can retry
# from the browser.  Only a structurally complete exchange (any HTTP status
# with a JSON body) fires the shutdown signal.
#
# Known limitation: with a persistently unreachable token endpoint nothing
# ever fires the signal; the operator has to interrupt the process.
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)

router = APIRouter(tags=["callback"])

CALLBACK_PATH = "/return"


@dataclass
class CallbackFlow:
    """Per-run state the listener validates against (read-only after start)."""

    consumer: Consumer
    state: str
    signal: ShutdownSignal
    exchange_client: TokenExchangeClient = field(default_factory=TokenExchangeClient)


def _reject(message: str, status_code: int) -> HTMLResponse:
    logger.warning(
        "CALLBACK rejected  status=%d reason=%s",
        status_code,
        message,
        extra={"status_code": status_code},
    )
    return HTMLResponse(render_error(message), status_code=status_code)


# ========================== GET /return ====================================


@router.get(CALLBACK_PATH, response_class=HTMLResponse)
async def receive_callback(request: Request) -> HTMLResponse:
    flow: CallbackFlow = request.app.state.flow
    query = request.query_params
    logger.info("CALLBACK step 1: request received  keys=%s", sorted(query.keys()))

    # --- Remote-signalled error -------------------------------------------------
    error = query.get("error")
    if error is not None:
        message = f"An error occurred: {error}"
        description = query.get("error_description")
        if description:
            message = f"{message} ({description})"
        return _reject(message, status.HTTP_400_BAD_REQUEST)

    # --- State check ------------------------------------------------------------
    received_state = query.get("state")
    if received_state is None:
        return _reject("No state provided", status.HTTP_400_BAD_REQUEST)
    if not state_service.state_matches(received_state, flow.state):
        return _reject("State mismatch", status.HTTP_400_BAD_REQUEST)
    logger.info(
        "CALLBACK step 2: state matches  ✓", extra={"state_prefix": flow.state[:8]}
    )

    # --- Exchange prerequisites -------------------------------------------------
    consumer = flow.consumer
    if not consumer.token_url:
        return _reject(
            "No token URL defined in configuration",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    code = query.get("code")
    if code is None:
        return _reject("No authorization code provided", status.HTTP_400_BAD_REQUEST)
    try:
        token_url = urlunsplit(parse_url(consumer.token_url))
    except ConsumerError as exc:
        return _reject(
            f"Could not parse token URL: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    if consumer.client_secret is None:
        return _reject(
            "No client secret defined in configuration",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    logger.info("CALLBACK step 3: authorization code received  ✓")

    # --- Token exchange ---------------------------------------------------------
    exchange_request = TokenExchangeRequest(
        grant_type=consumer.grant_type or DEFAULT_GRANT_TYPE,
        code=code,
        client_id=consumer.client_id or "",
        client_secret=consumer.client_secret,
        redirect_uri=consumer.return_url,
    )
    console.announce_token_request(token_url)
    try:
        status_code, payload = await flow.exchange_client.exchange(
            token_url, exchange_request
        )
    except ConsumerError as exc:
        return _reject(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

    # The raw payload goes to stdout whatever the status.
    print(json.dumps(payload), flush=True)

    outcome = classify(status_code, payload)
    if isinstance(outcome, Success):
        logger.info("CALLBACK step 4: token issued  ✓")
        response = HTMLResponse(
            render_response(outcome.body), status_code=status.HTTP_200_OK
        )
    elif isinstance(outcome, RemoteRejected):
        logger.warning("CALLBACK step 4: token endpoint rejected the exchange")
        response = HTMLResponse(
            render_error_detail(outcome.body), status_code=status.HTTP_401_UNAUTHORIZED
        )
    else:
        logger.warning(
            "CALLBACK step 4: token endpoint answered  status=%d",
            outcome.status_code,
            extra={"status_code": outcome.status_code},
        )
        response = HTMLResponse(
            render_error(f"Request failed with status: {outcome.status_code}"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    flow.signal.fire()
    return response


def create_callback_app(flow: CallbackFlow) -> FastAPI:
    app = FastAPI(
        title="oauth2-consumer callback",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.flow = flow
    app.include_router(router)
    return app
