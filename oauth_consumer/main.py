"""Flow orchestrator — one OAuth2 authorization code run per invocation.

RUN:  oauth2-consumer --config consumer.yaml
      python -m oauth_consumer --url:auth ... --client:id ... --scopes openid

THE RUN
--------
  1. Resolve the Consumer (config file + command-line overrides) and fail
     fast if auth_url, client_id or scopes are missing.
  2. Create the state token and the authorization URL.  Both are fixed
     for the rest of the run.
  3. Unless --passive: show the URL and, with --interactive, ask before
     going any further.  Declining aborts before the port is bound.
  4. Bind the callback port and start the listener.
  5. Unless --passive: open the URL in the default browser.
  6. Wait for the listener's one-shot shutdown signal, then stop it.

There is no timeout on step 6: if the remote never completes the flow the
operator interrupts the process.
"""

from __future__ import annotations

import asyncio
import logging
import socket
import webbrowser
from collections.abc import Callable, Sequence

import uvicorn

from oauth_consumer.api.callback import CallbackFlow, create_callback_app
from oauth_consumer.cli import Options, parse_options
from oauth_consumer.core import console
from oauth_consumer.core.config import Settings, load_settings
from oauth_consumer.core.errors import ConsumerError, ErrorKind
from oauth_consumer.core.logging import setup_logging
from oauth_consumer.services.authorize_service import build_authorization_url
from oauth_consumer.services.config_service import resolve_consumer
from oauth_consumer.services.shutdown import ShutdownSignal
from oauth_consumer.services.state_service import resolve_state
from oauth_consumer.services.token_exchange import TokenExchangeClient

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def bind_listener(host: str, port: int) -> socket.socket:
    """Bind and listen on the callback port.

    Listening before uvicorn starts means a redirect that races the
    server startup is queued by the kernel instead of refused.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
        sock.listen(128)
    except OSError as exc:
        sock.close()
        raise ConsumerError(
            ErrorKind.IO,
            f"Could not bind callback listener on {host}:{port}: {exc.strerror or exc}",
        ) from exc
    return sock


async def _confirm(confirm: Callable[[], bool]) -> None:
    try:
        accepted = await asyncio.to_thread(confirm)
    except EOFError as exc:
        raise ConsumerError(ErrorKind.IO, "Could not read confirmation") from exc
    if not accepted:
        raise ConsumerError(ErrorKind.CANCELED, "Canceled")


async def _open_browser(open_browser: Callable[[str], bool], url: str) -> None:
    try:
        opened = await asyncio.to_thread(open_browser, url)
    except webbrowser.Error as exc:
        raise ConsumerError(
            ErrorKind.BROWSER, f"Could not open browser: {exc}"
        ) from exc
    if not opened:
        raise ConsumerError(ErrorKind.BROWSER, "Could not open browser")


async def run(
    options: Options,
    settings: Settings,
    *,
    exchange_client: TokenExchangeClient | None = None,
    open_browser: Callable[[str], bool] = webbrowser.open,
    confirm: Callable[[], bool] = console.confirm,
) -> int:
    consumer = resolve_consumer(options.overrides(), options.config)
    state = resolve_state(options.state)
    auth_url = build_authorization_url(consumer, state)
    logger.info(
        "Run prepared  passive=%s interactive=%s callback=%s",
        options.passive,
        options.interactive,
        settings.callback_url,
        extra={"state_prefix": state[:8]},
    )

    if not options.passive:
        console.announce_url(auth_url)
        if options.interactive:
            await _confirm(confirm)

    signal = ShutdownSignal()
    flow = CallbackFlow(
        consumer=consumer,
        state=state,
        signal=signal,
        exchange_client=exchange_client or TokenExchangeClient(),
    )
    app = create_callback_app(flow)

    sock = bind_listener(settings.callback_host, settings.callback_port)
    server = uvicorn.Server(
        uvicorn.Config(app, log_config=None, lifespan="off", access_log=False)
    )
    server_task = asyncio.create_task(server.serve(sockets=[sock]))
    logger.info("Callback listener started  url=%s", settings.callback_url)

    try:
        if not options.passive:
            await _open_browser(open_browser, auth_url)

        console.announce_waiting(settings.callback_url)
        waiter = asyncio.create_task(signal.wait())
        done, _ = await asyncio.wait(
            {waiter, server_task}, return_when=asyncio.FIRST_COMPLETED
        )
        if waiter not in done:
            waiter.cancel()
            # uvicorn sets should_exit itself when it receives SIGINT/SIGTERM
            if server.should_exit:
                raise ConsumerError(
                    ErrorKind.CANCELED,
                    "Callback listener interrupted before the flow completed",
                )
            raise ConsumerError(ErrorKind.IO, "Callback listener stopped unexpectedly")
    finally:
        server.should_exit = True
        await server_task
        sock.close()

    logger.info("Callback listener stopped")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    options = parse_options(argv)
    try:
        settings = load_settings().with_verbosity(
            verbose=options.verbose, debug=options.debug
        )
    except ValueError as exc:
        console.report_error(str(exc))
        return EXIT_ERROR

    setup_logging(settings.log_level, json_format=settings.log_json)

    try:
        return asyncio.run(run(options, settings))
    except ConsumerError as exc:
        logger.debug("Run aborted  kind=%s", exc.kind.value)
        console.report_error(str(exc))
        return EXIT_ERROR
    except KeyboardInterrupt:
        console.report_error("Interrupted")
        return EXIT_INTERRUPTED
