from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import dataclass, field
from importlib import metadata

from oauth_consumer.models.consumer import Consumer


def _version() -> str:
    try:
        return metadata.version("oauth2-consumer")
    except metadata.PackageNotFoundError:
        return "0.0.0+local"


@dataclass(frozen=True)
class Options:
    debug: bool = False
    verbose: bool = False
    client_id: str | None = None
    client_secret: str | None = None
    auth_url: str | None = None
    token_url: str | None = None
    return_url: str | None = None
    grant_type: str | None = None
    scopes: tuple[str, ...] = field(default_factory=tuple)
    state: str | None = None
    config: str | None = None
    passive: bool = False
    interactive: bool = False

    def overrides(self) -> Consumer:
        """The Consumer fields given on the command line."""
        return Consumer(
            client_id=self.client_id,
            client_secret=self.client_secret,
            auth_url=self.auth_url,
            token_url=self.token_url,
            return_url=self.return_url,
            grant_type=self.grant_type,
            scopes=self.scopes,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oauth2-consumer",
        description=(
            "Drive one OAuth2 authorization code flow against a service and "
            "show what its redirect and token endpoints return."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    parser.add_argument("--debug", action="store_true", help="Enable debugging mode")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    parser.add_argument(
        "--client:id", dest="client_id", help="The OAuth2 consumer client identifier"
    )
    parser.add_argument(
        "--client:secret",
        dest="client_secret",
        help="The OAuth2 consumer client secret",
    )
    parser.add_argument(
        "--url:auth", dest="auth_url", help="The OAuth2 service authorization URL"
    )
    parser.add_argument(
        "--url:token", dest="token_url", help="The OAuth2 service token URL"
    )
    parser.add_argument(
        "--url:return",
        dest="return_url",
        help=(
            "The OAuth2 consumer callback URL; when set it is also sent as"
            " redirect_uri in the authorization and token requests"
        ),
    )
    parser.add_argument(
        "--grant:type", dest="grant_type", help="The OAuth2 grant type to request"
    )
    parser.add_argument(
        "--scopes",
        action="append",
        default=[],
        help="A scope to request; repeat for several",
    )
    parser.add_argument(
        "--state",
        help=(
            "The state to use to validate the response; "
            "if no state is provided, random state will be used"
        ),
    )
    parser.add_argument("--config", help="The OAuth2 consumer configuration (YAML)")
    parser.add_argument(
        "--passive",
        action="store_true",
        help="Wait for a response but do not initiate the OAuth2 flow",
    )
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Prompt for interactive confirmation",
    )
    return parser


def parse_options(argv: Sequence[str] | None = None) -> Options:
    ns = build_parser().parse_args(argv)
    return Options(
        debug=ns.debug,
        verbose=ns.verbose,
        client_id=ns.client_id,
        client_secret=ns.client_secret,
        auth_url=ns.auth_url,
        token_url=ns.token_url,
        return_url=ns.return_url,
        grant_type=ns.grant_type,
        scopes=tuple(ns.scopes),
        state=ns.state,
        config=ns.config,
        passive=ns.passive,
        interactive=ns.interactive,
    )
