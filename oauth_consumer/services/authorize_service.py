from __future__ import annotations

import logging
from urllib.parse import SplitResult, urlencode, urlsplit, urlunsplit

from oauth_consumer.core.errors import ConsumerError, ErrorKind
from oauth_consumer.models.consumer import Consumer

logger = logging.getLogger(__name__)


def parse_url(value: str) -> SplitResult:
    """Parse an absolute URL; anything without a scheme and host is rejected.

    Surrounding whitespace is dropped, so callers should send
    `urlunsplit(parts)` rather than the raw value.
    """
    text = value.strip()
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in text):
        raise ConsumerError(ErrorKind.URL, f"{value!r}: non-printable character")
    try:
        parts = urlsplit(text)
        # .port raises ValueError on a non-numeric or out-of-range port
        _ = parts.port
    except ValueError as exc:
        raise ConsumerError(ErrorKind.URL, f"{value!r}: {exc}") from exc
    if not parts.scheme:
        raise ConsumerError(ErrorKind.URL, f"{value!r}: relative URL without a base")
    if not parts.hostname:
        raise ConsumerError(ErrorKind.URL, f"{value!r}: empty host")
    return parts


def build_authorization_url(consumer: Consumer, state: str) -> str:
    """Append the authorization request parameters to auth_url.

    Parameters are appended in a fixed order after any query the
    configured URL already carries.
    """
    if not consumer.auth_url:
        raise ConsumerError(ErrorKind.CONFIG, "No auth URL defined in configuration")
    try:
        parts = parse_url(consumer.auth_url)
    except ConsumerError as exc:
        raise ConsumerError(
            ErrorKind.URL, f"Could not parse auth URL: {exc.message}"
        ) from exc

    params = [
        ("response_type", "code"),
        ("state", state),
        ("scope", " ".join(consumer.scopes)),
        ("client_id", consumer.client_id or ""),
    ]
    if consumer.return_url:
        params.append(("redirect_uri", consumer.return_url))

    encoded = urlencode(params)
    query = f"{parts.query}&{encoded}" if parts.query else encoded
    url = urlunsplit(parts._replace(query=query))
    logger.debug(
        "Authorization URL built  auth_url=%s params=%d",
        consumer.auth_url,
        len(params),
        extra={"state_prefix": state[:8]},
    )
    return url
