from __future__ import annotations

import secrets
import string

# The state token correlates the callback with this run (anti-CSRF).
# It is not a long-lived secret, but it must not be guessable while the
# listener is up.

STATE_LENGTH = 64
_ALPHABET = string.ascii_letters + string.digits


def generate_state(length: int = STATE_LENGTH) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def resolve_state(explicit: str | None) -> str:
    # An operator-supplied value is used verbatim, no charset/length checks.
    if explicit is not None:
        return explicit
    return generate_state()


def state_matches(received: str, expected: str) -> bool:
    return received.encode("utf-8") == expected.encode("utf-8")
