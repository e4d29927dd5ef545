from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

DEFAULT_GRANT_TYPE = "code"


@dataclass(frozen=True, slots=True)
class TokenExchangeRequest:
    grant_type: str
    code: str
    client_id: str
    client_secret: str
    redirect_uri: str | None = None

    def form_pairs(self) -> list[tuple[str, str]]:
        pairs = [
            ("grant_type", self.grant_type),
            ("code", self.code),
            ("client_id", self.client_id),
            ("client_secret", self.client_secret),
        ]
        if self.redirect_uri is not None:
            pairs.append(("redirect_uri", self.redirect_uri))
        return pairs


# ---------------------------------------------------------------------------
# ExchangeOutcome: what a structurally complete token exchange produced.
# Computing any of these ends the run.
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Success:
    body: Any
    status_code: int = 200


@dataclass(frozen=True, slots=True)
class RemoteRejected:
    body: Any
    status_code: int = 400


@dataclass(frozen=True, slots=True)
class OtherStatus:
    status_code: int


ExchangeOutcome = Union[Success, RemoteRejected, OtherStatus]
