from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from oauth_consumer.core.errors import ConsumerError, ErrorKind

# YAML key -> attribute name
_FIELDS = {
    "client-id": "client_id",
    "client-secret": "client_secret",
    "auth-url": "auth_url",
    "token-url": "token_url",
    "return-url": "return_url",
    "grant-type": "grant_type",
}


@dataclass(frozen=True, slots=True)
class Consumer:
    client_id: str | None = None
    client_secret: str | None = None
    auth_url: str | None = None
    token_url: str | None = None
    return_url: str | None = None
    grant_type: str | None = None
    scopes: tuple[str, ...] = ()

    @staticmethod
    def empty() -> Consumer:
        return Consumer()

    @staticmethod
    def from_mapping(data: dict[str, Any]) -> Consumer:
        """Build a Consumer from a parsed config document.

        Unknown keys are ignored; scalar values are stringified so that an
        unquoted numeric client id still works.
        """
        values: dict[str, Any] = {}
        for key, attr in _FIELDS.items():
            raw = data.get(key)
            if raw is not None:
                values[attr] = str(raw)

        scopes = data.get("scopes")
        if scopes is None:
            scopes = []
        if not isinstance(scopes, list) or not all(
            isinstance(s, str) for s in scopes
        ):
            raise ConsumerError(
                ErrorKind.YAML, "Configuration field 'scopes' must be a list of strings"
            )
        values["scopes"] = tuple(scopes)
        return Consumer(**values)

    @staticmethod
    def read(path: str | Path) -> Consumer:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            reason = exc.strerror or exc
            raise ConsumerError(
                ErrorKind.IO, f"Could not read configuration {path}: {reason}"
            ) from exc

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConsumerError(
                ErrorKind.YAML, f"Could not parse configuration {path}: {exc}"
            ) from exc

        if data is None:
            return Consumer.empty()
        if not isinstance(data, dict):
            raise ConsumerError(
                ErrorKind.YAML, f"Configuration {path} must be a mapping of fields"
            )
        return Consumer.from_mapping(data)
