"""Resolve the Consumer for a run.

Precedence is decided per FIELD, not per record: a command-line override
wins when present, otherwise the config file value is used, otherwise the
field stays unset.  Scopes are the one list-valued field: a non-empty
command-line list replaces the file's list wholesale.
"""

from __future__ import annotations

import logging
from dataclasses import fields

from oauth_consumer.core.errors import ConsumerError, ErrorKind
from oauth_consumer.models.consumer import Consumer

logger = logging.getLogger(__name__)


def merge_config(overrides: Consumer, conf: Consumer) -> Consumer:
    values: dict[str, object] = {}
    for f in fields(Consumer):
        override = getattr(overrides, f.name)
        if f.name == "scopes":
            values[f.name] = override if override else conf.scopes
        else:
            values[f.name] = override if override is not None else getattr(conf, f.name)
    return Consumer(**values)  # type: ignore[arg-type]


def validate_consumer(consumer: Consumer) -> None:
    """Fail before any network activity if the run cannot even start.

    client_secret and token_url are deliberately not checked here; they
    only matter once a callback reaches the exchange step.
    """
    if not consumer.scopes:
        raise ConsumerError(ErrorKind.CONFIG, "No scopes are requested")
    if not consumer.auth_url:
        raise ConsumerError(ErrorKind.CONFIG, "No auth URL defined in configuration")
    if not consumer.client_id:
        raise ConsumerError(ErrorKind.CONFIG, "No client ID defined in configuration")


def resolve_consumer(overrides: Consumer, config_path: str | None) -> Consumer:
    conf = Consumer.read(config_path) if config_path else Consumer.empty()
    consumer = merge_config(overrides, conf)
    validate_consumer(consumer)
    logger.info(
        "Configuration resolved  config=%s client_id=%s scopes=%s "
        "token_url=%s secret=%s",
        config_path or "-",
        consumer.client_id,
        " ".join(consumer.scopes),
        consumer.token_url or "-",
        "set" if consumer.client_secret else "unset",
    )
    return consumer
