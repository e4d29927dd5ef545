from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Literal

LogLevel = Literal["debug", "info", "warning", "error"]

_LOG_LEVELS = ("debug", "info", "warning", "error")


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    log_level: LogLevel
    log_json: bool
    callback_host: str
    callback_port: int

    @property
    def callback_url(self) -> str:
        host = self.callback_host
        if ":" in host:
            host = f"[{host}]"
        return f"http://{host}:{self.callback_port}/return"

    def with_verbosity(self, *, verbose: bool = False, debug: bool = False) -> Settings:
        """Raise (never lower) the log level for --verbose / --debug."""
        current = _LOG_LEVELS.index(self.log_level)
        if debug:
            target = 0
        elif verbose:
            target = 1
        else:
            return self
        return replace(self, log_level=_LOG_LEVELS[min(current, target)])


def load_settings() -> Settings:
    log_level_raw = _getenv("LOG_LEVEL", "warning").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    host = _getenv("CALLBACK_HOST", "127.0.0.1")
    port_raw = _getenv("CALLBACK_PORT", "4000")

    if log_level_raw not in _LOG_LEVELS:
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    if log_json_raw not in ("true", "false", "1", "0", "yes", "no"):
        raise ValueError(f"LOG_JSON must be a boolean (got {log_json_raw!r})")

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(
            f"CALLBACK_PORT must be an integer (got {port_raw!r})"
        ) from None
    if not 0 < port < 65536:
        raise ValueError(f"CALLBACK_PORT must be in 1..65535 (got {port})")

    if not host:
        raise ValueError("CALLBACK_HOST must not be empty")

    return Settings(  # type: ignore[arg-type]
        log_level=log_level_raw,
        log_json=log_json_raw in ("true", "1", "yes"),
        callback_host=host,
        callback_port=port,
    )
