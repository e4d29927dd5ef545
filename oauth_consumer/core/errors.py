"""Error taxonomy for the consumer.

Every failure the tool can report is a ConsumerError tagged with one
ErrorKind.  The set of kinds is closed: callers branch on ``err.kind``
rather than on exception subclasses, and every kind renders the same way
(``str(err)`` is the operator-facing message).

Which kinds end the process depends on WHEN they happen:

  - before the listener starts (CONFIG, IO, YAML, URL, CANCELED, BROWSER)
    the run aborts with exit code 1
  - while handling a callback (URL, ENCODE, TRANSPORT, DECODE) the error
    is rendered to the browser and the listener keeps waiting
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONFIG = "config"
    IO = "io"
    YAML = "yaml"
    URL = "url"
    ENCODE = "encode"
    TRANSPORT = "transport"
    DECODE = "decode"
    BROWSER = "browser"
    CANCELED = "canceled"


class ConsumerError(Exception):
    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ConsumerError({self.kind.value}, {self.message!r})"
