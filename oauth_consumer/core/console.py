from __future__ import annotations

from rich.console import Console
from rich.markup import escape as rich_escape

# Operator-facing output shares stderr with the logs; stdout carries only
# the token endpoint payload.
console = Console(stderr=True, highlight=False)


def announce_url(url: str) -> None:
    console.print(
        "\nOpening the OAuth2 flow in your browser. "
        "If your browser doesn't open, visit the link manually:"
    )
    console.print(f"    ➤ [link={url}]{rich_escape(url)}[/link]\n")


def announce_token_request(url: str) -> None:
    console.print(f"\nRequesting token from:\n    ➤ {rich_escape(url)}\n")


def announce_waiting(callback_url: str) -> None:
    console.print(
        f"Waiting for a response from the service on {rich_escape(callback_url)} ..."
    )


def report_error(message: str) -> None:
    console.print(f"[bold yellow]* * * {rich_escape(message)}[/bold yellow]")


def confirm(
    prompt: str = "Initiate the OAuth2 flow? [y/N] ", expect: str = "y"
) -> bool:
    """Ask a yes/no question; only an explicit *expect* answer confirms."""
    answer = console.input(f"\n{rich_escape(prompt)}")
    return answer.strip().lower() == expect
