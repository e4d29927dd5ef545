"""Browser-facing pages returned by the callback listener.

Inline HTML keeps this a handful of format strings; every dynamic value
goes through html.escape.
"""

from __future__ import annotations

import html
import json
from typing import Any

_PAGE_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{title} — oauth2-consumer</title>
  <style>
    body {{ font-family: system-ui, -apple-system, sans-serif; margin: 2rem; }}
    td {{ font-size: 1.2em; padding: .2rem .6rem; vertical-align: top; }}
    td.key {{ font-weight: 700; text-align: right; }}
    code {{ word-break: break-all; }}
  </style>
</head>
<body>
  <h1>{title}</h1>
  {body}
</body>
</html>
"""

_ROW_HTML = (
    '    <tr>\n'
    '      <td class="key"><code>{key}</code></td>\n'
    '      <td><code>{value}</code></td>\n'
    '    </tr>'
)


def _cell(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


def _rows(payload: Any) -> list[tuple[str, str]]:
    if isinstance(payload, dict):
        return [(str(k), _cell(v)) for k, v in payload.items()]
    if isinstance(payload, list):
        return [(str(i), _cell(v)) for i, v in enumerate(payload)]
    return [("", _cell(payload))]


def _table(payload: Any) -> str:
    rows = "\n".join(
        _ROW_HTML.format(key=html.escape(k), value=html.escape(v))
        for k, v in _rows(payload)
    )
    return f"<table>\n{rows}\n  </table>"


def render_response(payload: Any) -> str:
    return _PAGE_HTML.format(title="Connection created", body=_table(payload))


def render_error_detail(payload: Any) -> str:
    return _PAGE_HTML.format(title="An error occurred", body=_table(payload))


def render_error(message: str) -> str:
    return _PAGE_HTML.format(
        title="An error occurred", body=f"<p>{html.escape(message)}</p>"
    )
