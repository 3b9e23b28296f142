"""Markup helpers for audit messages.

Messages are stored as small HTML fragments (bold labels, line breaks and
editor links) so the admin list can render them directly. Every value that
comes from the host is escaped here, never by the callers.
"""

import html
import json
import re
from typing import Any

LINE_BREAK = "<br/>"
EMPTY_VALUE = '""'

_TAG_RE = re.compile(r"<[^>]+>")


def esc(value: Any) -> str:
    """Escape a value for inclusion in message markup."""
    return html.escape("" if value is None else str(value), quote=True)


def bold(value: Any) -> str:
    return f"<b>{esc(value)}</b>"


def link(url: str | None, text: Any) -> str:
    """Render an editor link; falls back to plain escaped text without a URL."""
    if not url:
        return esc(text)
    return f'<a href="{esc(url)}" target="_blank">{esc(text)}</a>'


def bold_link(url: str | None, text: Any) -> str:
    return f"<b>{link(url, text)}</b>"


def labelled(label: str, value: Any) -> str:
    """Render ``Label: <b>value</b>``."""
    return f"{label}: {bold(value)}"


def join_lines(lines: list[str], separator: str = LINE_BREAK) -> str:
    return separator.join(line for line in lines if line)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def render_value(value: Any) -> str:
    """Render a diffed value, using an explicit "" for null or empty."""
    if is_blank(value):
        return EMPTY_VALUE
    if isinstance(value, (list, tuple, dict)):
        return esc(json.dumps(value, default=str, sort_keys=isinstance(value, dict)))
    if isinstance(value, bool):
        return "true" if value else "false"
    return esc(value)


def strip_markup(message: str) -> str:
    """Flatten message markup to plain text (line breaks become ' | ')."""
    text = message.replace(LINE_BREAK, " | ")
    return html.unescape(_TAG_RE.sub("", text))


def preview(message: str, max_length: int) -> str:
    """Plain-text preview of a message for list views."""
    text = strip_markup(message)
    if len(text) <= max_length:
        return text
    return text[: max(max_length - 3, 0)].rstrip() + "..."
