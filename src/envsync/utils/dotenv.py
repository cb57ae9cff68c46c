"""Dotenv text codec.

Files hold ``KEY="value"`` lines. Reading ignores blank lines and ``#``
comments, splits on the first ``=`` and strips one leading and one trailing
double quote from the value.

Inside double quotes, backslash, double quote, line feed and carriage return
are written as ``\\\\``, ``\\"``, ``\\n`` and ``\\r``, the same escapes
``vercel env pull`` emits, so every value fits on one line and survives a
write/read. Unquoted values are taken literally.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r"}
_ESCAPE_RE = re.compile(r'[\\"\n\r]')
_UNESCAPE_RE = re.compile(r'\\([\\"nr])')


def parse_env_content(content: str) -> dict[str, str]:
    """Parse dotenv content into a mapping.

    Args:
        content: Raw file content.

    Returns:
        Mapping of key to unquoted value, in file order.
    """
    env_vars: dict[str, str] = {}
    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, rest = stripped.partition("=")
        key = key.strip()
        if not key or not sep:
            continue
        env_vars[key] = _unquote(rest.strip())
    return env_vars


def _unquote(value: str) -> str:
    if not value.startswith('"'):
        return value[:-1] if value.endswith('"') else value
    value = value[1:]
    # An escaped closing quote belongs to the value
    if value.endswith('"') and not _ends_with_escape(value[:-1]):
        value = value[:-1]
    return _UNESCAPE_RE.sub(lambda m: _UNESCAPES[m.group(1)], value)


def _ends_with_escape(value: str) -> bool:
    backslashes = len(value) - len(value.rstrip("\\"))
    return backslashes % 2 == 1


def serialize_env(env_vars: Mapping[str, str]) -> str:
    """Serialize a mapping as ``KEY="value"`` lines with a trailing newline."""
    return "".join(
        f'{key}="{_ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(0)], value)}"\n'
        for key, value in env_vars.items()
    )
