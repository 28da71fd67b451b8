"""Quoting of strings for diagnostic messages."""

from __future__ import annotations

_ESCAPES = {
    ord("\n"): "\\n",
    ord("\r"): "\\r",
    ord("\t"): "\\t",
}


def quote(text: str | bytes) -> str:
    """Return text in double quotes, escaping quotes, backslashes and
    non-printable bytes.

    Strings are encoded as UTF-8 first, so every byte outside printable
    ASCII is written as a hexadecimal escape.
    """
    data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
    parts = ['"']
    for byte in data:
        if 32 <= byte <= 126:
            char = chr(byte)
            parts.append("\\" + char if char in '"\\' else char)
        else:
            parts.append(_ESCAPES.get(byte, f"\\x{byte:02x}"))
    parts.append('"')
    return "".join(parts)