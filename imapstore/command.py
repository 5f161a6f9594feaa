"""IMAP commands and their wire form."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any


class RawString(str):
    """A string written to the wire as-is, without quoting."""


class CommandParseError(ValueError):
    """Raised when fields do not form a valid command."""


def _literal(data: bytes) -> bytes:
    return b"{%d}\r\n" % len(data) + data


def _format_string(value: str) -> bytes:
    if any(ord(ch) > 0x7F or ch in "\r\n\0" for ch in value):
        return _literal(value.encode("utf-8"))
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return b'"' + escaped.encode("ascii") + b'"'


def _format_field(value: Any) -> bytes:
    if value is None:
        return b"NIL"
    if isinstance(value, RawString):
        return value.encode("utf-8")
    if isinstance(value, bool):
        raise TypeError("cannot format a boolean as an IMAP field")
    if isinstance(value, int):
        return str(value).encode("ascii")
    if isinstance(value, str):
        return _format_string(value)
    if isinstance(value, (bytes, bytearray)):
        return _literal(bytes(value))
    if isinstance(value, (list, tuple)):
        return b"(" + b" ".join(_format_field(item) for item in value) + b")"
    raise TypeError(f"cannot format {type(value).__name__} as an IMAP field")


@dataclass
class Command:
    """A command: a tag, a name and arguments. An empty tag means untagged."""

    tag: str = ""
    name: str = ""
    arguments: list[Any] = field(default_factory=list)

    def command(self) -> Command:
        """Return this command."""
        return self

    def to_line(self) -> bytes:
        """Return the command as a CRLF-terminated line of bytes."""
        fields = [RawString(self.tag or "*"), RawString(self.name), *self.arguments]
        return b" ".join(_format_field(f) for f in fields) + b"\r\n"

    @classmethod
    def from_fields(cls, fields: Sequence[Any]) -> Command:
        """Build a command from parsed fields: tag, name, then arguments."""
        if len(fields) < 2:
            raise CommandParseError("cannot parse command: not enough fields")
        tag, name = fields[0], fields[1]
        if not isinstance(tag, str):
            raise CommandParseError("cannot parse command: invalid tag")
        if not isinstance(name, str):
            raise CommandParseError("cannot parse command: invalid name")
        # Command names are case-insensitive.
        return cls(tag=str(tag), name=str(name).upper(), arguments=list(fields[2:]))