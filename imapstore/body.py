"""Message headers, multipart splitting and body section extraction."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_PARAM_RE = re.compile(r'\s*([^\s=;"]+)\s*=\s*("(?:[^"\\]|\\.)*"|[^;]*?)\s*(?:;|$)')
_PARTIAL_RE = re.compile(r"<(\d+)(?:\.(\d+))?>")


def _canonical_key(key: str) -> str:
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


def _parse_media_type(value: str) -> tuple[str, dict[str, str]]:
    """Split a Content-Type style value into a lower-case type and parameters."""
    head, _, rest = value.partition(";")
    media = head.strip().lower()
    if not media:
        raise ValueError("no media type")
    if not all(_TOKEN_RE.fullmatch(piece) for piece in media.split("/", 1)):
        raise ValueError(f"invalid media type: {media!r}")
    params: dict[str, str] = {}
    while rest.strip():
        m = _PARAM_RE.match(rest)
        if m is None or m.end() == 0:
            raise ValueError("invalid media parameter")
        key, val = m.group(1).lower(), m.group(2)
        if val.startswith('"'):
            val = re.sub(r"\\(.)", r"\1", val[1:-1])
        params[key] = val.strip()
        rest = rest[m.end():]
    return media, params


@dataclass
class _Field:
    key: str
    value: str
    raw: bytes | None = None


class Header:
    """An ordered, case-insensitive collection of message header fields."""

    def __init__(self) -> None:
        self._fields: list[_Field] = []

    def get(self, key: str) -> str:
        """Return the first value of ``key``, or an empty string."""
        canonical = _canonical_key(key)
        return next((f.value for f in self._fields if _canonical_key(f.key) == canonical), "")

    def get_all(self, key: str) -> list[str]:
        """Return every value of ``key`` in order."""
        canonical = _canonical_key(key)
        return [f.value for f in self._fields if _canonical_key(f.key) == canonical]

    def has(self, key: str) -> bool:
        """Tell whether ``key`` is present."""
        canonical = _canonical_key(key)
        return any(_canonical_key(f.key) == canonical for f in self._fields)

    def add(self, key: str, value: str) -> None:
        """Append a field."""
        self._fields.append(_Field(key, value))

    def _add_raw(self, key: str, value: str, raw: bytes) -> None:
        self._fields.append(_Field(key, value, raw))

    def delete(self, key: str) -> None:
        """Remove every field named ``key``."""
        canonical = _canonical_key(key)
        self._fields = [f for f in self._fields if _canonical_key(f.key) != canonical]

    def copy(self) -> Header:
        """Return an independent copy."""
        other = Header()
        other._fields = [_Field(f.key, f.value, f.raw) for f in self._fields]
        return other

    def fields(self) -> Iterator[tuple[str, str]]:
        """Yield (canonical key, value) pairs in order."""
        for f in list(self._fields):
            yield _canonical_key(f.key), f.value

    def to_bytes(self) -> bytes:
        """Return the header as written on the wire, with the closing blank line."""
        lines = [f.raw if f.raw is not None else f"{f.key}: {f.value}\r\n".encode("utf-8") for f in self._fields]
        return b"".join(lines) + b"\r\n"

    def __len__(self) -> int:
        return len(self._fields)


def read_header(data: bytes) -> tuple[Header, bytes]:
    """Parse a header from ``data`` and return it with the remaining body."""
    header = Header()
    pos = 0
    current: _Field | None = None
    while pos < len(data):
        eol = data.find(b"\n", pos)
        end = len(data) if eol < 0 else eol + 1
        line = data[pos:end]
        pos = end
        if line in (b"\r\n", b"\n"):
            return header, data[pos:]
        text = line.decode("utf-8", errors="replace")
        if line[:1] in (b" ", b"\t") and current is not None:
            current.value += text.rstrip("\r\n")
            current.raw = (current.raw or b"") + line
            continue
        key, sep, value = text.partition(":")
        if not sep or not key.strip():
            raise ValueError(f"malformed header line: {text.rstrip()!r}")
        header._add_raw(key.strip(), value.lstrip(" \t").rstrip("\r\n"), line)
        current = header._fields[-1]
    return header, b""


def _iter_parts(body: bytes, boundary: bytes) -> Iterator[tuple[Header, bytes]]:
    delim = b"--" + boundary
    pos = 0
    while True:
        idx = body.find(delim, pos)
        if idx < 0:
            return
        if idx == 0 or body[idx - 1:idx] == b"\n":
            break
        pos = idx + 1
    while True:
        after = idx + len(delim)
        if body.startswith(b"--", after):
            return
        eol = body.find(b"\n", after)
        if eol < 0:
            return
        start = eol + 1
        nxt = body.find(b"\n" + delim, start - 1)
        if nxt < 0:
            raise ValueError("multipart: missing closing boundary")
        end = nxt - 1 if nxt > start and body[nxt - 1:nxt] == b"\r" else nxt
        yield read_header(body[start:max(end, start)])
        idx = nxt + 1


def multipart_parts(header: Header, body: bytes) -> Iterator[tuple[Header, bytes]] | None:
    """Return an iterator over the (header, body) parts, or None if not multipart."""
    content_type = header.get("Content-Type")
    if not content_type.lower().startswith("multipart/"):
        return None
    try:
        _, params = _parse_media_type(content_type)
    except ValueError:
        return None
    boundary = params.get("boundary", "")
    if not boundary:
        return None
    return _iter_parts(bytes(body), boundary.encode("utf-8"))


class NoSuchPartError(LookupError):
    """Raised when a requested message body part does not exist."""

    def __init__(self, message: str = "no such message body part") -> None:
        super().__init__(message)


class PartSpecifier(str, Enum):
    """Which piece of a body part a section refers to."""

    ENTIRE = ""
    HEADER = "HEADER"
    MIME = "MIME"
    TEXT = "TEXT"


@dataclass(frozen=True)
class BodySectionName:
    """A parsed BODY[...] fetch item."""

    specifier: PartSpecifier = PartSpecifier.ENTIRE
    path: tuple[int, ...] = ()
    fields: tuple[str, ...] | None = None
    not_fields: bool = False
    partial: tuple[int, int | None] | None = None
    peek: bool = False

    @classmethod
    def parse(cls, item: Any) -> BodySectionName:
        """Parse a fetch item such as ``BODY.PEEK[1.HEADER.FIELDS (From)]<0.10>``."""
        text = item.value if isinstance(item, Enum) else str(item)
        upper = text.upper()
        if upper.startswith("BODY.PEEK["):
            peek, rest = True, text[9:]
        elif upper.startswith("BODY["):
            peek, rest = False, text[4:]
        else:
            raise ValueError(f"not a body section name: {text!r}")
        end = rest.find("]")
        if end < 0:
            raise ValueError(f"unterminated body section name: {text!r}")
        inner, tail = rest[1:end], rest[end + 1:]

        fields: tuple[str, ...] | None = None
        if "(" in inner:
            name, _, flist = inner.partition("(")
            if not flist.endswith(")"):
                raise ValueError(f"malformed field list: {text!r}")
            fields = tuple(f.strip('"') for f in flist[:-1].split())
            name = name.strip()
        else:
            name = inner.strip()

        tokens = name.split(".") if name else []
        path: list[int] = []
        while tokens and tokens[0].isdigit():
            path.append(int(tokens.pop(0)))
        spec = ".".join(tokens).upper()

        not_fields = False
        if spec in ("HEADER.FIELDS", "HEADER.FIELDS.NOT"):
            if fields is None:
                raise ValueError(f"missing field list: {text!r}")
            specifier = PartSpecifier.HEADER
            not_fields = spec.endswith(".NOT")
        elif fields is not None:
            raise ValueError(f"unexpected field list: {text!r}")
        else:
            try:
                specifier = PartSpecifier(spec)
            except ValueError:
                raise ValueError(f"unknown part specifier: {spec!r}") from None

        partial = None
        if tail:
            m = _PARTIAL_RE.fullmatch(tail)
            if m is None:
                raise ValueError(f"malformed partial range: {tail!r}")
            partial = (int(m.group(1)), int(m.group(2)) if m.group(2) is not None else None)

        return cls(specifier, tuple(path), fields, not_fields, partial, peek)

    def extract_partial(self, data: bytes) -> bytes:
        """Return the slice of ``data`` selected by the partial range."""
        if self.partial is None:
            return data
        start, count = self.partial
        if start > len(data):
            return b""
        return data[start:] if count is None else data[start:start + count]


def fetch_body_section(header: Header, body: bytes, section: BodySectionName) -> bytes:
    """Extract a body section from a message given its header and body."""
    body = bytes(body)
    for n in section.path:
        parts = multipart_parts(header, body)
        if parts is None:
            # The first part of a non-multipart message is the message itself.
            if list(section.path) == [1]:
                break
            raise NoSuchPartError()
        if n < 1:
            raise NoSuchPartError()
        for index, (part_header, part_body) in enumerate(parts, start=1):
            if index == n:
                header, body = part_header, part_body
                break
        else:
            raise NoSuchPartError()

    res_header = header
    if section.fields is not None:
        res_header = header.copy()
        if section.not_fields:
            for name in section.fields:
                res_header.delete(name)
        else:
            wanted = {_canonical_key(name) for name in section.fields}
            for key, _ in list(res_header.fields()):
                if key not in wanted:
                    res_header.delete(key)

    out = res_header.to_bytes()
    if section.specifier is PartSpecifier.TEXT:
        out = b""
    elif section.specifier is PartSpecifier.ENTIRE and section.path:
        # A part selected by index is returned without its MIME header.
        out = b""

    if section.specifier in (PartSpecifier.ENTIRE, PartSpecifier.TEXT):
        out += body

    return section.extract_partial(out)