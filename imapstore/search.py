"""Matching messages against IMAP search criteria."""

from __future__ import annotations

import base64
import binascii
import quopri
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from email.utils import parsedate_to_datetime

from imapstore.body import Header, _parse_media_type, read_header

_EPOCH_ZERO = datetime(1, 1, 1, tzinfo=timezone.utc)


@dataclass
class SeqSet:
    """A set of message numbers; 0 stands for "*", the largest number in use."""

    ranges: list[tuple[int, int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        given = list(self.ranges)
        self.ranges = []
        for start, stop in given:
            self.add_range(start, stop)

    def add_range(self, start: int, stop: int) -> None:
        """Add the numbers from ``start`` to ``stop`` inclusive, in either order."""
        if start < 0 or stop < 0:
            raise ValueError("sequence numbers cannot be negative")
        if stop != 0 and (start == 0 or start > stop):
            start, stop = stop, start
        self.ranges.append((start, stop))

    def add_num(self, *args: int) -> None:
        """Add single numbers."""
        for num in args:
            self.add_range(num, num)

    def contains(self, num: int) -> bool:
        """Tell whether ``num`` is in the set."""
        return any(_seq_contains(start, stop, num) for start, stop in self.ranges)

    def __contains__(self, num: object) -> bool:
        return isinstance(num, int) and self.contains(num)


def _seq_contains(start: int, stop: int, num: int) -> bool:
    if num == 0:
        # "*" is only contained in "*" and "n:*".
        return stop == 0
    if start != 0:
        return start <= num and (num <= stop or stop == 0)
    return num <= stop


@dataclass
class SearchCriteria:
    """Search criteria; every criterion set must match (logical AND)."""

    seq_num: SeqSet | None = None
    uid: SeqSet | None = None
    since: datetime | None = None
    before: datetime | None = None
    sent_since: datetime | None = None
    sent_before: datetime | None = None
    header: dict[str, list[str]] = field(default_factory=dict)
    body: list[str] = field(default_factory=list)
    text: list[str] = field(default_factory=list)
    with_flags: list[str] = field(default_factory=list)
    without_flags: list[str] = field(default_factory=list)
    larger: int = 0
    smaller: int = 0
    not_: list[SearchCriteria] = field(default_factory=list)
    or_: list[tuple[SearchCriteria, SearchCriteria]] = field(default_factory=list)


def _decode_text(value: str) -> str:
    """Decode RFC 2047 encoded words; raises on malformed encodings."""
    return str(make_header(decode_header(value)))


def _decode_body(header: Header, raw: bytes) -> bytes:
    encoding = header.get("Content-Transfer-Encoding").strip().lower()
    data = raw
    try:
        if encoding == "quoted-printable":
            data = quopri.decodestring(raw)
        elif encoding == "base64":
            data = base64.b64decode(b"".join(raw.split()), validate=False)
    except (ValueError, binascii.Error):
        data = raw
    try:
        media, params = _parse_media_type(header.get("Content-Type"))
    except ValueError:
        return data
    charset = params.get("charset", "").lower()
    if media.startswith("text/") and charset not in ("", "utf-8", "us-ascii"):
        try:
            data = data.decode(charset).encode("utf-8")
        except (LookupError, UnicodeDecodeError):
            pass
    return data


@dataclass
class Entity:
    """A message: its header and its transfer-decoded body."""

    header: Header
    body: bytes = b""

    @classmethod
    def from_bytes(cls, data: bytes) -> Entity:
        """Read a message, decoding its body's transfer encoding and charset."""
        header, raw = read_header(bytes(data))
        return cls(header, _decode_body(header, raw))

    def text(self) -> str:
        """Return the body as text."""
        return self.body.decode("utf-8", errors="replace")

    def size(self) -> int:
        """Return the size of the header plus the body in octets."""
        return len(self.header.to_bytes()) + len(self.body)


def _contains_fold(text: str, substr: str) -> bool:
    return substr.lower() in text.lower()


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _day(dt: datetime) -> datetime:
    # Dates are compared without their zone, as the protocol requires.
    return datetime(dt.year, dt.month, dt.day, tzinfo=timezone.utc)


def _sent_date(header: Header) -> datetime:
    value = header.get("Date")
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is None:
        raise ValueError(f"invalid or missing Date header: {value!r}")
    return parsed


def _match_header(entity: Entity, criteria: SearchCriteria) -> bool:
    for key, wanted in criteria.header.items():
        present = entity.header.has(key)
        for want in wanted:
            if want == "":
                if not present:
                    return False
                continue
            found = False
            for value in entity.header.get_all(key):
                try:
                    decoded = _decode_text(value)
                except (HeaderParseError, LookupError, UnicodeError, ValueError):
                    decoded = value
                if _contains_fold(decoded, want):
                    found = True
                    break
            if not found:
                return False
    return True


def _match_text(entity: Entity, text: str) -> bool:
    header_match = False
    for key, value in entity.header.fields():
        try:
            decoded = _decode_text(value)
        except (HeaderParseError, LookupError, UnicodeError, ValueError):
            continue
        if text in f"{key}: {decoded}":
            header_match = True
    return _contains_fold(entity.text(), text) or header_match


def _match_flags(flags: Iterable[str], criteria: SearchCriteria) -> bool:
    present = set(flags)
    return all(f in present for f in criteria.with_flags) and not any(
        f in present for f in criteria.without_flags
    )


def _match_date(date: datetime | None, criteria: SearchCriteria) -> bool:
    day = _day(date) if date is not None else _EPOCH_ZERO
    if criteria.since is not None and not day > _aware(criteria.since):
        return False
    if criteria.before is not None and not day < _aware(criteria.before):
        return False
    return True


def match(
    entity: Entity,
    seq_num: int,
    uid: int,
    date: datetime | None,
    flags: Iterable[str] | None,
    criteria: SearchCriteria,
) -> bool:
    """Tell whether a message and its metadata match ``criteria``.

    Raises ValueError when a sent-date criterion is given and the message
    has no valid Date header.
    """
    flags = list(flags or [])

    if criteria.sent_before is not None or criteria.sent_since is not None:
        sent = _day(_sent_date(entity.header))
        if criteria.sent_before is not None and not sent < _aware(criteria.sent_before):
            return False
        if criteria.sent_since is not None and sent < _aware(criteria.sent_since):
            return False

    if not _match_header(entity, criteria):
        return False

    if not all(_contains_fold(entity.text(), body) for body in criteria.body):
        return False

    if not all(_match_text(entity, text) for text in criteria.text):
        return False

    if criteria.larger > 0 or criteria.smaller > 0:
        size = entity.size()
        if criteria.larger > 0 and size <= criteria.larger:
            return False
        if criteria.smaller > 0 and size >= criteria.smaller:
            return False

    if criteria.since is not None or criteria.before is not None:
        if not _match_date(date, criteria):
            return False

    if not _match_flags(flags, criteria):
        return False

    if criteria.seq_num is not None and not criteria.seq_num.contains(seq_num):
        return False
    if criteria.uid is not None and not criteria.uid.contains(uid):
        return False

    for negated in criteria.not_:
        if match(entity, seq_num, uid, date, flags, negated):
            return False

    for left, right in criteria.or_:
        ok_left = match(entity, seq_num, uid, date, flags, left)
        ok_right = match(entity, seq_num, uid, date, flags, right)
        if not ok_left and not ok_right:
            return False

    return True