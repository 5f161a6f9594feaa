"""A message kept in memory."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from imapstore.body import BodySectionName, Header, NoSuchPartError, fetch_body_section, read_header
from imapstore.bodystructure import BodyStructure, fetch_body_structure
from imapstore.envelope import Envelope, fetch_envelope
from imapstore.search import Entity, SearchCriteria, match


class FetchItem(str, Enum):
    """A message data item that can be fetched."""

    BODY = "BODY"
    BODY_STRUCTURE = "BODYSTRUCTURE"
    ENVELOPE = "ENVELOPE"
    FLAGS = "FLAGS"
    INTERNAL_DATE = "INTERNALDATE"
    RFC822_SIZE = "RFC822.SIZE"
    UID = "UID"


def _normalize(item: Any) -> Any:
    if isinstance(item, FetchItem):
        return item
    try:
        return FetchItem(item)
    except ValueError:
        return item


@dataclass
class FetchedMessage:
    """The data fetched for one message; ``items`` lists what was requested."""

    seq_num: int = 0
    items: dict[Any, None] = field(default_factory=dict)
    envelope: Envelope | None = None
    body_structure: BodyStructure | None = None
    flags: list[str] = field(default_factory=list)
    internal_date: datetime | None = None
    size: int = 0
    uid: int = 0
    body: dict[BodySectionName, bytes | None] = field(default_factory=dict)


@dataclass
class Message:
    """A stored message; ``size`` defaults to the length of ``body``."""

    uid: int
    date: datetime
    body: bytes
    flags: list[str] = field(default_factory=list)
    size: int | None = None

    def __post_init__(self) -> None:
        self.body = bytes(self.body)
        if self.size is None:
            self.size = len(self.body)

    def _header_or_empty(self) -> Header:
        try:
            header, _ = read_header(self.body)
        except ValueError:
            return Header()
        return header

    def fetch(self, seq_num: int, items: list[Any]) -> FetchedMessage:
        """Return the requested items of this message.

        Raises ValueError if a body section is requested and the header
        cannot be read.
        """
        wanted = [_normalize(item) for item in items]
        fetched = FetchedMessage(seq_num=seq_num, items=dict.fromkeys(wanted))
        for item in wanted:
            if item is FetchItem.ENVELOPE:
                fetched.envelope = fetch_envelope(self._header_or_empty())
            elif item in (FetchItem.BODY, FetchItem.BODY_STRUCTURE):
                try:
                    header, body = read_header(self.body)
                    fetched.body_structure = fetch_body_structure(
                        header, body, item is FetchItem.BODY_STRUCTURE
                    )
                except ValueError:
                    fetched.body_structure = None
            elif item is FetchItem.FLAGS:
                fetched.flags = list(self.flags)
            elif item is FetchItem.INTERNAL_DATE:
                fetched.internal_date = self.date
            elif item is FetchItem.RFC822_SIZE:
                fetched.size = self.size
            elif item is FetchItem.UID:
                fetched.uid = self.uid
            else:
                try:
                    section = BodySectionName.parse(item)
                except ValueError:
                    continue
                header, body = read_header(self.body)
                try:
                    fetched.body[section] = fetch_body_section(header, body, section)
                except (NoSuchPartError, ValueError):
                    fetched.body[section] = None
        return fetched

    def match(self, seq_num: int, criteria: SearchCriteria) -> bool:
        """Tell whether this message matches ``criteria``."""
        entity = Entity.from_bytes(self.body)
        return match(entity, seq_num, self.uid, self.date, self.flags, criteria)