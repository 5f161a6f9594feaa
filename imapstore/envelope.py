"""Message envelopes computed from headers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from email.utils import getaddresses, parsedate_to_datetime

from imapstore.body import Header


@dataclass
class Address:
    """A mail address as IMAP describes it."""

    personal_name: str = ""
    at_domain_list: str = ""
    mailbox_name: str = ""
    host_name: str = ""


@dataclass
class Envelope:
    """A message envelope."""

    date: datetime | None = None
    subject: str = ""
    from_: list[Address] = field(default_factory=list)
    sender: list[Address] = field(default_factory=list)
    reply_to: list[Address] = field(default_factory=list)
    to: list[Address] = field(default_factory=list)
    cc: list[Address] = field(default_factory=list)
    bcc: list[Address] = field(default_factory=list)
    in_reply_to: str = ""
    message_id: str = ""


def _address_list(value: str) -> list[Address]:
    if not value.strip():
        return []
    result = []
    for name, addr in getaddresses([value]):
        if not addr:
            return []
        mailbox, _, host = addr.partition("@")
        result.append(Address(personal_name=name, mailbox_name=mailbox, host_name=host))
    return result


def _parse_date(value: str) -> datetime | None:
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None


def fetch_envelope(header: Header) -> Envelope:
    """Build a message's envelope from its header."""
    from_ = _address_list(header.get("From"))
    sender = _address_list(header.get("Sender")) or list(from_)
    reply_to = _address_list(header.get("Reply-To")) or list(from_)
    return Envelope(
        date=_parse_date(header.get("Date")),
        subject=header.get("Subject"),
        from_=from_,
        sender=sender,
        reply_to=reply_to,
        to=_address_list(header.get("To")),
        cc=_address_list(header.get("Cc")),
        bcc=_address_list(header.get("Bcc")),
        in_reply_to=header.get("In-Reply-To"),
        message_id=header.get("Message-Id"),
    )