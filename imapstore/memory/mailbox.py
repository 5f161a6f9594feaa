"""A mailbox kept in memory."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import replace
from datetime import datetime
from typing import Any, BinaryIO

from imapstore import backend
from imapstore.backend import MailboxInfo, MailboxStatus, NoSuchMailboxError, StatusItem
from imapstore.flags import DELETED_FLAG, SEEN_FLAG, FlagsOp, update_flags
from imapstore.memory.message import FetchedMessage, Message
from imapstore.search import SearchCriteria, SeqSet

DELIMITER = "/"


class Mailbox(backend.Mailbox):
    """A mailbox whose messages live in a list; sequence numbers start at 1."""

    def __init__(
        self,
        name: str,
        user: Any = None,
        messages: Iterable[Message] | None = None,
        subscribed: bool = False,
    ) -> None:
        self._name = name
        self._user = user
        self.messages: list[Message] = list(messages or [])
        self.subscribed = subscribed

    def __repr__(self) -> str:
        return f"Mailbox(name={self._name!r}, messages={len(self.messages)})"

    def name(self) -> str:
        """Return this mailbox's name."""
        return self._name

    def info(self) -> MailboxInfo:
        """Return this mailbox's name and hierarchy delimiter."""
        return MailboxInfo(name=self._name, delimiter=DELIMITER)

    def _uid_next(self) -> int:
        return max((msg.uid for msg in self.messages), default=0) + 1

    def _flags(self) -> list[str]:
        seen: dict[str, None] = {}
        for msg in self.messages:
            seen.update(dict.fromkeys(msg.flags))
        return list(seen)

    def _unseen_seq_num(self) -> int:
        return next(
            (seq for seq, msg in enumerate(self.messages, start=1) if SEEN_FLAG not in msg.flags),
            0,
        )

    def _ids(self, uid: bool) -> Iterator[tuple[int, int, Message]]:
        for seq_num, msg in enumerate(list(self.messages), start=1):
            yield seq_num, (msg.uid if uid else seq_num), msg

    def status(self, items: Iterable[StatusItem | str]) -> MailboxStatus:
        """Return the status of this mailbox for the requested items."""
        wanted = [StatusItem(item) for item in items]
        status = MailboxStatus(
            name=self._name,
            items=dict.fromkeys(wanted),
            flags=self._flags(),
            permanent_flags=["\\*"],
            unseen_seq_num=self._unseen_seq_num(),
        )
        for item in wanted:
            if item is StatusItem.MESSAGES:
                status.messages = len(self.messages)
            elif item is StatusItem.UID_NEXT:
                status.uid_next = self._uid_next()
            elif item is StatusItem.UID_VALIDITY:
                status.uid_validity = 1
            elif item is StatusItem.RECENT:
                status.recent = 0
            elif item is StatusItem.UNSEEN:
                status.unseen = 0
        return status

    def set_subscribed(self, subscribed: bool) -> None:
        """Mark this mailbox as subscribed or not."""
        self.subscribed = subscribed

    def check(self) -> None:
        """Request a checkpoint; there is nothing to do in memory."""

    def list_messages(self, uid: bool, seqset: SeqSet, items: Iterable[Any]) -> Iterator[FetchedMessage]:
        """Yield the fetched items of the messages in ``seqset``.

        Messages whose data cannot be read are skipped.
        """
        items = list(items)
        for seq_num, ident, msg in self._ids(uid):
            if not seqset.contains(ident):
                continue
            try:
                yield msg.fetch(seq_num, items)
            except ValueError:
                continue

    def search_messages(self, uid: bool, criteria: SearchCriteria) -> list[int]:
        """Return the UIDs or sequence numbers of the matching messages."""
        result = []
        for seq_num, ident, msg in self._ids(uid):
            try:
                if msg.match(seq_num, criteria):
                    result.append(ident)
            except ValueError:
                continue
        return result

    def create_message(
        self, flags: Iterable[str] | None, date: datetime | None, body: BinaryIO | bytes
    ) -> None:
        """Append a message; a missing date means now."""
        data = body.read() if hasattr(body, "read") else body
        self.messages.append(
            Message(
                uid=self._uid_next(),
                date=date if date is not None else datetime.now(),
                body=bytes(data),
                flags=list(flags or []),
            )
        )

    def update_messages_flags(
        self, uid: bool, seqset: SeqSet, operation: FlagsOp | str, flags: Iterable[str]
    ) -> None:
        """Apply a flag operation to the messages in ``seqset``."""
        flags = list(flags)
        for _, ident, msg in self._ids(uid):
            if seqset.contains(ident):
                msg.flags = update_flags(msg.flags, operation, flags)

    def copy_messages(self, uid: bool, seqset: SeqSet, dest: str) -> None:
        """Copy the messages in ``seqset`` to the end of mailbox ``dest``."""
        mailboxes = getattr(self._user, "mailboxes", {})
        target = mailboxes.get(dest)
        if target is None:
            raise NoSuchMailboxError()
        for _, ident, msg in self._ids(uid):
            if seqset.contains(ident):
                target.messages.append(replace(msg, uid=target._uid_next(), flags=list(msg.flags)))

    def expunge(self) -> None:
        """Remove every message flagged \\Deleted."""
        self.messages = [msg for msg in self.messages if DELETED_FLAG not in msg.flags]