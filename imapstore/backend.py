"""Interfaces that an IMAP server backend implements."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, BinaryIO


class InvalidCredentialsError(Exception):
    """Raised by Backend.login when a username or password is incorrect."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class MessageTooBigError(Exception):
    """Raised by Mailbox.create_message when the message exceeds the size limit."""

    def __init__(self, message: str = "Message size exceeding limit") -> None:
        super().__init__(message)


class NoSuchMailboxError(LookupError):
    """Raised when a mailbox that does not exist is requested."""

    def __init__(self, message: str = "No such mailbox") -> None:
        super().__init__(message)


class MailboxAlreadyExistsError(Exception):
    """Raised when creating or renaming to a mailbox that already exists."""

    def __init__(self, message: str = "Mailbox already exists") -> None:
        super().__init__(message)


class StatusItem(str, Enum):
    """A mailbox status item that can be requested."""

    MESSAGES = "MESSAGES"
    RECENT = "RECENT"
    UID_NEXT = "UIDNEXT"
    UID_VALIDITY = "UIDVALIDITY"
    UNSEEN = "UNSEEN"


@dataclass
class MailboxInfo:
    """Basic information about a mailbox."""

    name: str = ""
    delimiter: str = ""
    attributes: list[str] = field(default_factory=list)


@dataclass
class MailboxStatus:
    """The status of a mailbox; ``items`` holds the requested status items."""

    name: str = ""
    read_only: bool = False
    items: dict[StatusItem, Any] = field(default_factory=dict)
    flags: list[str] = field(default_factory=list)
    permanent_flags: list[str] = field(default_factory=list)
    unseen_seq_num: int = 0
    messages: int = 0
    recent: int = 0
    unseen: int = 0
    uid_next: int = 0
    uid_validity: int = 0


class Backend(ABC):
    """An IMAP server backend; its operations deal with users."""

    @abstractmethod
    def login(self, conn_info: Any, username: str, password: str) -> User:
        """Authenticate a user, raising InvalidCredentialsError on failure."""


class AppendLimitBackend(Backend):
    """A backend with a global maximum message size."""

    @abstractmethod
    def create_message_limit(self) -> int | None:
        """Return the maximum message size in octets, or None for no limit."""


class User(ABC):
    """A user of the mail store; its operations deal with mailboxes."""

    @abstractmethod
    def username(self) -> str:
        """Return this user's name."""

    @abstractmethod
    def list_mailboxes(self, subscribed: bool) -> list[Mailbox]:
        """Return this user's mailboxes, only subscribed ones if asked."""

    @abstractmethod
    def get_mailbox(self, name: str) -> Mailbox:
        """Return a mailbox, raising NoSuchMailboxError if it does not exist."""

    @abstractmethod
    def create_mailbox(self, name: str) -> None:
        """Create a mailbox; it is an error if it already exists."""

    @abstractmethod
    def delete_mailbox(self, name: str) -> None:
        """Delete a mailbox, leaving inferior hierarchical names in place."""

    @abstractmethod
    def rename_mailbox(self, existing_name: str, new_name: str) -> None:
        """Rename a mailbox; renaming INBOX moves its messages and empties it."""

    @abstractmethod
    def logout(self) -> None:
        """Release this user; it will no longer be used."""


class AppendLimitUser(User):
    """A user with a per-user maximum message size."""

    @abstractmethod
    def create_message_limit(self) -> int | None:
        """Return the maximum message size in octets, or None for no limit.

        This overrides the backend's limit.
        """


class Mailbox(ABC):
    """A mailbox belonging to a user; its operations deal with messages."""

    @abstractmethod
    def name(self) -> str:
        """Return this mailbox's name."""

    @abstractmethod
    def info(self) -> MailboxInfo:
        """Return this mailbox's info."""

    @abstractmethod
    def status(self, items: Iterable[StatusItem]) -> MailboxStatus:
        """Return this mailbox's status for the requested items.

        name, flags, permanent_flags and unseen_seq_num are always filled in.
        """

    @abstractmethod
    def set_subscribed(self, subscribed: bool) -> None:
        """Add or remove this mailbox from the subscribed set."""

    @abstractmethod
    def check(self) -> None:
        """Request a checkpoint of this mailbox."""

    @abstractmethod
    def list_messages(self, uid: bool, seqset: Any, items: Iterable[Any]) -> Iterator[Any]:
        """Yield the messages in ``seqset`` (UIDs if ``uid``) with the given items."""

    @abstractmethod
    def search_messages(self, uid: bool, criteria: Any) -> list[int]:
        """Return UIDs or sequence numbers of the messages matching ``criteria``."""

    @abstractmethod
    def create_message(self, flags: list[str], date: datetime | None, body: BinaryIO | bytes) -> None:
        """Append a message; a missing date means the current time."""

    @abstractmethod
    def update_messages_flags(self, uid: bool, seqset: Any, operation: Any, flags: list[str]) -> None:
        """Alter the flags of the messages in ``seqset``."""

    @abstractmethod
    def copy_messages(self, uid: bool, seqset: Any, dest: str) -> None:
        """Copy the messages in ``seqset`` to the end of mailbox ``dest``."""

    @abstractmethod
    def expunge(self) -> None:
        """Remove every message carrying the \\Deleted flag."""


class MoveMailbox(Mailbox):
    """A mailbox that can move messages."""

    @abstractmethod
    def move_messages(self, uid: bool, seqset: Any, dest: str) -> None:
        """Move the messages in ``seqset`` to the end of mailbox ``dest``."""


@dataclass
class Update:
    """A unilateral backend update.

    An empty username targets all users; an empty mailbox targets all mailboxes.
    """

    username: str = ""
    mailbox: str = ""
    _done: threading.Event = field(default_factory=threading.Event, init=False, repr=False, compare=False)

    def done(self) -> threading.Event:
        """Return the event that is set once the update has been broadcast."""
        return self._done


def new_update(username: str, mailbox: str) -> Update:
    """Create an update for a user and a mailbox."""
    return Update(username=username, mailbox=mailbox)


@dataclass(kw_only=True)
class StatusUpdate(Update):
    """A status response update."""

    status: Any


@dataclass(kw_only=True)
class MailboxUpdate(Update):
    """A mailbox status update."""

    mailbox_status: MailboxStatus


@dataclass(kw_only=True)
class MailboxInfoUpdate(Update):
    """A mailbox info update."""

    mailbox_info: MailboxInfo


@dataclass(kw_only=True)
class MessageUpdate(Update):
    """A message update."""

    message: Any


@dataclass(kw_only=True)
class ExpungeUpdate(Update):
    """An expunge update."""

    seq_num: int


class BackendUpdater(ABC):
    """A backend able to send unilateral updates."""

    @abstractmethod
    def updates(self) -> Iterator[Update]:
        """Return the source of updates."""


class MailboxPoller(ABC):
    """A mailbox able to poll for updates during inactivity."""

    @abstractmethod
    def poll(self) -> None:
        """Request mailbox updates."""