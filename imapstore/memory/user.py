"""A user kept in memory."""

from __future__ import annotations

from imapstore import backend
from imapstore.backend import MailboxAlreadyExistsError, NoSuchMailboxError
from imapstore.memory.mailbox import Mailbox


class User(backend.User):
    """A user owning a set of in-memory mailboxes."""

    def __init__(self, username: str, password: str, mailboxes: dict[str, Mailbox] | None = None) -> None:
        self._username = username
        self._password = password
        self.mailboxes: dict[str, Mailbox] = dict(mailboxes or {})

    def __repr__(self) -> str:
        return f"User(username={self._username!r})"

    def check_password(self, password: str) -> bool:
        """Tell whether ``password`` is this user's password."""
        return password == self._password

    def username(self) -> str:
        """Return this user's name."""
        return self._username

    def list_mailboxes(self, subscribed: bool) -> list[Mailbox]:
        """Return the mailboxes, only subscribed ones if asked."""
        return [mbox for mbox in self.mailboxes.values() if mbox.subscribed or not subscribed]

    def get_mailbox(self, name: str) -> Mailbox:
        """Return the named mailbox."""
        try:
            return self.mailboxes[name]
        except KeyError:
            raise NoSuchMailboxError() from None

    def create_mailbox(self, name: str) -> None:
        """Create an empty mailbox."""
        if name in self.mailboxes:
            raise MailboxAlreadyExistsError()
        self.mailboxes[name] = Mailbox(name, self)

    def delete_mailbox(self, name: str) -> None:
        """Delete a mailbox; INBOX cannot be deleted."""
        if name == "INBOX":
            raise ValueError("Cannot delete INBOX")
        if name not in self.mailboxes:
            raise NoSuchMailboxError()
        del self.mailboxes[name]

    def rename_mailbox(self, existing_name: str, new_name: str) -> None:
        """Move a mailbox's messages to a new name; INBOX stays, emptied."""
        existing = self.mailboxes.get(existing_name)
        if existing is None:
            raise NoSuchMailboxError()
        self.mailboxes[new_name] = Mailbox(new_name, self, existing.messages)
        existing.messages = []
        if existing_name != "INBOX":
            del self.mailboxes[existing_name]

    def logout(self) -> None:
        """Release this user; nothing to do in memory."""