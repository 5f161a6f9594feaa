"""A backend that keeps everything in memory."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from imapstore.backend import Backend, InvalidCredentialsError
from imapstore.memory.mailbox import Mailbox
from imapstore.memory.message import Message
from imapstore.memory.user import User

_SAMPLE_BODY = (
    "From: contact@example.com\r\n"
    "To: contact@example.com\r\n"
    "Subject: A little message, just for you\r\n"
    "Date: Wed, 11 May 2016 14:31:59 +0000\r\n"
    "Message-ID: <0000000@localhost/>\r\n"
    "Content-Type: text/plain\r\n"
    "\r\n"
    "Hi there :)"
).encode("ascii")


class MemoryBackend(Backend):
    """A backend holding its users in a dictionary."""

    def __init__(self, users: dict[str, User] | None = None) -> None:
        self.users: dict[str, User] = dict(users or {})

    def login(self, conn_info: Any, username: str, password: str) -> User:
        """Return the user if the credentials are right."""
        user = self.users.get(username)
        if user is not None and user.check_password(password):
            return user
        raise InvalidCredentialsError("Bad username or password")


def new_backend() -> MemoryBackend:
    """Create a backend with one user whose INBOX holds a sample message."""
    password = "password"
    user = User("username", password)
    user.mailboxes["INBOX"] = Mailbox(
        "INBOX",
        user,
        [Message(uid=6, date=datetime.now(), body=_SAMPLE_BODY, flags=["\\Seen"])],
    )
    return MemoryBackend({user.username(): user})