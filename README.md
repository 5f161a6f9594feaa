# imapstore

Building blocks for the storage side of an IMAP server: the abstract
interfaces a server talks to, helpers that compute IMAP views of stored
messages, and a ready-made in-memory store. Only the standard library is
used.

## What is inside

- `imapstore.backend`: abstract `Backend`, `User`, `Mailbox` and
  `MoveMailbox` classes; optional extensions `AppendLimitBackend`,
  `AppendLimitUser`, `BackendUpdater` and `MailboxPoller`; the data classes
  `MailboxInfo` and `MailboxStatus` with the `StatusItem` enum; update
  records (`Update`, made by `new_update`, and `StatusUpdate`,
  `MailboxUpdate`, `MailboxInfoUpdate`, `MessageUpdate`, `ExpungeUpdate`);
  and the errors a backend raises (`InvalidCredentialsError`,
  `NoSuchMailboxError`, `MailboxAlreadyExistsError`, `MessageTooBigError`).
- `imapstore.command`: `Command` holds a tag, a name and arguments.
  `Command.to_line()` renders it as a CRLF-terminated line of bytes (an empty
  tag is written as `*`, strings are quoted, non-ASCII strings and bytes are
  sent as `{n}` literals, lists become parenthesised lists, `RawString` is
  written as-is). `Command.from_fields()` builds a command from already
  parsed fields, upper-casing the name, and raises `CommandParseError` on bad
  input.
- `imapstore.flags`: flag name constants and `update_flags`, which applies a
  `FlagsOp` (`SET`, `ADD`, `REMOVE`) to a flag list without modifying its
  inputs. `SET` keeps an existing `\Recent` flag and never adds it twice; an
  unknown operation leaves the flags unchanged.
- `imapstore.body`: `read_header` parses a header into a case-insensitive,
  ordered `Header`; `multipart_parts` iterates over the parts of a multipart
  body; `BodySectionName.parse` reads `BODY[...]` / `BODY.PEEK[...]` items
  (part paths, `HEADER`, `HEADER.FIELDS[.NOT] (...)`, `MIME`, `TEXT`,
  `<start.count>` ranges); `fetch_body_section` extracts that section and
  raises `NoSuchPartError` for a missing part.
- `imapstore.envelope`: `fetch_envelope` builds an `Envelope` of `Address`
  entries from a header. Sender and Reply-To fall back to From.
- `imapstore.bodystructure`: `fetch_body_structure` computes a
  `BodyStructure` (types, parameters, sizes, line counts, nested parts,
  embedded `message/rfc822`, and disposition when `extended` is true).
- `imapstore.search`: `SeqSet` (0 stands for `*`), `SearchCriteria`,
  `Entity` (a message with its transfer-decoded body) and `match`, which
  evaluates criteria — sent and internal dates, header, body and text
  substrings, size, flags, sequence numbers, UIDs, `not_` and `or_` — against
  a message and its metadata. A sent-date criterion on a message without a
  valid `Date` header raises `ValueError`.
- `imapstore.memory`: an in-memory store.
  - `memory.message`: `Message` (uid, date, body, flags, size), its
    `fetch` returning a `FetchedMessage` for a list of `FetchItem` values or
    body section names, and `match`.
  - `memory.mailbox`: `Mailbox`, implementing every `backend.Mailbox`
    method; the hierarchy delimiter is `/`.
  - `memory.user`: `User`, holding mailboxes in a dictionary. INBOX cannot
    be deleted; renaming INBOX moves its messages and leaves it empty.
  - `memory.backend`: `MemoryBackend` and `new_backend()`, which creates one
    user, `username`, whose INBOX holds a single sample message.

## Installing

```
pip install .
```

## Quick start

```python
from imapstore.memory.backend import new_backend
from imapstore.memory.message import FetchItem
from imapstore.search import SeqSet

backend = new_backend()
password = "password"
user = backend.login(None, "username", password)

inbox = user.get_mailbox("INBOX")
seqset = SeqSet()
seqset.add_range(1, 1)

for message in inbox.list_messages(False, seqset, [FetchItem.ENVELOPE, FetchItem.FLAGS]):
    print(message.seq_num, message.envelope.subject, message.flags)
```

Mailboxes can be created, renamed, deleted, searched, copied between and
expunged:

```python
from imapstore.flags import FlagsOp
from imapstore.search import SearchCriteria

user.create_mailbox("Archive")
inbox.copy_messages(False, seqset, "Archive")
inbox.update_messages_flags(False, seqset, FlagsOp.ADD, ["\\Deleted"])
inbox.expunge()

archive = user.get_mailbox("Archive")
print(archive.search_messages(True, SearchCriteria(text=["message"])))  # [1]
```

A wrong username or password makes `login` raise `InvalidCredentialsError`.

## What this package does not do

- There is no IMAP server or client: nothing listens on a socket, reads
  commands from the network or sends responses. `Command` only renders a
  line and builds a command from fields that were already parsed.
- The in-memory store keeps nothing on disk; everything is lost when the
  process ends. Its `RECENT` and `UNSEEN` status items are always 0, and it
  does not implement moving messages, size limits, updates or polling.

## Running the tests

```
pip install .[test]
pytest
```