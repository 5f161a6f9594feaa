"""An in-memory IMAP backend: messages, mailboxes, users and the backend."""