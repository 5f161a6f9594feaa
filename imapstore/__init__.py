"""IMAP server storage interfaces, message utilities and an in-memory store."""

__version__ = "0.1.0"