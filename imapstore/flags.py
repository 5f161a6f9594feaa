"""Message flags and flag-update operations."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

SEEN_FLAG = "\\Seen"
ANSWERED_FLAG = "\\Answered"
FLAGGED_FLAG = "\\Flagged"
DELETED_FLAG = "\\Deleted"
DRAFT_FLAG = "\\Draft"
RECENT_FLAG = "\\Recent"


class FlagsOp(str, Enum):
    """An operation that alters a message's flag set."""

    SET = "FLAGS"
    ADD = "+FLAGS"
    REMOVE = "-FLAGS"


def update_flags(current: Iterable[str], op: FlagsOp | str, flags: Iterable[str]) -> list[str]:
    """Apply ``op`` with ``flags`` to ``current`` and return the new flag list.

    Neither input is modified. An unknown operation leaves the flags unchanged.
    """
    current = list(current)
    flags = list(flags)
    try:
        op = FlagsOp(op)
    except ValueError:
        return current

    if op is FlagsOp.SET:
        # The \Recent flag is kept, and never added twice.
        has_recent = RECENT_FLAG in current
        result = [RECENT_FLAG] if has_recent else []
        for flag in flags:
            if flag == RECENT_FLAG:
                if has_recent:
                    continue
                has_recent = True
            result.append(flag)
        return result

    if op is FlagsOp.ADD:
        return current + [flag for flag in flags if flag not in current]

    return [flag for flag in current if flag not in flags]