import pytest

from imapstore.flags import RECENT_FLAG, FlagsOp, update_flags

FLAGS_LIST = ["a", "b", "c"]


@pytest.mark.parametrize(
    "op, flags, expected",
    [
        (FlagsOp.ADD, ["d", "e"], ["a", "b", "c", "d", "e"]),
        (FlagsOp.ADD, ["a", "d", "b"], ["a", "b", "c", "d"]),
        (FlagsOp.REMOVE, ["b", "v", "e", "a"], ["c"]),
        (FlagsOp.SET, ["a", "d", "e"], ["a", "d", "e"]),
        ("TestUnknownOp", ["a", "d", "e"], ["a", "b", "c"]),
    ],
)
def test_update_flags(op, flags, expected):
    orig_flags = list(flags)
    current = list(FLAGS_LIST)
    got = update_flags(current, op, flags)
    assert got == expected
    assert flags == orig_flags


def test_update_flags_does_not_modify_current():
    current = list(FLAGS_LIST)
    update_flags(current, FlagsOp.REMOVE, ["a"])
    assert current == FLAGS_LIST


def test_update_flags_accepts_string_op():
    assert update_flags(["a"], "+FLAGS", ["b"]) == ["a", "b"]


def test_update_flags_recent():
    current = []

    current = update_flags(current, FlagsOp.SET, [RECENT_FLAG])
    assert current == [RECENT_FLAG]

    current = update_flags(current, FlagsOp.SET, ["something"])
    assert current == [RECENT_FLAG, "something"]

    current = update_flags(current, FlagsOp.SET, ["another", RECENT_FLAG])
    assert current == [RECENT_FLAG, "another"]