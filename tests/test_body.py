import pytest

from imapstore.body import (
    BodySectionName,
    Header,
    NoSuchPartError,
    PartSpecifier,
    fetch_body_section,
    multipart_parts,
    read_header,
)

HEADER = (
    "Content-Type: multipart/mixed; boundary=message-boundary\r\n"
    "Date: Sat, 18 Jun 2016 12:00:00 +0900\r\n"
    "Date: Sat, 19 Jun 2016 12:00:00 +0900\r\n"
    "From: Mitsuha Miyamizu <mitsuha.miyamizu@example.com>\r\n"
    "Reply-To: Mitsuha Miyamizu <mitsuha.miyamizu+replyto@example.com>\r\n"
    "Message-Id: 42@example.com\r\n"
    "Subject: Your Name.\r\n"
    "To: Taki Tachibana <taki.tachibana@example.com>\r\n"
    "\r\n"
)
HEADER_FROM_TO = (
    "From: Mitsuha Miyamizu <mitsuha.miyamizu@example.com>\r\n"
    "To: Taki Tachibana <taki.tachibana@example.com>\r\n"
    "\r\n"
)
HEADER_DATE = "Date: Sat, 18 Jun 2016 12:00:00 +0900\r\nDate: Sat, 19 Jun 2016 12:00:00 +0900\r\n\r\n"
HEADER_NO_FROM_TO = (
    "Content-Type: multipart/mixed; boundary=message-boundary\r\n"
    "Date: Sat, 18 Jun 2016 12:00:00 +0900\r\n"
    "Date: Sat, 19 Jun 2016 12:00:00 +0900\r\n"
    "Reply-To: Mitsuha Miyamizu <mitsuha.miyamizu+replyto@example.com>\r\n"
    "Message-Id: 42@example.com\r\n"
    "Subject: Your Name.\r\n"
    "\r\n"
)
ALT_HEADER = "Content-Type: multipart/alternative; boundary=b2\r\n\r\n"
TEXT_HEADER = "Content-Disposition: inline\r\nContent-Type: text/plain\r\n\r\n"
TEXT_CONTENT_TYPE = "Content-Type: text/plain\r\n\r\n"
TEXT_NO_CONTENT_TYPE = "Content-Disposition: inline\r\n\r\n"
TEXT_BODY = "What's your name?"
HTML_HEADER = "Content-Disposition: inline\r\nContent-Type: text/html\r\n\r\n"
HTML_BODY = "<div>What's <i>your\r\n</i> name?</div>"
ATTACHMENT_HEADER = "Content-Disposition: attachment; filename=note.txt\r\nContent-Type: text/plain\r\n\r\n"
ATTACHMENT_BODY = "My name is Mitsuha."
BODY = (
    "--message-boundary\r\n"
    + ALT_HEADER
    + "\r\n--b2\r\n"
    + TEXT_HEADER + TEXT_BODY
    + "\r\n--b2\r\n"
    + HTML_HEADER + HTML_BODY
    + "\r\n--b2--\r\n"
    + "\r\n--message-boundary\r\n"
    + ATTACHMENT_HEADER + ATTACHMENT_BODY
    + "\r\n--message-boundary--\r\n"
)
MAIL = HEADER + BODY


def _fetch(mail, item):
    header, body = read_header(mail.encode())
    return fetch_body_section(header, body, BodySectionName.parse(item))


@pytest.mark.parametrize(
    "section, expected",
    [
        ("BODY[]", MAIL),
        ("BODY[1.1]", TEXT_BODY),
        ("BODY[1.2]", HTML_BODY),
        ("BODY[2]", ATTACHMENT_BODY),
        ("BODY[HEADER]", HEADER),
        ("BODY[HEADER.FIELDS (From To)]", HEADER_FROM_TO),
        ("BODY[HEADER.FIELDS (FROM to)]", HEADER_FROM_TO),
        ("BODY[HEADER.FIELDS.NOT (From To)]", HEADER_NO_FROM_TO),
        ("BODY[HEADER.FIELDS (Date)]", HEADER_DATE),
        ("BODY[1.1.HEADER]", TEXT_HEADER),
        ("BODY[1.1.HEADER.FIELDS (Content-Type)]", TEXT_CONTENT_TYPE),
        ("BODY[1.1.HEADER.FIELDS.NOT (Content-Type)]", TEXT_NO_CONTENT_TYPE),
        ("BODY[2.HEADER]", ATTACHMENT_HEADER),
        ("BODY[2.MIME]", ATTACHMENT_HEADER),
        ("BODY[TEXT]", BODY),
        ("BODY[1.1.TEXT]", TEXT_BODY),
        ("BODY[2.TEXT]", ATTACHMENT_BODY),
        ("BODY[2.TEXT]<0.9>", ATTACHMENT_BODY[:9]),
    ],
)
def test_fetch_body_section(section, expected):
    assert _fetch(MAIL, section) == expected.encode()


@pytest.mark.parametrize("section", ["BODY[2.1]", "BODY[3]"])
def test_fetch_missing_section(section):
    with pytest.raises(NoSuchPartError):
        _fetch(MAIL, section)


NON_MULTIPART_HEADER = (
    "From: Mitsuha Miyamizu <mitsuha.miyamizu@example.com>\r\n"
    "To: Taki Tachibana <taki.tachibana@example.com>\r\n"
    "Subject: Your Name.\r\n"
    "Message-Id: 42@example.com\r\n"
    "\r\n"
)
NON_MULTIPART_BODY = "That's not multipart message. Thought it should be possible to get this text using BODY[1]."


@pytest.mark.parametrize(
    "section, expected",
    [("BODY[1.MIME]", NON_MULTIPART_HEADER), ("BODY[1]", NON_MULTIPART_BODY)],
)
def test_fetch_non_multipart(section, expected):
    assert _fetch(NON_MULTIPART_HEADER + NON_MULTIPART_BODY, section) == expected.encode()


def test_parse_section_name():
    section = BodySectionName.parse("BODY.PEEK[1.2.HEADER.FIELDS (From To)]<0.9>")
    assert section.peek is True
    assert section.path == (1, 2)
    assert section.specifier is PartSpecifier.HEADER
    assert section.fields == ("From", "To")
    assert section.not_fields is False
    assert section.partial == (0, 9)


@pytest.mark.parametrize("item", ["FLAGS", "BODY[1.BOGUS]", "BODY[HEADER.FIELDS]", "BODY[]<x>"])
def test_parse_invalid_section_name(item):
    with pytest.raises(ValueError):
        BodySectionName.parse(item)


def test_extract_partial():
    assert BodySectionName(partial=(2, 3)).extract_partial(b"abcdefg") == b"cde"
    assert BodySectionName(partial=(10, 3)).extract_partial(b"abc") == b""
    assert BodySectionName().extract_partial(b"abc") == b"abc"


def test_header_round_trip_and_lookup():
    header, rest = read_header(HEADER.encode() + b"tail")
    assert rest == b"tail"
    assert header.to_bytes() == HEADER.encode()
    assert header.get("date") == "Sat, 18 Jun 2016 12:00:00 +0900"
    assert len(header.get_all("DATE")) == 2
    assert header.has("message-id")
    assert header.get("X-Missing") == ""


def test_header_copy_delete_add():
    header, _ = read_header(HEADER_FROM_TO.encode())
    copy = header.copy()
    copy.delete("from")
    copy.add("X-Test", "1")
    assert header.has("From")
    assert [k for k, _ in copy.fields()] == ["To", "X-Test"]
    assert copy.to_bytes().endswith(b"X-Test: 1\r\n\r\n")


def test_multipart_parts():
    header, body = read_header(MAIL.encode())
    parts = list(multipart_parts(header, body))
    assert len(parts) == 2
    assert parts[1][1] == ATTACHMENT_BODY.encode()
    text_header, _ = read_header(TEXT_HEADER.encode())
    assert multipart_parts(text_header, b"x") is None