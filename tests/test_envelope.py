from datetime import datetime, timedelta, timezone

from imapstore.body import read_header
from imapstore.envelope import Address, Envelope, fetch_envelope

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


def test_fetch_envelope():
    header, _ = read_header(HEADER.encode())
    mitsuha = Address(personal_name="Mitsuha Miyamizu", mailbox_name="mitsuha.miyamizu", host_name="example.com")
    expected = Envelope(
        date=datetime(2016, 6, 18, 12, 0, 0, tzinfo=timezone(timedelta(hours=9))),
        subject="Your Name.",
        from_=[mitsuha],
        sender=[mitsuha],
        reply_to=[Address(personal_name="Mitsuha Miyamizu", mailbox_name="mitsuha.miyamizu+replyto", host_name="example.com")],
        to=[Address(personal_name="Taki Tachibana", mailbox_name="taki.tachibana", host_name="example.com")],
        cc=[],
        bcc=[],
        in_reply_to="",
        message_id="42@example.com",
    )
    assert fetch_envelope(header) == expected


def test_reply_to_defaults_to_from_and_bad_date():
    header, _ = read_header(b"From: a@example.com\r\nDate: not a date\r\n\r\n")
    env = fetch_envelope(header)
    assert env.reply_to == [Address(mailbox_name="a", host_name="example.com")]
    assert env.sender == env.from_
    assert env.date is None