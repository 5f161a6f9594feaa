"""Body structures computed from message content."""

from __future__ import annotations

from dataclasses import dataclass

from imapstore.body import Header, _parse_media_type, multipart_parts, read_header
from imapstore.envelope import Envelope, fetch_envelope


@dataclass
class BodyStructure:
    """The MIME structure of a message or message part."""

    mime_type: str = ""
    mime_subtype: str = ""
    params: dict[str, str] | None = None
    id: str = ""
    description: str = ""
    encoding: str = ""
    size: int = 0
    parts: list[BodyStructure] | None = None
    envelope: Envelope | None = None
    body_structure: BodyStructure | None = None
    lines: int = 0
    extended: bool = False
    disposition: str = ""
    disposition_params: dict[str, str] | None = None
    language: list[str] | None = None
    location: list[str] | None = None
    md5: str = ""


def _count_lines(data: bytes) -> int:
    # A body not ending with a newline counts its last line too.
    return data.count(b"\n") + (0 if data.endswith(b"\n") else 1)


def fetch_body_structure(header: Header, body: bytes, extended: bool) -> BodyStructure:
    """Compute the body structure of a message from its header and body."""
    body = bytes(body)
    bs = BodyStructure()
    try:
        media_type, params = _parse_media_type(header.get("Content-Type"))
    except ValueError:
        bs.mime_type, bs.mime_subtype = "text", "plain"
    else:
        main, _, sub = media_type.partition("/")
        bs.mime_type, bs.mime_subtype, bs.params = main, sub, params

    bs.id = header.get("Content-Id")
    bs.description = header.get("Content-Description")
    bs.encoding = header.get("Content-Transfer-Encoding")

    parts = multipart_parts(header, body)
    if parts is not None:
        children = [fetch_body_structure(h, b, extended) for h, b in parts]
        bs.parts = children or None
    else:
        need_lines = False
        if bs.mime_type == "message" and bs.mime_subtype == "rfc822":
            sub_header, sub_body = read_header(body)
            bs.envelope = fetch_envelope(sub_header)
            bs.body_structure = fetch_body_structure(sub_header, sub_body, extended)
            need_lines = True
        elif bs.mime_type == "text":
            need_lines = True
        bs.size = len(body)
        if need_lines:
            bs.lines = _count_lines(body)

    if extended:
        bs.extended = True
        try:
            bs.disposition, bs.disposition_params = _parse_media_type(header.get("Content-Disposition"))
        except ValueError:
            bs.disposition, bs.disposition_params = "", None

    return bs