# listingsync/adapters/mail/base.py
from __future__ import annotations

import email
from dataclasses import dataclass
from email import policy
from email.message import Message
from email.utils import parseaddr
from typing import Protocol, Sequence


class MailFetchError(RuntimeError):
    """Mailbox could not hand over any messages; the whole batch fails."""


@dataclass(frozen=True)
class EmailMessage:
    sender: str
    html: str
    # transport handle used to mark the message processed (IMAP UID, file name)
    uid: str | None = None


class MailSource(Protocol):
    def fetch(self) -> list[EmailMessage]:
        raise NotImplementedError

    def mark_processed(self, messages: Sequence[EmailMessage]) -> None:
        raise NotImplementedError


def html_body(msg: Message) -> str:
    """First text/html part of a (possibly multipart) message, decoded."""
    for part in msg.walk():
        if part.get_content_type() != "text/html":
            continue
        payload = part.get_payload(decode=True)
        if payload is None:
            continue
        charset = part.get_content_charset() or "utf-8"
        return payload.decode(charset, errors="replace")
    return ""


def message_from_bytes(raw: bytes, uid: str | None = None) -> EmailMessage:
    msg = email.message_from_bytes(raw, policy=policy.default)
    from_header = str(msg.get("From", "") or "")
    _, addr = parseaddr(from_header)
    return EmailMessage(sender=addr or from_header, html=html_body(msg), uid=uid)
