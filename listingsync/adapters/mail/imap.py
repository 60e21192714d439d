# listingsync/adapters/mail/imap.py
from __future__ import annotations

import imaplib
import logging
import ssl
from dataclasses import dataclass, field
from typing import Sequence

import certifi

from ...config import settings
from .base import EmailMessage, MailFetchError, MailSource, message_from_bytes

log = logging.getLogger(__name__)


def build_search_criteria(domains: Sequence[str]) -> str:
    """
    UNSEEN messages from any of the listing domains:
      (UNSEEN OR OR FROM "a" FROM "b" FROM "c")
    """
    froms = [f'FROM "{d}"' for d in domains]
    if not froms:
        return "(UNSEEN)"
    return "(UNSEEN " + "OR " * (len(froms) - 1) + " ".join(froms) + ")"


@dataclass
class ImapMailSource(MailSource):
    """
    Blocking IMAP client. One connection per call; callers run it in a worker
    thread under a timeout.

    Bodies are fetched with BODY.PEEK[] so reading does not flip \\Seen; the
    pipeline marks messages only after it has processed them.
    """

    host: str
    user: str
    password: str
    port: int = 993
    tls: bool = True
    mailbox: str = "INBOX"
    sender_domains: list[str] = field(default_factory=list)
    ca_bundle: str | None = None
    timeout_s: float = 60.0

    @classmethod
    def from_settings(cls) -> "ImapMailSource":
        if not settings.IMAP_USER or not settings.IMAP_PASSWORD:
            raise ValueError("IMAP_USER and IMAP_PASSWORD must be set in .env")
        return cls(
            host=settings.IMAP_HOST,
            user=settings.IMAP_USER,
            password=settings.IMAP_PASSWORD,
            port=settings.IMAP_PORT,
            tls=settings.IMAP_TLS,
            mailbox=settings.IMAP_MAILBOX,
            sender_domains=list(settings.IMAP_SENDER_DOMAINS),
            ca_bundle=settings.IMAP_CA_BUNDLE,
            timeout_s=settings.MAIL_FETCH_TIMEOUT_S,
        )

    def _ssl_context(self) -> ssl.SSLContext:
        # explicit CA bundle if given; else certifi
        return ssl.create_default_context(cafile=self.ca_bundle or certifi.where())

    def _connect(self) -> imaplib.IMAP4:
        if self.tls:
            conn: imaplib.IMAP4 = imaplib.IMAP4_SSL(
                self.host, self.port, ssl_context=self._ssl_context(), timeout=self.timeout_s
            )
        else:
            conn = imaplib.IMAP4(self.host, self.port, timeout=self.timeout_s)
        conn.login(self.user, self.password)
        return conn

    def fetch(self) -> list[EmailMessage]:
        try:
            conn = self._connect()
        except (imaplib.IMAP4.error, OSError) as e:
            raise MailFetchError(f"IMAP connect failed: {e}") from e

        try:
            typ, _ = conn.select(self.mailbox)
            if typ != "OK":
                raise MailFetchError(f"IMAP select {self.mailbox!r} failed")

            typ, data = conn.uid("SEARCH", None, build_search_criteria(self.sender_domains))
            if typ != "OK":
                raise MailFetchError("IMAP search failed")

            uids = [u.decode() for u in (data[0] or b"").split()]
            if not uids:
                log.info("No unread listing emails found")
                return []

            log.info("Found %d unread listing emails", len(uids))
            out: list[EmailMessage] = []
            for uid in uids:
                typ, parts = conn.uid("FETCH", uid, "(BODY.PEEK[])")
                if typ != "OK":
                    raise MailFetchError(f"IMAP fetch failed for uid {uid}")
                raw = next((p[1] for p in parts if isinstance(p, tuple)), None)
                if raw is None:
                    continue
                msg = message_from_bytes(raw, uid=uid)
                if msg.html:
                    out.append(msg)
            return out
        except imaplib.IMAP4.error as e:
            raise MailFetchError(f"IMAP error: {e}") from e
        finally:
            try:
                conn.logout()
            except (imaplib.IMAP4.error, OSError):
                log.debug("IMAP logout failed", exc_info=True)

    def mark_processed(self, messages: Sequence[EmailMessage]) -> None:
        uids = [m.uid for m in messages if m.uid]
        if not uids:
            return

        conn = self._connect()
        try:
            conn.select(self.mailbox)
            conn.uid("STORE", ",".join(uids), "+FLAGS", "(\\Seen)")
        finally:
            conn.logout()
