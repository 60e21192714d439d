# listingsync/adapters/mail/eml_dir.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ...config import settings
from .base import EmailMessage, MailSource, message_from_bytes


@dataclass
class EmlDirectoryMailSource(MailSource):
    """
    Offline mail source for development/testing.

    Reads saved alert emails from:
      <EML_DIR>/*.eml   (name order)

    Messages without an HTML body are skipped. Nothing is ever marked read,
    so every run sees the same batch; that is what the idempotence tests want.
    """

    directory: Path

    @classmethod
    def from_settings(cls) -> "EmlDirectoryMailSource":
        return cls(directory=Path(settings.EML_DIR))

    def fetch(self) -> list[EmailMessage]:
        if not self.directory.exists():
            # Dev-friendly: missing directory means "no mail"
            return []

        out: list[EmailMessage] = []
        for path in sorted(self.directory.glob("*.eml")):
            msg = message_from_bytes(path.read_bytes(), uid=path.name)
            if msg.html:
                out.append(msg)
        return out

    def mark_processed(self, messages: Sequence[EmailMessage]) -> None:
        return None
