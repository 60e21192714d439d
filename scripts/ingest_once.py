# scripts/ingest_once.py
"""
Run one ingestion batch and print the result as JSON.

    python scripts/ingest_once.py                 # configured MAIL_SOURCE
    python scripts/ingest_once.py --eml-dir data/emails
    python scripts/ingest_once.py --no-mark-read
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path


from listingsync.adapters.mail.base import MailFetchError
from listingsync.adapters.mail.eml_dir import EmlDirectoryMailSource
from listingsync.db import engine
from listingsync.models import Base
from listingsync.service_layer.use_cases.ingest import build_mail_source, run_ingest_job


async def main(args: argparse.Namespace) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    source = EmlDirectoryMailSource(directory=Path(args.eml_dir)) if args.eml_dir else build_mail_source()
    try:
        result = await run_ingest_job(source, timeout_s=args.timeout, mark_processed=not args.no_mark_read)
    except MailFetchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await engine.dispose()

    print(json.dumps(result.as_dict(), indent=2))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ingest listing alert emails once")
    parser.add_argument("--eml-dir", help="Read saved .eml files from this directory instead of IMAP")
    parser.add_argument("--timeout", type=float, default=None, help="Mail fetch timeout in seconds")
    parser.add_argument("--no-mark-read", action="store_true", help="Leave fetched emails unread")
    sys.exit(asyncio.run(main(parser.parse_args())))
