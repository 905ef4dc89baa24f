#!/usr/bin/env python3
"""
CLI utility to delete temporary access grants expired longer than the retention window.

Usage:
    python scripts/purge_expired_grants.py --retention-days 30
"""

import argparse
import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sgi_core.config import settings
from sgi_core.logging import setup_logging
from sgi_core.repositories.grant_repository import GrantRepository


def main():
    parser = argparse.ArgumentParser(description="Purge expired temporary access grants")
    parser.add_argument(
        "--retention-days",
        type=int,
        default=None,
        help="Override retention in days (defaults to settings.GRANT_RETENTION_DAYS)",
    )
    args = parser.parse_args()

    setup_logging()
    days = settings.GRANT_RETENTION_DAYS if args.retention_days is None else args.retention_days
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)
    removed = GrantRepository().purge_expired(cutoff)
    print(json.dumps({"purged": removed, "cutoff": cutoff}, indent=2, default=str))


if __name__ == "__main__":
    main()
