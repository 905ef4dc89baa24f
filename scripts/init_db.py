#!/usr/bin/env python3
"""
Create the database schema, seed the area allow-list and optionally the first admin.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --admin-email admin@example.com --admin-password 'S3cretPass' --admin-area TIC
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from loguru import logger

from sgi_core.auth.user_service import UserService
from sgi_core.domain.auth import Role
from sgi_core.infrastructure.schema import init_schema
from sgi_core.logging import setup_logging


def main():
    parser = argparse.ArgumentParser(description="Initialize the SGI records database")
    parser.add_argument("--admin-email", default=None)
    parser.add_argument("--admin-password", default=None)
    parser.add_argument("--admin-area", default=None)
    args = parser.parse_args()

    setup_logging()
    init_schema()

    if args.admin_email:
        if not (args.admin_password and args.admin_area):
            parser.error("--admin-password and --admin-area are required with --admin-email")
        try:
            user = UserService().create_user(
                correo=args.admin_email,
                password=args.admin_password,
                area=args.admin_area,
                role=Role.ADMIN.value,
            )
        except RuntimeError as e:
            logger.warning(f"Admin not created: {e}")
        else:
            logger.info(f"Created admin {user['correo']} ({user['user_id']})")


if __name__ == "__main__":
    main()
