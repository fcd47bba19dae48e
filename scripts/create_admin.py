#!/usr/bin/env python3
"""
Create (or reset) an admin account.

Usage:
    python scripts/create_admin.py --email admin@kollect-it.com --password '...'
    python scripts/create_admin.py --email admin@kollect-it.com --password '...' --reset
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from db import get_db_session, create_db_and_tables
from enums.user_role import UserRole
from exceptions.user import UserAlreadyExistsException
from services.user import UserService

MIN_PASSWORD_LENGTH = 12


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an admin account for the storefront API")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default=None)
    parser.add_argument("--reset", action="store_true",
                        help="Reset password and role if the account already exists")
    return parser.parse_args(argv)


async def create_admin(args: argparse.Namespace) -> int:
    await create_db_and_tables()
    async with get_db_session() as session:
        return await UserService.create_user(
            email=args.email,
            password=args.password,
            name=args.name,
            role=UserRole.ADMIN,
            session=session,
            update_existing=args.reset,
        )


async def main(argv=None):
    args = parse_args(argv)
    if len(args.password) < MIN_PASSWORD_LENGTH:
        print(f"❌ Password must be at least {MIN_PASSWORD_LENGTH} characters")
        sys.exit(1)
    try:
        user_id = await create_admin(args)
        print(f"✅ Admin account ready (id={user_id})")
    except UserAlreadyExistsException:
        print("⚠️  Account already exists. Use --reset to reset its password.")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
