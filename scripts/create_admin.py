"""Create or reactivate an administrator account."""

import argparse
import asyncio
import getpass
import sys
from typing import Optional

from awv.core.security import get_password_hash, validate_password_strength
from awv.database import Database
from awv.features.auth.models import User


async def create_admin(email: str, name: Optional[str], password: str) -> None:
    """
    Create the admin user, or promote and reactivate an existing account.

    An existing account keeps its name unless ``name`` is given.
    """
    await Database.connect_db()
    try:
        user = await User.find_one(User.email == email)
        if user is None:
            user = User(
                email=email,
                name=name or "Administrator",
                password_hash=get_password_hash(password),
                role="admin",
                status="active",
            )
            await user.insert()
            print(f"✓ Created admin {email}")
        else:
            if name:
                user.name = name
            user.password_hash = get_password_hash(password)
            user.role = "admin"
            user.status = "active"
            user.invite_token = None
            user.invite_expires_at = None
            user.update_timestamp()
            await user.save()
            print(f"✓ Reactivated {email} as admin")
    finally:
        await Database.close_db()


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email", help="admin email address")
    parser.add_argument("--name", help="display name (default: Administrator for new accounts)")
    parser.add_argument("--password", help="password (prompted when omitted)")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    try:
        validate_password_strength(password)
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    asyncio.run(create_admin(args.email.strip().lower(), args.name, password))
    return 0


if __name__ == "__main__":
    sys.exit(main())
