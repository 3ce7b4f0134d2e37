#!/usr/bin/env python3
"""
Create an administrator account, or promote an existing user to ADMIN.
Usage: python make_admin.py EMAIL [--create --first-name NAME --last-name NAME]

The password for a new account is read from ADMIN_PASSWORD or prompted for,
and must satisfy the strong password policy.
"""

import argparse
import asyncio
import getpass
import os
import sys
from typing import Optional

from events_api.core.config import get_settings
from events_api.core.security import PasswordHasher, validate_password_strength
from events_api.db.database import build_engine, build_session_factory
from events_api.domain.entities.user import User
from events_api.domain.enums import UserRole
from events_api.domain.errors import DomainError
from events_api.domain.value_objects.email import Email
from events_api.infrastructure.repositories.unit_of_work_impl import UnitOfWorkImpl


async def make_user_admin(
    session_factory,
    password_hasher: PasswordHasher,
    email: str,
    password: Optional[str] = None,
    first_name: str = "Site",
    last_name: str = "Admin",
) -> User:
    """Promote ``email`` to ADMIN, creating the account when a password is given."""
    address = Email(email)
    session = session_factory()
    try:
        unit_of_work = UnitOfWorkImpl(session)
        async with unit_of_work:
            user = await unit_of_work.users.get_by_email(address)
            if user is None:
                if password is None:
                    raise LookupError(f"User with email '{address}' not found")
                validate_password_strength(password, strong=True)
                user = User.create(
                    email=address,
                    hashed_password=password_hasher.hash(password),
                    first_name=first_name,
                    last_name=last_name,
                    role=UserRole.ADMIN,
                )
                await unit_of_work.users.add(user)
                action = "user.created"
            else:
                user.change_role(UserRole.ADMIN)
                await unit_of_work.users.update(user)
                action = "user.role_changed"
            await unit_of_work.audit_logs.record(
                action,
                resource_type="user",
                resource_id=str(user.id),
                details={"role": UserRole.ADMIN.value, "source": "make_admin"},
            )
            await unit_of_work.commit()
        return user
    finally:
        session.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("email")
    parser.add_argument("--create", action="store_true", help="create the account if it does not exist")
    parser.add_argument("--first-name", default="Site")
    parser.add_argument("--last-name", default="Admin")
    args = parser.parse_args(argv)

    password = None
    if args.create:
        password = os.environ.get("ADMIN_PASSWORD") or getpass.getpass("Password for the new admin: ")

    settings = get_settings()
    engine = build_engine(settings)
    try:
        user = asyncio.run(make_user_admin(
            build_session_factory(engine),
            PasswordHasher(settings.BCRYPT_ROUNDS),
            args.email,
            password=password,
            first_name=args.first_name,
            last_name=args.last_name,
        ))
    except (LookupError, ValueError) as e:
        print(f"❌ {e}")
        return 1
    except DomainError as e:
        print(f"❌ {e.message}")
        return 1
    finally:
        engine.dispose()

    print(f"✅ {user.email} is now an admin")
    return 0


if __name__ == "__main__":
    sys.exit(main())
