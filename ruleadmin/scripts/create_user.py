"""Bootstrap an administrator account.

Usage::

    python -m ruleadmin.scripts.create_user admin@example.com 'a-long-password'
"""

import argparse
import asyncio
import sys

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ruleadmin.core.config import settings
from ruleadmin.core.exceptions import RuleAdminError
from ruleadmin.repositories.session_repository import SessionRepository
from ruleadmin.repositories.user_repository import UserRepository
from ruleadmin.services.auth_service import AuthService


async def create_user(email: str, password: str) -> int:
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    try:
        async with session_maker() as session:
            service = AuthService(
                user_repo=UserRepository(session),
                session_repo=SessionRepository(session),
            )
            try:
                user = await service.register(email, password)
            except RuleAdminError as exc:
                print(f"Could not create user: {exc.detail}", file=sys.stderr)
                return 1
            print(f"Created user {user.email} ({user.id})")
            return 0
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args(argv)
    return asyncio.run(create_user(args.email, args.password))


if __name__ == "__main__":
    sys.exit(main())
