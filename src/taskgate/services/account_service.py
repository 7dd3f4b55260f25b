"""Account service — credential storage and verification.

Learn: This is the credential store behind registration, login and the
auth gate. The rules that matter here:

1. Usernames are unique. The existence check runs before the insert,
   and the unique constraint catches the race where two registrations
   pass the check at the same time. Both paths raise UsernameTakenError.
2. Login failures look identical whether the username is unknown or the
   password is wrong (InvalidCredentialsError, same timing).
3. Password hashing is CPU-bound, so it runs in the threadpool instead
   of blocking the event loop.
"""

from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from taskgate.auth.password import (
    dummy_verify,
    hash_password,
    verify_password,
)
from taskgate.db.models import Account

logger = structlog.get_logger()


class UsernameTakenError(Exception):
    """Raised when registering a username that already exists."""
    pass


class InvalidCredentialsError(Exception):
    """Raised when a username/password pair does not match an account."""
    pass


class AccountService:
    """Business logic for account registration and lookup."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Register ────────────────────────────────────────

    async def register(self, username: str, password: str) -> Account:
        """Create an account with a hashed password."""
        if await self.get_by_username(username) is not None:
            raise UsernameTakenError(username)

        password_hash = await run_in_threadpool(hash_password, password)
        account = Account(username=username, password_hash=password_hash)
        self.db.add(account)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost the race against a concurrent registration.
            await self.db.rollback()
            raise UsernameTakenError(username)

        await self.db.refresh(account)
        logger.info("account.registered", account_id=account.id)
        return account

    # ─── Verify ──────────────────────────────────────────

    async def verify(self, username: str, password: str) -> Account:
        """Return the account for a matching username/password pair.

        Raises InvalidCredentialsError for an unknown username and for a
        wrong password alike.
        """
        account = await self.get_by_username(username)
        if account is None:
            await run_in_threadpool(dummy_verify, password)
            raise InvalidCredentialsError()

        if not await run_in_threadpool(verify_password, password, account.password_hash):
            raise InvalidCredentialsError()

        return account

    # ─── Read ────────────────────────────────────────────

    async def get_account(self, account_id: int) -> Optional[Account]:
        result = await self.db.execute(
            select(Account).where(Account.id == account_id)
        )
        return result.scalars().first()

    async def get_by_username(self, username: str) -> Optional[Account]:
        result = await self.db.execute(
            select(Account).where(Account.username == username)
        )
        return result.scalars().first()

    # ─── Delete ──────────────────────────────────────────

    async def delete_account(self, account_id: int) -> bool:
        """Delete an account. Its tasks go with it (ON DELETE CASCADE).

        Returns False when no such account exists.
        """
        result = await self.db.execute(
            delete(Account).where(Account.id == account_id)
        )
        await self.db.commit()
        deleted = result.rowcount == 1
        if deleted:
            logger.info("account.deleted", account_id=account_id)
        return deleted
