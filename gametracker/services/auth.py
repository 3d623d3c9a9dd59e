from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gametracker.core.errors import (
    AuthError,
    ConflictError,
    ErrorCode,
    PersistenceError,
)
from gametracker.core.security import PasswordHasher, TokenService
from gametracker.models.user import User


logger = logging.getLogger(__name__)


class AuthService:
    """Registration and login on top of one request-scoped session."""

    def __init__(self, session: AsyncSession, hasher: PasswordHasher, tokens: TokenService):
        self.session = session
        self.hasher = hasher
        self.tokens = tokens

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        try:
            existing = await self.session.scalar(
                select(func.count())
                .select_from(User)
                .where(or_(User.username == username, User.email == email))
            )
        except SQLAlchemyError:
            logger.exception("Existence check failed for username=%s", username)
            raise PersistenceError("Error checking existing user", ErrorCode.LOOKUP_FAILED)

        if existing:
            logger.info("Registration rejected, username or email taken: %s", username)
            raise ConflictError()

        now = datetime.now(timezone.utc)
        user = User(
            username=username,
            email=email,
            first_name=first_name,
            last_name=last_name,
            created_at=now,
            updated_at=now,
        )
        user.password = self.hasher.hash(password)

        self.session.add(user)
        try:
            await self.session.commit()
            await self.session.refresh(user)
        except IntegrityError:
            # lost the race against a concurrent registration
            await self.session.rollback()
            logger.info("Registration hit unique constraint: %s", username)
            raise ConflictError()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception("Failed to persist user %s", username)
            raise PersistenceError("Error creating user", ErrorCode.PERSIST_FAILED)

        logger.info("Registered user id=%s username=%s", user.id, user.username)
        return self._without_password(user)

    async def login(self, username_or_email: str, password: str) -> tuple[str, User]:
        # the same value is matched against both columns
        try:
            user = await self.session.scalar(
                select(User)
                .where(or_(User.username == username_or_email, User.email == username_or_email))
                .order_by(User.id)
                .limit(1)
            )
        except SQLAlchemyError:
            logger.exception("User lookup failed for %s", username_or_email)
            raise PersistenceError("Error looking up user", ErrorCode.LOOKUP_FAILED)

        if user is None:
            logger.info("Login failed, no such user: %s", username_or_email)
            raise AuthError("Invalid credentials", ErrorCode.NOT_FOUND)

        if not self.hasher.verify(password, user.password):
            logger.info("Login failed, bad password for user id=%s", user.id)
            raise AuthError("Invalid credentials", ErrorCode.BAD_CREDENTIALS)

        token = self.tokens.issue(user.id, user.username)
        logger.info("User id=%s logged in", user.id)
        return token, self._without_password(user)

    def _without_password(self, user: User) -> User:
        # detach first so clearing the hash is never flushed
        self.session.expunge(user)
        user.password = ""
        return user
