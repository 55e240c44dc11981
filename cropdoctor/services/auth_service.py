"""
Auth Service - registration, sign-in and sign-out.

Signing in or out also clears the session cache so one user's cached
sessions are never served to the next.
"""

import logging
import uuid
from typing import Optional

from ..core.errors import Unauthenticated
from ..core.session_cache import SessionCache
from ..models.user import SessionMarker, Token, User
from ..storage.user_storage import SessionMarkerStore, UserStorage
from ..utils.auth import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


class EmailAlreadyRegistered(Exception):
    """Registration with an email that already has a profile."""


class AuthService:
    def __init__(self, users: UserStorage, marker: SessionMarkerStore, cache: SessionCache):
        self.users = users
        self.marker = marker
        self.cache = cache

    async def register(self, email: str, password: str) -> User:
        """Create a user profile. Raises EmailAlreadyRegistered on duplicates."""
        if await self.users.get_user_by_email(email) is not None:
            raise EmailAlreadyRegistered(email)

        user = await self.users.create_user(
            user_id=uuid.uuid4().hex,
            email=email,
            hashed_password=get_password_hash(password),
        )
        return User(**user.model_dump(exclude={"hashed_password"}))

    async def sign_in(self, email: str, password: str) -> Token:
        """
        Verify credentials, record the login and write the session marker.

        Raises:
            Unauthenticated: Unknown email or wrong password
        """
        user = await self.users.get_user_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.warning("Sign-in rejected")
            raise Unauthenticated("Incorrect email or password")

        user = await self.users.record_login(user)
        await self.marker.write(SessionMarker(uid=user.user_id, email=user.email, last_login=user.last_login))
        self.cache.clear()

        logger.info(f"User signed in: {user.user_id}")
        token = create_access_token(data={"sub": user.user_id, "email": user.email})
        return Token(access_token=token)

    async def sign_out(self) -> None:
        """Remove the session marker and forget cached sessions."""
        await self.marker.clear()
        self.cache.clear()
        logger.info("User signed out")

    async def current_session(self) -> Optional[SessionMarker]:
        return await self.marker.read()
