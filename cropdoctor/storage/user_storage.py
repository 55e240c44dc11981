"""
User Storage - user profiles and the signed-in session marker.

Profiles live at ``users/{user_id}/profile.json`` with an email -> user_id
index at ``users/email_index.json``. The session marker is a single small
file recording who is signed in on this installation.
"""

import asyncio
import json
import logging
from typing import Optional, Dict
from datetime import datetime, timezone

from ..models.user import SessionMarker, UserInDB
from .interface import StorageInterface

logger = logging.getLogger(__name__)


class UserStorage:
    """
    Manages persistent storage of user profiles.
    """

    def __init__(self, storage: StorageInterface):
        """
        Initialize user storage.

        Args:
            storage: StorageInterface implementation (typically LocalStorage)
        """
        self.storage = storage
        self.users_dir = "users"
        self._email_index_path = f"{self.users_dir}/email_index.json"
        self._index_lock = asyncio.Lock()

    def _profile_path(self, user_id: str) -> str:
        return f"{self.users_dir}/{user_id}/profile.json"

    async def _load_email_index(self) -> Dict[str, str]:
        content = await self.storage.load(self._email_index_path)
        if content is None:
            return {}
        return json.loads(content.decode('utf-8'))

    async def _save_profile(self, user: UserInDB) -> None:
        await self.storage.save(self._profile_path(user.user_id), user.model_dump_json(indent=2))

    async def get_user(self, user_id: str) -> Optional[UserInDB]:
        """
        Get user by user_id.

        Returns:
            Optional[UserInDB]: The profile, or None if not found
        """
        content = await self.storage.load(self._profile_path(user_id))
        if content is None:
            return None
        return UserInDB.model_validate_json(content)

    async def get_user_by_email(self, email: str) -> Optional[UserInDB]:
        index = await self._load_email_index()
        user_id = index.get(email.lower())
        if user_id is None:
            return None
        return await self.get_user(user_id)

    async def create_user(self, user_id: str, email: str, hashed_password: str) -> UserInDB:
        """
        Create a new user profile and index its email.

        Args:
            user_id: User ID (UUID)
            email: Email address, used as the sign-in name
            hashed_password: bcrypt hash

        Returns:
            UserInDB: Created profile
        """
        user = UserInDB(
            user_id=user_id,
            email=email,
            hashed_password=hashed_password,
            created_at=datetime.now(timezone.utc),
            last_login=None,
        )
        await self._save_profile(user)

        # Read-modify-write of the shared index
        async with self._index_lock:
            index = await self._load_email_index()
            index[email.lower()] = user_id
            await self.storage.save(self._email_index_path, json.dumps(index, indent=2))

        logger.info(f"User created: {user_id}")
        return user

    async def record_login(self, user: UserInDB) -> UserInDB:
        """Set ``last_login`` to now and persist the profile."""
        updated = user.model_copy(update={"last_login": datetime.now(timezone.utc)})
        await self._save_profile(updated)
        return updated


class SessionMarkerStore:
    """Reads and writes the "a user is logged in" marker file."""

    def __init__(self, storage: StorageInterface, path: str = "user_session.json"):
        self.storage = storage
        self.path = path

    async def read(self) -> Optional[SessionMarker]:
        content = await self.storage.load(self.path)
        if content is None:
            return None
        return SessionMarker.model_validate_json(content)

    async def write(self, marker: SessionMarker) -> None:
        await self.storage.save(self.path, marker.model_dump_json())

    async def clear(self) -> bool:
        return await self.storage.delete(self.path)
