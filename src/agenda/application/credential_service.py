"""Registration, uniqueness checks, and credential validation."""

import logging

from agenda.application.dto import EmailTaken, Registered, StoreFailure, UsernameTaken
from agenda.application.ports import (
    DuplicateKeyError,
    StoreError,
    StorePermissionError,
    UserRepository,
)
from agenda.application.session import Session
from agenda.domain import User, looks_like_email, normalize_identifier

logger = logging.getLogger(__name__)


class CredentialService:
    """
    User records with case-insensitive unique username and email.

    The availability checks and the write are separate store calls with no
    transaction between them; a store-level unique constraint (when the
    adapter has one) is reported the same way as a failed pre-check.
    """

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    async def register(
        self, user: User
    ) -> Registered | UsernameTaken | EmailTaken | StoreFailure:
        """Store a new user. Fails if the username or email is already registered."""
        try:
            if not await self.is_username_available(user.username):
                return UsernameTaken(username=user.username)
            if not await self.is_email_available(user.email):
                return EmailTaken(email=user.email)
            user_id = await self._users.add(user)
        except DuplicateKeyError as e:
            if e.field == "email":
                return EmailTaken(email=user.email)
            return UsernameTaken(username=user.username)
        except StoreError as e:
            logger.warning("Registration failed for %s: %s", user.username, e)
            return StoreFailure(message=str(e))
        logger.info("Registered user %s", user.username)
        return Registered(user_id=user_id, username=user.username, email=user.email)

    async def is_username_available(self, username: str) -> bool:
        """True if no user has this username (case-insensitive).

        A permission error from the store is treated as available so a
        misconfigured store does not block registration.
        """
        try:
            return await self._users.find_by_username(normalize_identifier(username)) is None
        except StorePermissionError as e:
            logger.warning("Username check denied, assuming available: %s", e)
            return True

    async def is_email_available(self, email: str) -> bool:
        """True if no user has this email (case-insensitive). Permission errors count as available."""
        try:
            return await self._users.find_by_email(normalize_identifier(email)) is None
        except StorePermissionError as e:
            logger.warning("Email check denied, assuming available: %s", e)
            return True

    async def validate_credentials(self, username: str, password: str) -> bool:
        """True iff the stored password for the normalized username equals password.

        Store failures deny the login.
        """
        try:
            user = await self._users.find_by_username(normalize_identifier(username))
        except StoreError as e:
            logger.warning("Credential check failed, denying login: %s", e)
            return False
        if user is None:
            return False
        return user.password == password

    async def get_user_by_username(self, username: str) -> User | None:
        return await self._users.find_by_username(normalize_identifier(username))

    async def get_user_by_email(self, email: str) -> User | None:
        return await self._users.find_by_email(normalize_identifier(email))

    async def resolve(self, identifier: str) -> User | None:
        """Look up by email when the identifier contains '@', else by username."""
        if looks_like_email(identifier):
            return await self.get_user_by_email(identifier)
        return await self.get_user_by_username(identifier)

    async def get_current_user(self, session: Session) -> User | None:
        """Return the user behind the session identifier, or None."""
        identifier = session.current_identifier()
        if identifier is None:
            return None
        return await self.resolve(identifier)

    async def list_all_users(self) -> list[User]:
        """Every stored user. Administrative use."""
        return await self._users.list_all()

    async def update_profile_image(self, user_id: str, image: str | None) -> bool:
        """Set or clear a user's profile image. False if the user does not exist."""
        return await self._users.set_profile_image(user_id, image or None)

    async def clear_all_users(self) -> int:
        """Delete every user record. Administrative use."""
        removed = await self._users.clear_all()
        logger.info("Removed %d registered users", removed)
        return removed
