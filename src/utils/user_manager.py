"""User management utilities.

This module provides user management functionality including user storage,
password hashing and lookups.
"""

import logging
from typing import Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from config import BCRYPT_ROUNDS
from core.exceptions import NotFoundError, ValidationError
from models.role import RoleModel
from models.user import UserModel

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        password_bytes = password_bytes[:BCRYPT_MAX_BYTES]
    return password_bytes


class UserManager:
    """Manages user data persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password.
            hashed_password: Stored bcrypt hash.

        Returns:
            True if password matches, False otherwise.
        """
        try:
            return bcrypt.checkpw(
                _password_bytes(plain_password), hashed_password.encode("utf-8")
            )
        except ValueError as e:
            # Malformed hash in storage
            logger.error("Password verification error: %s", e)
            return False

    def create_user(self, name: str, email: str, password: str, role_slug: str) -> UserModel:
        """Create a new user under the role identified by ``role_slug``.

        Args:
            name: Display name.
            email: Unique email address.
            password: Plain text password.
            role_slug: Slug of the role to assign.

        Returns:
            Created UserModel.

        Raises:
            NotFoundError: If the role does not exist.
            ValidationError: If the email is already registered.
        """
        role = self.db.query(RoleModel).filter(RoleModel.slug == role_slug).first()
        if role is None:
            raise NotFoundError(f"No role found with type '{role_slug}'.")

        if self.get_user_by_email(email) is not None:
            raise ValidationError("The email has already been taken.")

        user = UserModel(
            name=name,
            email=email,
            password_hash=self.hash_password(password),
            role_id=role.id,
        )

        # Two concurrent registrations can both pass the check above; the
        # unique constraint on email settles it
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError as e:
            self.db.rollback()
            if "email" in str(e).lower() or "unique" in str(e).lower():
                raise ValidationError("The email has already been taken.") from e
            raise

        logger.info("Created user %s with role %s", user.id, role.slug)
        return user

    def get_user_by_email(self, email: str) -> Optional[UserModel]:
        """Get a user by email.

        Args:
            email: Email to look up.

        Returns:
            UserModel if found, None otherwise.
        """
        return (
            self.db.query(UserModel)
            .options(joinedload(UserModel.role))
            .filter(UserModel.email == email)
            .first()
        )

    def get_user_by_id(self, user_id: str) -> Optional[UserModel]:
        """Get a user by id.

        Args:
            user_id: User id to look up.

        Returns:
            UserModel if found, None otherwise.
        """
        return (
            self.db.query(UserModel)
            .options(joinedload(UserModel.role))
            .filter(UserModel.id == user_id)
            .first()
        )

    def count_users_with_role(self, role_id: str) -> int:
        return self.db.query(UserModel).filter(UserModel.role_id == role_id).count()
