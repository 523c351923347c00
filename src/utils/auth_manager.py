"""Authentication: credentials, token issuance and revocation.

Tokens are HS256 JWTs whose subject is the user id. Each token has a ``jti``
so it can be revoked, and an ``orig_iat`` marking the start of the refresh
window, which is carried over to every refreshed token.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, Tuple

import pytz
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from config import (
    JWT_ALGORITHM,
    JWT_REFRESH_TTL_MINUTES,
    JWT_SECRET_KEY,
    JWT_TTL_MINUTES,
)
from core.exceptions import UnauthorizedError
from models.revoked_token import RevokedTokenModel
from models.user import UserModel
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Invalid email or password."


class AuthManager:
    """Issues, validates, refreshes and revokes bearer tokens."""

    def __init__(self, db: Session, users: UserManager):
        """Initialize AuthManager.

        Args:
            db: SQLAlchemy Session.
            users: User directory used to resolve credentials and subjects.
        """
        self.db = db
        self.users = users

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return JWT_TTL_MINUTES * 60

    def create_access_token(self, user_id: str, orig_iat: int = None) -> str:
        """Create a signed JWT for ``user_id``.

        Args:
            user_id: Subject of the token.
            orig_iat: Start of the refresh window as a UNIX timestamp;
                defaults to now.

        Returns:
            Encoded JWT token string.
        """
        now = datetime.now(pytz.utc)
        claims = {
            "sub": user_id,
            "iat": now,
            "exp": now + timedelta(minutes=JWT_TTL_MINUTES),
            "jti": uuid.uuid4().hex,
            "orig_iat": orig_iat if orig_iat is not None else int(now.timestamp()),
        }
        return jwt.encode(claims, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)

    def decode_token(self, token: str, verify_exp: bool = True) -> Dict[str, Any]:
        """Decode and check a token.

        Args:
            token: Encoded JWT.
            verify_exp: Whether an expired token is rejected.

        Returns:
            The token claims.

        Raises:
            UnauthorizedError: If the token is expired, malformed, badly
                signed or revoked.
        """
        try:
            payload = jwt.decode(
                token,
                JWT_SECRET_KEY,
                algorithms=[JWT_ALGORITHM],
                options={"verify_exp": verify_exp},
            )
        except ExpiredSignatureError:
            raise UnauthorizedError("Token expired")
        except JWTError:
            raise UnauthorizedError("Invalid token")

        if not payload.get("sub") or not payload.get("jti"):
            raise UnauthorizedError("Invalid token")
        if self.is_revoked(payload["jti"]):
            raise UnauthorizedError("Token has been revoked")
        return payload

    def is_revoked(self, jti: str) -> bool:
        return self.db.get(RevokedTokenModel, jti) is not None

    def _revoke(self, payload: Dict[str, Any]) -> None:
        now = datetime.now(pytz.utc)
        # Keep the entry until nothing could accept the token anymore
        refresh_deadline = datetime.fromtimestamp(
            int(payload.get("orig_iat", payload["exp"])), pytz.utc
        ) + timedelta(minutes=JWT_REFRESH_TTL_MINUTES)
        expires_at = max(datetime.fromtimestamp(int(payload["exp"]), pytz.utc), refresh_deadline)

        self.db.query(RevokedTokenModel).filter(RevokedTokenModel.expires_at < now).delete(
            synchronize_session=False
        )
        self.db.add(RevokedTokenModel(jti=payload["jti"], expires_at=expires_at))

    def login(self, email: str, password: str) -> Tuple[str, UserModel, int]:
        """Check credentials and issue a token.

        Returns:
            Tuple of (token, user, expires_in seconds).

        Raises:
            UnauthorizedError: If the credentials do not match.
        """
        user = self.users.get_user_by_email(email)
        if user is None or not self.users.verify_password(password, user.password_hash):
            logger.info("Failed login for %s", email)
            raise UnauthorizedError(LOGIN_FAILED_MESSAGE)

        token = self.create_access_token(user.id)
        logger.info("User %s logged in", user.id)
        return token, user, self.expires_in

    def current_user(self, token: str) -> UserModel:
        """Resolve a bearer token to its user.

        Raises:
            UnauthorizedError: If the token is invalid or the user is gone.
        """
        payload = self.decode_token(token)
        user = self.users.get_user_by_id(payload["sub"])
        if user is None:
            raise UnauthorizedError("User not found")
        return user

    def refresh(self, token: str) -> str:
        """Exchange a token for a new one.

        An expired token is accepted while its refresh window is open. The
        old token is revoked.

        Raises:
            UnauthorizedError: If the token is invalid, revoked, or past its
                refresh window.
        """
        payload = self.decode_token(token, verify_exp=False)
        orig_iat = int(payload.get("orig_iat", payload.get("iat", 0)))
        window_end = orig_iat + JWT_REFRESH_TTL_MINUTES * 60
        if datetime.now(pytz.utc).timestamp() > window_end:
            raise UnauthorizedError("Token can no longer be refreshed")

        self._revoke(payload)
        self.db.commit()
        logger.info("Refreshed token for user %s", payload["sub"])
        return self.create_access_token(payload["sub"], orig_iat=orig_iat)

    def logout(self, token: str) -> None:
        """Revoke a token.

        Raises:
            UnauthorizedError: If the token is invalid or already revoked.
        """
        payload = self.decode_token(token)
        self._revoke(payload)
        self.db.commit()
        logger.info("User %s logged out", payload["sub"])
