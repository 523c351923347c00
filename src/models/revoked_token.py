"""Revoked token database model.

Tokens are stateless JWTs; logging out or refreshing records the token id
here so it is rejected until it would have expired anyway.
"""

from sqlalchemy import Column, DateTime, String

from .base import Base


class RevokedTokenModel(Base):
    __tablename__ = "revoked_tokens"

    jti = Column(String, primary_key=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
