import uuid
from datetime import datetime, timedelta

import pytest
import pytz
from jose import jwt

from config import JWT_ALGORITHM, JWT_REFRESH_TTL_MINUTES, JWT_SECRET_KEY
from core.exceptions import UnauthorizedError
from utils.auth_manager import AuthManager
from utils.user_manager import UserManager


def _token(sub, issued_minutes_ago, ttl_minutes, orig_iat=None):
    issued = datetime.now(pytz.utc) - timedelta(minutes=issued_minutes_ago)
    claims = {
        "sub": sub,
        "iat": issued,
        "exp": issued + timedelta(minutes=ttl_minutes),
        "jti": uuid.uuid4().hex,
        "orig_iat": orig_iat if orig_iat is not None else int(issued.timestamp()),
    }
    return jwt.encode(claims, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


@pytest.fixture
def auth(db):
    return AuthManager(db, UserManager(db))


def test_login_and_resolve(auth, make_user):
    user = make_user("Alice")
    token, logged_in, expires_in = auth.login("alice@example.com", "secret123")

    assert logged_in.id == user.id
    assert expires_in == 3600
    assert auth.current_user(token).id == user.id


def test_expired_token_is_rejected(auth, make_user):
    user = make_user("Alice")
    token = _token(user.id, issued_minutes_ago=120, ttl_minutes=60)

    with pytest.raises(UnauthorizedError) as exc:
        auth.current_user(token)
    assert exc.value.message == "Token expired"


def test_expired_token_refreshes_inside_window(auth, make_user):
    user = make_user("Alice")
    token = _token(user.id, issued_minutes_ago=120, ttl_minutes=60)

    new_token = auth.refresh(token)

    assert auth.current_user(new_token).id == user.id
    old = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM],
                     options={"verify_exp": False})
    new = jwt.decode(new_token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    assert new["orig_iat"] == old["orig_iat"]
    assert auth.is_revoked(old["jti"])


def test_refresh_after_window_closes(auth, make_user):
    user = make_user("Alice")
    token = _token(user.id, issued_minutes_ago=JWT_REFRESH_TTL_MINUTES + 120, ttl_minutes=60)

    with pytest.raises(UnauthorizedError):
        auth.refresh(token)


def test_token_signed_with_other_key(auth, make_user):
    user = make_user("Alice")
    token = jwt.encode(
        {"sub": user.id, "jti": "x", "exp": datetime.now(pytz.utc) + timedelta(minutes=5)},
        "another-secret",
        algorithm=JWT_ALGORITHM,
    )
    with pytest.raises(UnauthorizedError):
        auth.current_user(token)


def test_token_of_deleted_user(auth, db, make_user):
    user = make_user("Alice")
    token = auth.create_access_token(user.id)
    db.delete(user)
    db.commit()

    with pytest.raises(UnauthorizedError):
        auth.current_user(token)
