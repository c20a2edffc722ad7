# 보안 유닛 테스트 (DB 의존성 없음)
from datetime import timedelta

import jwt
import pytest

from app.core.exceptions import UnauthorizedError
from app.core.security import (
    create_access_token,
    create_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_and_verify():
    pw = "S3cureDream"
    hashed = get_password_hash(pw)
    assert hashed != pw
    assert verify_password(pw, hashed)
    assert not verify_password("wrong", hashed)


def test_create_access_token(settings):
    token = create_access_token("user123", "a@b.com", settings)
    decoded = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    assert decoded["sub"] == "user123"
    assert decoded["email"] == "a@b.com"
    assert decoded["type"] == "access"


def test_decode_expired_token(settings):
    token = create_token({"sub": "user123", "type": "access"}, timedelta(seconds=-1), settings)
    with pytest.raises(UnauthorizedError) as exc:
        decode_access_token(token, settings)
    assert exc.value.message == "Token expired"
    assert exc.value.status_code == 401


def test_decode_token_signed_with_other_key(settings):
    token = jwt.encode({"sub": "user123", "type": "access"}, "another-secret", algorithm="HS256")
    with pytest.raises(UnauthorizedError) as exc:
        decode_access_token(token, settings)
    assert exc.value.message == "Invalid token"


def test_decode_token_with_wrong_type(settings):
    token = create_token({"sub": "user123", "type": "refresh"}, timedelta(minutes=5), settings)
    with pytest.raises(UnauthorizedError) as exc:
        decode_access_token(token, settings)
    assert exc.value.message == "Invalid token"
