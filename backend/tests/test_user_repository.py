# unique 인덱스 충돌 -> 409 변환 테스트 (DB 없이 save 를 모킹)
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import ConflictError
from app.repositories.user_repository import UserRepository, duplicate_key_as_conflict


def _duplicate(field):
    return DuplicateKeyError("E11000 duplicate key error", code=11000,
                             details={"keyPattern": {field: 1}, "keyValue": {field: "x"}})


def test_concurrent_username_change_becomes_conflict():
    user = MagicMock()
    user.save = AsyncMock(side_effect=_duplicate("username"))
    with pytest.raises(ConflictError) as exc:
        asyncio.run(UserRepository().save(user))
    assert exc.value.status_code == 409
    assert exc.value.message == "Username is already taken"


def test_duplicate_email_becomes_conflict():
    with pytest.raises(ConflictError) as exc:
        with duplicate_key_as_conflict():
            raise _duplicate("email")
    assert exc.value.message == "Email is already registered"


def test_other_errors_pass_through():
    with pytest.raises(ValueError):
        with duplicate_key_as_conflict():
            raise ValueError("boom")
