# 사용자 저장소 레이어
# - 데이터 접근(조회/생성/수정/삭제)만 담당 (서비스 로직 분리)
# - 서비스의 중복 체크를 동시에 통과한 요청은 unique 인덱스에서 걸리므로, 그 에러를 409 로 바꿉니다

from contextlib import contextmanager
from typing import Optional

from beanie import PydanticObjectId
from pymongo.errors import DuplicateKeyError

from ..core.exceptions import ConflictError
from ..models.user import User, utcnow

DUPLICATE_MESSAGES = {
    "email": "Email is already registered",
    "username": "Username is already taken",
}


@contextmanager
def duplicate_key_as_conflict():
    try:
        yield
    except DuplicateKeyError as e:
        key_pattern = (e.details or {}).get("keyPattern") or {}
        field = next((k for k in key_pattern if k in DUPLICATE_MESSAGES), None)
        raise ConflictError(DUPLICATE_MESSAGES.get(field, "Duplicate value")) from e


class UserRepository:
    async def get_by_email(self, email: str) -> Optional[User]:
        return await User.find_one({"email": email.lower()})

    async def get_by_username(self, username: str, exclude_id: Optional[PydanticObjectId] = None) -> Optional[User]:
        query = {"username": username}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return await User.find_one(query)

    async def create(self, username: str, email: str, hashed_password: str) -> User:
        user = User(username=username, email=email.lower(), hashed_password=hashed_password)
        with duplicate_key_as_conflict():
            return await user.insert()

    async def get(self, user_id: str) -> Optional[User]:
        return await User.get(PydanticObjectId(user_id))

    async def save(self, user: User) -> User:
        user.updated_at = utcnow()
        with duplicate_key_as_conflict():
            await user.save()
        return user

    async def delete(self, user: User) -> None:
        await user.delete()
