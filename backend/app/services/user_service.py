# 프로필 관리 서비스 레이어
# - 프로필 조회/수정 (username 중복 체크, preferences 부분 병합)
# - 비밀번호 변경 (현재 비밀번호 확인 후 다시 해싱)
# - 계정 삭제, 아바타 업로드

import asyncio
import logging
from typing import Optional

from beanie import PydanticObjectId
from fastapi import Depends

from ..core.config import Settings, get_settings
from ..core.exceptions import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from ..core.security import get_password_hash, verify_password
from ..repositories.user_repository import UserRepository
from ..schemas.user_schema import ProfileUpdate
from . import image_service

logger = logging.getLogger(__name__)

ALLOWED_AVATAR_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif"}
MAX_AVATAR_BYTES = 5 * 1024 * 1024


def validate_avatar(content: Optional[bytes], content_type: Optional[str]) -> None:
    # 외부 저장소에 보내기 전에 형식/크기를 먼저 검사합니다
    if content is None:
        raise BadRequestError("No file uploaded")
    if content_type not in ALLOWED_AVATAR_TYPES:
        raise BadRequestError("Invalid file type. Only JPEG, PNG, WebP, and GIF are allowed")
    if len(content) > MAX_AVATAR_BYTES:
        raise BadRequestError("File too large. Maximum size is 5MB")


class UserService:
    def __init__(self, repo: UserRepository, settings: Settings):
        self.repo = repo
        self.settings = settings

    async def get_profile(self, user_id: PydanticObjectId):
        user = await self.repo.get(str(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user_id: PydanticObjectId, payload: ProfileUpdate):
        user = await self.get_profile(user_id)
        changes = payload.model_dump(exclude_unset=True)

        username = changes.get("username")
        if username and username != user.username:
            if await self.repo.get_by_username(username, exclude_id=user.id):
                raise ConflictError("Username is already taken")
            user.username = username

        if changes.get("bio") is not None:
            user.bio = changes["bio"]

        prefs = changes.get("preferences")
        if prefs:
            # 보낸 항목만 덮어쓰고 나머지는 기존 값 유지 (얕은 병합)
            updates = {k: v for k, v in prefs.items() if v is not None}
            user.preferences = user.preferences.model_copy(update=updates)

        return await self.repo.save(user)

    async def change_password(self, user_id: PydanticObjectId, current_password: str, new_password: str) -> None:
        user = await self.get_profile(user_id)
        if not verify_password(current_password, user.hashed_password):
            raise UnauthorizedError("Current password is incorrect")
        user.hashed_password = get_password_hash(new_password)
        await self.repo.save(user)
        logger.info(f"[UserService] Password changed for user {user_id}")

    async def delete_account(self, user_id: PydanticObjectId) -> None:
        # 사용자 문서만 삭제합니다 (작성한 꿈은 함께 지우지 않음)
        user = await self.get_profile(user_id)
        await self.repo.delete(user)
        logger.info(f"[UserService] Account deleted: {user_id}")

    async def upload_avatar(
        self,
        user_id: PydanticObjectId,
        content: Optional[bytes],
        content_type: Optional[str],
        filename: Optional[str] = None,
    ):
        validate_avatar(content, content_type)
        user = await self.get_profile(user_id)
        # requests 는 동기 호출이라 워커 스레드에서 업로드
        url = await asyncio.to_thread(
            image_service.upload_image, self.settings, content, content_type, filename=filename
        )
        user.avatar = url
        return await self.repo.save(user)


def get_user_service(
    repo: UserRepository = Depends(UserRepository),
    settings: Settings = Depends(get_settings),
) -> UserService:
    return UserService(repo, settings)
