# 인증 서비스 레이어
# - 이메일/username 중복 체크, 회원가입 (비밀번호 검증 -> 해싱 -> 저장)
# - 로그인 (비밀번호 검증, JWT 토큰 발급)

import logging

from fastapi import Depends

from ..core.config import Settings, get_settings
from ..core.exceptions import ConflictError, UnauthorizedError
from ..core.security import create_access_token, get_password_hash, verify_password
from ..models.user import User
from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, repo: UserRepository, settings: Settings):
        self.repo = repo
        self.settings = settings

    async def register(self, username: str, email: str, password: str) -> User:
        if await self.repo.get_by_email(email):
            raise ConflictError("Email is already registered")
        if await self.repo.get_by_username(username):
            raise ConflictError("Username is already taken")
        # 비밀번호는 스키마에서 규칙 검증을 마친 상태, 여기서 해싱 후 저장
        hashed = get_password_hash(password)
        user = await self.repo.create(username, email, hashed)
        logger.info(f"[Auth] New user registered: {user.id}")
        return user

    async def login(self, email: str, password: str) -> User:
        user = await self.repo.get_by_email(email)
        # 이메일이 없을 때와 비밀번호가 틀릴 때 같은 메시지를 돌려줍니다
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("[Auth] Failed login attempt")
            raise UnauthorizedError("Invalid email or password")
        return user

    async def get_user(self, user_id) -> User:
        user = await self.repo.get(str(user_id))
        if not user:
            raise UnauthorizedError("User not found")
        return user

    def issue_token(self, user: User) -> str:
        return create_access_token(str(user.id), user.email, self.settings)


def get_auth_service(
    repo: UserRepository = Depends(UserRepository),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(repo, settings)
