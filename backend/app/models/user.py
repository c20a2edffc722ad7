# User 도메인 모델 (Beanie Document)
# - username / email 은 unique 인덱스
# - 비밀번호는 해시만 저장 (응답에는 절대 포함하지 않음)
# - 해싱은 ORM 훅이 아니라 서비스 레이어에서 명시적으로 수행 (services/auth_service.py)

from datetime import datetime, timezone
from typing import Literal

from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class UserPreferences(BaseModel):
    theme: Literal["dark", "light"] = "dark"
    email_notifications: bool = True
    weekly_digest: bool = False


class User(Document):
    username: Indexed(str, unique=True)  # 중복 방지 인덱스
    email: Indexed(EmailStr, unique=True)  # 소문자로 정규화해서 저장
    hashed_password: str = Field(repr=False)
    avatar: str = ""
    bio: str = Field(default="", max_length=500)
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    is_verified: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "users"  # 컬렉션명
        validate_on_save = True
