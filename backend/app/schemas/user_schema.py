# 사용자/인증 요청/응답 스키마 정의 (Pydantic 모델)

import re
from typing import Literal, Optional

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from .dream_schema import CamelModel

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"
_PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def validate_password_strength(password: str) -> str:
    # 비밀번호 규칙: 8자 이상 + 소문자/대문자/숫자 각각 1개 이상
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not _PASSWORD_RULE.match(password):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )
    return password


class LowercaseEmailModel(CamelModel):
    email: EmailStr

    @field_validator("email", mode="after")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class UserCreate(LowercaseEmailModel):
    username: str = Field(min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class UserLogin(LowercaseEmailModel):
    password: str = Field(min_length=1)


class PreferencesUpdate(CamelModel):
    theme: Optional[Literal["dark", "light"]] = None
    email_notifications: Optional[bool] = None
    weekly_digest: Optional[bool] = None


class ProfileUpdate(CamelModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    bio: Optional[str] = Field(default=None, max_length=500)
    preferences: Optional[PreferencesUpdate] = None


class PasswordChange(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str
    confirm_new_password: Optional[str] = None

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, v: str) -> str:
        return validate_password_strength(v)

    @field_validator("confirm_new_password")
    @classmethod
    def check_confirmation(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if v is not None and v != info.data.get("new_password"):
            raise ValueError("Passwords do not match")
        return v


def user_to_public(user) -> dict:
    # 비밀번호 해시는 절대 내보내지 않습니다
    prefs = user.preferences
    return {
        "_id": str(user.id),
        "username": user.username,
        "email": user.email,
        "avatar": user.avatar,
        "bio": user.bio,
        "preferences": {
            "theme": prefs.theme,
            "emailNotifications": prefs.email_notifications,
            "weeklyDigest": prefs.weekly_digest,
        },
        "isVerified": user.is_verified,
        "createdAt": user.created_at,
        "updatedAt": user.updated_at,
    }
