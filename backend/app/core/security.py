# 보안/인증 유틸리티
# - 비밀번호 해싱/검증
# - JWT 토큰 생성/검증
# - 세션 쿠키 설정/삭제
# - 현재 사용자 ID 가져오기(의존성)

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from beanie import PydanticObjectId
from bson.errors import InvalidId
from fastapi import Depends, Request, Response
from passlib.context import CryptContext

from .config import Settings, get_settings
from .exceptions import UnauthorizedError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_token(subject: dict, expires_delta: timedelta, settings: Settings) -> str:
    now = datetime.now(tz=timezone.utc)
    payload = {
        "exp": now + expires_delta,
        "iat": now,
        "nbf": now,
        **subject,
    }
    token = jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return token


def create_access_token(user_id: str, email: str, settings: Settings) -> str:
    # 토큰은 (userId, email) 쌍에 묶입니다
    return create_token(
        {"sub": str(user_id), "email": email, "type": "access"},
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        settings,
    )


def decode_access_token(token: str, settings: Settings) -> dict:
    """토큰을 검증하고 payload를 돌려줍니다.

    만료와 위조를 메시지로만 구분하고, 클라이언트가 받는 상태 코드는 둘 다 401입니다.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid token")

    if payload.get("type") != "access" or not payload.get("sub"):
        raise UnauthorizedError("Invalid token")
    return payload


def set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        max_age=settings.COOKIE_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_auth_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


async def get_current_user_id(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> PydanticObjectId:
    # 쿠키의 JWT를 파싱해서 사용자 ID만 꺼냅니다 (DB 조회 없음)
    token: Optional[str] = request.cookies.get(settings.COOKIE_NAME)
    if not token:
        raise UnauthorizedError("Authentication required")
    payload = decode_access_token(token, settings)
    try:
        return PydanticObjectId(payload["sub"])
    except (InvalidId, TypeError):
        raise UnauthorizedError("Invalid token")
