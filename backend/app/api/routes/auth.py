# 인증 라우터
# - 회원가입: POST /api/auth/register
# - 로그인: POST /api/auth/login
# - 로그아웃 / 내 정보 / 세션 갱신 (로그인 필요)
# 세션은 httpOnly 쿠키에 담긴 JWT 로 유지합니다

from beanie import PydanticObjectId
from fastapi import APIRouter, BackgroundTasks, Depends, Response, status

from ...core.config import Settings, get_settings
from ...core.security import clear_auth_cookie, get_current_user_id, set_auth_cookie
from ...schemas.user_schema import UserCreate, UserLogin, user_to_public
from ...services.auth_service import AuthService, get_auth_service
from ...tasks.dream_tasks import queue_welcome_email

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="회원가입 (이메일/username 중복 체크 포함)")
async def register(
    payload: UserCreate,
    response: Response,
    background_tasks: BackgroundTasks,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    user = await service.register(payload.username, payload.email, payload.password)
    set_auth_cookie(response, service.issue_token(user), settings)
    # 환영 메일은 응답 이후에 큐잉 (실패해도 회원가입 결과에는 영향 없음)
    background_tasks.add_task(queue_welcome_email, user.email, user.username)
    return {"success": True, "message": "Registration successful", "user": user_to_public(user)}


@router.post("/login", summary="로그인 (세션 쿠키 발급)")
async def login(
    payload: UserLogin,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    user = await service.login(payload.email, payload.password)
    set_auth_cookie(response, service.issue_token(user), settings)
    return {"success": True, "message": "Login successful", "user": user_to_public(user)}


@router.post("/logout", summary="로그아웃 (쿠키 삭제)")
async def logout(
    response: Response,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    settings: Settings = Depends(get_settings),
):
    clear_auth_cookie(response, settings)
    return {"success": True, "message": "Logout successful"}


@router.get("/me", summary="현재 로그인한 사용자 정보")
async def me(
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
):
    user = await service.get_user(user_id)
    return {"success": True, "user": user_to_public(user)}


@router.post("/refresh", summary="세션 쿠키 재발급")
async def refresh(
    response: Response,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    user = await service.get_user(user_id)
    set_auth_cookie(response, service.issue_token(user), settings)
    return {"success": True, "message": "Token refreshed"}
