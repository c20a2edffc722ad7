# 사용자 프로필 라우터 (로그인 필요)
# - GET/PUT /api/users/profile
# - POST /api/users/avatar (multipart, 필드명 avatar)
# - PUT /api/users/password
# - DELETE /api/users/account

from typing import Optional

from beanie import PydanticObjectId
from fastapi import APIRouter, Depends, File, Response, UploadFile

from ...core.config import Settings, get_settings
from ...core.security import clear_auth_cookie, get_current_user_id
from ...schemas.user_schema import PasswordChange, ProfileUpdate, user_to_public
from ...services.user_service import UserService, get_user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile", summary="내 프로필 조회")
async def get_profile(
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
):
    user = await service.get_profile(user_id)
    return {"success": True, "user": user_to_public(user)}


@router.put("/profile", summary="프로필 수정 (username, bio, preferences)")
async def update_profile(
    payload: ProfileUpdate,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
):
    user = await service.update_profile(user_id, payload)
    return {"success": True, "message": "Profile updated successfully", "user": user_to_public(user)}


@router.post("/avatar", summary="아바타 이미지 업로드 (최대 5MB)")
async def upload_avatar(
    avatar: Optional[UploadFile] = File(None),
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
):
    content = await avatar.read() if avatar is not None else None
    content_type = avatar.content_type if avatar is not None else None
    filename = avatar.filename if avatar is not None else None
    user = await service.upload_avatar(user_id, content, content_type, filename=filename)
    return {"success": True, "message": "Avatar uploaded successfully", "user": user_to_public(user)}


@router.put("/password", summary="비밀번호 변경")
async def change_password(
    payload: PasswordChange,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
):
    await service.change_password(user_id, payload.current_password, payload.new_password)
    return {"success": True, "message": "Password changed successfully"}


@router.delete("/account", summary="계정 삭제 (쿠키도 삭제)")
async def delete_account(
    response: Response,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    await service.delete_account(user_id)
    clear_auth_cookie(response, settings)
    return {"success": True, "message": "Account deleted successfully"}
