# 꿈(Dream) 라우터 (모두 로그인 필요)
# - 목록/생성: GET, POST /api/dreams
# - 휴지통 목록: GET /api/dreams/trash
# - 단건 조회/수정/휴지통 이동: GET, PUT, DELETE /api/dreams/{id}
# - 복구: POST /api/dreams/{id}/restore
# - 영구 삭제: DELETE /api/dreams/{id}/permanent

from datetime import datetime
from typing import Annotated, Optional

from beanie import PydanticObjectId
from fastapi import APIRouter, Depends, Path, Query, status

from ...core.security import get_current_user_id
from ...models.dream import MoodType
from ...schemas.dream_schema import (
    DREAM_ID_PATTERN,
    DreamCreate,
    DreamListQuery,
    DreamUpdate,
    SortField,
    SortOrder,
    dream_to_public,
)
from ...services.dream_service import DreamService, get_dream_service

router = APIRouter(prefix="/dreams", tags=["dreams"])

DreamId = Annotated[str, Path(pattern=DREAM_ID_PATTERN, description="24자리 hex ObjectId")]


def get_list_query(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    search: Optional[str] = Query(None),
    sort_by: SortField = Query("date", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    mood: Optional[MoodType] = Query(None),
    is_lucid: Optional[bool] = Query(None, alias="isLucid"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
) -> DreamListQuery:
    return DreamListQuery(
        page=page,
        limit=limit,
        search=search.strip() if search and search.strip() else None,
        sort_by=sort_by,
        sort_order=sort_order,
        mood=mood,
        is_lucid=is_lucid,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("", summary="꿈 목록 (필터/정렬/페이지네이션)")
async def list_dreams(
    query: DreamListQuery = Depends(get_list_query),
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: DreamService = Depends(get_dream_service),
):
    dreams, pagination = await service.list_dreams(user_id, query)
    return {
        "success": True,
        "data": {"dreams": [dream_to_public(d) for d in dreams], "pagination": pagination},
    }


@router.post("", status_code=status.HTTP_201_CREATED, summary="꿈 기록 생성")
async def create_dream(
    payload: DreamCreate,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: DreamService = Depends(get_dream_service),
):
    dream = await service.create_dream(user_id, payload)
    return {"success": True, "message": "Dream created successfully", "data": {"dream": dream_to_public(dream)}}


# 주의: /trash 는 /{dream_id} 보다 먼저 등록해야 합니다
@router.get("/trash", summary="휴지통 목록 (삭제 시각 최신순)")
async def list_trash(
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: DreamService = Depends(get_dream_service),
):
    dreams = await service.list_trash(user_id)
    return {"success": True, "data": {"dreams": [dream_to_public(d) for d in dreams]}}


@router.get("/{dream_id}", summary="꿈 단건 조회")
async def get_dream(
    dream_id: DreamId,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: DreamService = Depends(get_dream_service),
):
    dream = await service.get_owned(user_id, dream_id, action="view")
    return {"success": True, "data": {"dream": dream_to_public(dream)}}


@router.put("/{dream_id}", summary="꿈 부분 수정")
async def update_dream(
    payload: DreamUpdate,
    dream_id: DreamId,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: DreamService = Depends(get_dream_service),
):
    dream = await service.update_dream(user_id, dream_id, payload)
    return {"success": True, "message": "Dream updated successfully", "data": {"dream": dream_to_public(dream)}}


@router.delete("/{dream_id}", summary="휴지통으로 이동 (소프트 삭제)")
async def soft_delete_dream(
    dream_id: DreamId,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: DreamService = Depends(get_dream_service),
):
    await service.soft_delete(user_id, dream_id)
    return {"success": True, "message": "Dream moved to trash"}


@router.post("/{dream_id}/restore", summary="휴지통에서 복구")
async def restore_dream(
    dream_id: DreamId,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: DreamService = Depends(get_dream_service),
):
    dream = await service.restore(user_id, dream_id)
    return {"success": True, "message": "Dream restored successfully", "data": {"dream": dream_to_public(dream)}}


@router.delete("/{dream_id}/permanent", summary="영구 삭제 (복구 불가)")
async def permanent_delete_dream(
    dream_id: DreamId,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: DreamService = Depends(get_dream_service),
):
    await service.permanent_delete(user_id, dream_id)
    return {"success": True, "message": "Dream permanently deleted"}
