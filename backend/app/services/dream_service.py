# 꿈(Dream) 서비스 레이어
# - CRUD + 소프트 삭제(휴지통) + 복구 + 영구 삭제
# - 모든 단건 작업은 "존재 확인 -> 소유자 확인" 을 먼저 거칩니다
# - 목록 조회용 필터/정렬 조건 생성

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import pymongo
from beanie import PydanticObjectId
from fastapi import Depends

from ..core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from ..models.user import utcnow
from ..repositories.dream_repository import DreamRepository
from ..schemas.dream_schema import DreamCreate, DreamListQuery, DreamUpdate

logger = logging.getLogger(__name__)

# 클라이언트 정렬 키 -> DB 필드명
SORT_FIELDS = {"date": "date", "createdAt": "created_at", "title": "title"}

# 수정 요청에서 null 로 비울 수 있는 필드 (나머지는 null 이면 무시)
NULLABLE_UPDATE_FIELDS = {"mood"}


def build_dream_filter(user_id: PydanticObjectId, query: DreamListQuery) -> Dict[str, Any]:
    """목록 조회용 MongoDB 필터를 만듭니다.

    주니어 개발자님께: 값이 없는 조건은 키 자체를 넣지 않아야 합니다.
    {"mood": None} 같은 조건이 들어가면 "mood 가 null 인 문서만" 찾게 되어 결과가 틀어집니다.
    """
    filters: Dict[str, Any] = {"user_id": user_id, "is_deleted": False}

    if query.mood is not None:
        filters["mood"] = query.mood

    if query.is_lucid is not None:
        filters["is_lucid"] = query.is_lucid

    if query.start_date is not None or query.end_date is not None:
        date_range: Dict[str, datetime] = {}
        if query.start_date is not None:
            date_range["$gte"] = query.start_date
        if query.end_date is not None:
            date_range["$lte"] = query.end_date
        filters["date"] = date_range

    if query.search:
        # title/content/tags 텍스트 인덱스 검색
        filters["$text"] = {"$search": query.search}

    return filters


def build_dream_sort(query: DreamListQuery) -> List[Tuple[str, int]]:
    direction = pymongo.ASCENDING if query.sort_order == "asc" else pymongo.DESCENDING
    return [(SORT_FIELDS[query.sort_by], direction)]


def move_to_trash(dream, now: Optional[datetime] = None) -> None:
    # 이미 휴지통에 있는 꿈이면 deleted_at 만 다시 찍힙니다 (만료 시계가 다시 시작됨)
    dream.is_deleted = True
    dream.deleted_at = now or utcnow()


def restore_from_trash(dream) -> None:
    dream.is_deleted = False
    dream.deleted_at = None


class DreamService:
    def __init__(self, repo: DreamRepository):
        self.repo = repo

    async def get_owned(self, user_id: PydanticObjectId, dream_id: str, action: str = "view"):
        # 전체 문서를 읽은 뒤 소유자 필드를 비교합니다 (소유자 외 접근 불가)
        dream = await self.repo.get(dream_id)
        if not dream:
            raise NotFoundError("Dream not found")
        if str(dream.user_id) != str(user_id):
            logger.warning(f"[DreamService] User {user_id} tried to {action} dream {dream_id} owned by someone else")
            raise ForbiddenError(f"You do not have permission to {action} this dream")
        return dream

    async def list_dreams(self, user_id: PydanticObjectId, query: DreamListQuery) -> Tuple[list, dict]:
        filters = build_dream_filter(user_id, query)
        sort = build_dream_sort(query)
        skip = (query.page - 1) * query.limit

        dreams = await self.repo.find_page(filters, sort, skip, query.limit)
        total = await self.repo.count(filters)

        total_pages = math.ceil(total / query.limit)
        pagination = {
            "page": query.page,
            "limit": query.limit,
            "total": total,
            "totalPages": total_pages,
            "hasMore": query.page < total_pages,
        }
        return dreams, pagination

    async def create_dream(self, user_id: PydanticObjectId, payload: DreamCreate):
        fields = payload.model_dump()
        if fields.get("date") is None:
            fields["date"] = utcnow()
        dream = await self.repo.create(user_id, fields)
        logger.info(f"[DreamService] Dream {dream.id} created by user {user_id}")
        return dream

    async def update_dream(self, user_id: PydanticObjectId, dream_id: str, payload: DreamUpdate):
        dream = await self.get_owned(user_id, dream_id, action="update")
        # 휴지통 상태여도 수정은 가능 (상태는 그대로 유지)
        changes = payload.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field not in NULLABLE_UPDATE_FIELDS:
                continue
            setattr(dream, field, value)
        return await self.repo.save(dream)

    async def soft_delete(self, user_id: PydanticObjectId, dream_id: str):
        dream = await self.get_owned(user_id, dream_id, action="delete")
        move_to_trash(dream)
        return await self.repo.save(dream)

    async def list_trash(self, user_id: PydanticObjectId) -> list:
        return await self.repo.find_trashed(user_id)

    async def restore(self, user_id: PydanticObjectId, dream_id: str):
        dream = await self.get_owned(user_id, dream_id, action="restore")
        if not dream.is_deleted:
            raise BadRequestError("Dream is not in trash")
        restore_from_trash(dream)
        return await self.repo.save(dream)

    async def permanent_delete(self, user_id: PydanticObjectId, dream_id: str) -> None:
        # 현재 상태(활성/휴지통)와 무관하게 소유자만 확인하고 삭제
        dream = await self.get_owned(user_id, dream_id, action="delete")
        await self.repo.delete(dream)
        logger.info(f"[DreamService] Dream {dream_id} permanently deleted by user {user_id}")


def get_dream_service(repo: DreamRepository = Depends(DreamRepository)) -> DreamService:
    return DreamService(repo)
