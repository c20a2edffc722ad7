# 꿈(Dream) 저장소 레이어
# - 필터/정렬 조건은 서비스가 dict 로 만들어서 넘기고, 여기서는 실행만 담당
# - 서비스는 Beanie 를 직접 만지지 않으므로 테스트에서 메모리 저장소로 바꿔 끼울 수 있습니다

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import pymongo
from beanie import PydanticObjectId

from ..models.dream import Dream
from ..models.user import utcnow

SortSpec = List[Tuple[str, int]]


class DreamRepository:
    async def get(self, dream_id: str) -> Optional[Dream]:
        return await Dream.get(PydanticObjectId(dream_id))

    async def create(self, user_id: PydanticObjectId, fields: Dict[str, Any]) -> Dream:
        dream = Dream(user_id=user_id, **fields)
        return await dream.insert()

    async def save(self, dream: Dream) -> Dream:
        # save()는 문서 전체를 덮어씁니다 (버전 체크 없음, 마지막 쓰기가 이김)
        dream.updated_at = utcnow()
        await dream.save()
        return dream

    async def delete(self, dream: Dream) -> None:
        await dream.delete()

    async def find_page(self, filters: Dict[str, Any], sort: SortSpec, skip: int, limit: int) -> List[Dream]:
        return await Dream.find(filters).sort(sort).skip(skip).limit(limit).to_list()

    async def count(self, filters: Dict[str, Any]) -> int:
        return await Dream.find(filters).count()

    async def find_trashed(self, user_id: PydanticObjectId) -> List[Dream]:
        return await (
            Dream.find({"user_id": user_id, "is_deleted": True})
            .sort([("deleted_at", pymongo.DESCENDING)])
            .to_list()
        )

    async def find_insight_rows(self, match: Dict[str, Any]) -> List[Dict[str, Any]]:
        # 통계 계산에 필요한 필드만 잘라서 가져옵니다 (집계 자체는 insights_service 에서 pandas 로)
        pipeline = [
            {"$match": match},
            {
                "$project": {
                    "_id": 0,
                    "date": 1,
                    "clarity": 1,
                    "is_lucid": 1,
                    "tags": {"$ifNull": ["$tags", []]},
                    "mood": 1,
                    "symbols": {"$ifNull": ["$analysis.symbols", []]},
                }
            },
        ]
        return await Dream.aggregate(pipeline).to_list()

    async def purge_trashed_before(self, cutoff: datetime) -> int:
        result = await Dream.find({"is_deleted": True, "deleted_at": {"$lt": cutoff}}).delete()
        return result.deleted_count if result else 0
