# Dream 도메인 모델 (Beanie Document)
# - 한 명의 사용자(user_id)에게 속하며, 소유자는 생성 후 바뀌지 않음
# - 소프트 삭제: is_deleted / deleted_at 두 필드가 항상 함께 움직임
# - deleted_at 기준 30일이 지나면 MongoDB TTL 인덱스가 문서를 자동 삭제

from datetime import datetime
from typing import List, Literal, Optional, get_args

import pymongo
from beanie import Document, Indexed, PydanticObjectId
from pydantic import BaseModel, Field, model_validator
from pymongo import IndexModel

from .user import utcnow

MoodType = Literal["happy", "sad", "anxious", "peaceful", "confused", "excited", "fearful", "neutral"]
MOODS = get_args(MoodType)

MAX_TAGS = 10
TRASH_RETENTION_DAYS = 30
TRASH_TTL_SECONDS = 60 * 60 * 24 * TRASH_RETENTION_DAYS


class DreamAnalysis(BaseModel):
    mood: Optional[MoodType] = None
    symbols: List[str] = Field(default_factory=list)
    interpretation: Optional[str] = None
    detected_language: Optional[str] = None
    analyzed_at: Optional[datetime] = None


class Dream(Document):
    user_id: Indexed(PydanticObjectId)
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=10, max_length=10000)
    date: datetime = Field(default_factory=utcnow)
    tags: List[str] = Field(default_factory=list, max_length=MAX_TAGS)
    is_lucid: bool = False
    mood: Optional[MoodType] = None
    clarity: int = Field(default=3, ge=1, le=5)
    analysis: Optional[DreamAnalysis] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def check_trash_flags(self):
        # 휴지통 상태와 삭제 시각은 함께 설정되거나 함께 비어 있어야 합니다
        if self.is_deleted != (self.deleted_at is not None):
            raise ValueError("is_deleted and deleted_at must be set together")
        return self

    class Settings:
        name = "dreams"
        validate_on_save = True
        indexes = [
            IndexModel([("user_id", pymongo.ASCENDING), ("date", pymongo.DESCENDING)]),
            IndexModel([
                ("user_id", pymongo.ASCENDING),
                ("is_deleted", pymongo.ASCENDING),
                ("date", pymongo.DESCENDING),
            ]),
            IndexModel([("user_id", pymongo.ASCENDING), ("tags", pymongo.ASCENDING)]),
            IndexModel([("user_id", pymongo.ASCENDING), ("mood", pymongo.ASCENDING)]),
            # 검색(search) 필터용 텍스트 인덱스
            IndexModel(
                [("title", pymongo.TEXT), ("content", pymongo.TEXT), ("tags", pymongo.TEXT)],
                name="dream_text_search",
            ),
            # 주니어 개발자님께: TTL 인덱스는 MongoDB가 백그라운드에서 deleted_at 이 지난 문서를 지웁니다.
            # deleted_at 이 null 인 (활성) 문서는 대상이 아닙니다.
            IndexModel(
                [("deleted_at", pymongo.ASCENDING)],
                name="dream_trash_ttl",
                expireAfterSeconds=TRASH_TTL_SECONDS,
            ),
        ]
