# 꿈 요청/응답 스키마 정의 (Pydantic 모델)
# - 클라이언트와는 camelCase(isLucid, sortBy ...)로 주고받고, 내부/DB 는 snake_case

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..models.dream import MAX_TAGS, MoodType

DREAM_ID_PATTERN = r"^[a-fA-F0-9]{24}$"

SortField = Literal["date", "createdAt", "title"]
SortOrder = Literal["asc", "desc"]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # 시간대 정보가 없는 값은 UTC 로 간주
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _check_tag_lengths(tags: Optional[List[str]]) -> Optional[List[str]]:
    for tag in tags or []:
        if len(tag) > 50:
            raise ValueError("Tags must be at most 50 characters")
    return tags


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DreamCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=10, max_length=10000)
    date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list, max_length=MAX_TAGS)
    is_lucid: bool = False
    mood: Optional[MoodType] = None
    clarity: int = Field(default=3, ge=1, le=5)

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def check_tags(cls, tags: Optional[List[str]]) -> Optional[List[str]]:
        return _check_tag_lengths(tags)

    @field_validator("date")
    @classmethod
    def date_as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class DreamUpdate(DreamCreate):
    # 부분 수정: 보낸 필드만 적용 (model_dump(exclude_unset=True))
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=10, max_length=10000)
    tags: Optional[List[str]] = Field(default=None, max_length=MAX_TAGS)
    is_lucid: Optional[bool] = None
    clarity: Optional[int] = Field(default=None, ge=1, le=5)


class DreamListQuery(BaseModel):
    page: int = 1
    limit: int = 10
    search: Optional[str] = None
    sort_by: SortField = "date"
    sort_order: SortOrder = "desc"
    mood: Optional[MoodType] = None
    is_lucid: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def range_as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


def analysis_to_public(analysis) -> Optional[dict]:
    if analysis is None:
        return None
    return {
        "mood": analysis.mood,
        "symbols": list(analysis.symbols or []),
        "interpretation": analysis.interpretation,
        "detectedLanguage": analysis.detected_language,
        "analyzedAt": analysis.analyzed_at,
    }


def dream_to_public(dream) -> dict:
    # 응답 JSON (클라이언트는 _id / user 를 문자열로 기대합니다)
    return {
        "_id": str(dream.id),
        "user": str(dream.user_id),
        "title": dream.title,
        "content": dream.content,
        "date": dream.date,
        "tags": list(dream.tags),
        "isLucid": dream.is_lucid,
        "mood": dream.mood,
        "clarity": dream.clarity,
        "analysis": analysis_to_public(dream.analysis),
        "isDeleted": dream.is_deleted,
        "deletedAt": dream.deleted_at,
        "createdAt": dream.created_at,
        "updatedAt": dream.updated_at,
    }
