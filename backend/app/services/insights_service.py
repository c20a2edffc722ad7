# 인사이트(통계) 서비스 레이어
# - 기간(7d/30d/90d/1y/all) 안의 활성 꿈만 대상으로 통계를 계산
# - 저장소에서 필요한 필드만 가져온 뒤, 집계는 pandas 로 처리합니다

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from beanie import PydanticObjectId
from fastapi import Depends

from ..models.user import utcnow
from ..repositories.dream_repository import DreamRepository

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}
TOP_LIMIT = 10

EMPTY_STATS = {
    "totalDreams": 0,
    "avgClarity": 0,
    "lucidCount": 0,
    "lucidPercentage": 0,
    "avgTagsPerDream": 0,
}

_ROW_COLUMNS = ["date", "clarity", "is_lucid", "tags", "mood", "symbols"]


def get_date_range(period: str, now: Optional[datetime] = None) -> Tuple[Optional[datetime], datetime]:
    # "all" (또는 알 수 없는 값)이면 시작 시각 없이 전체 기간
    end = now or utcnow()
    days = PERIOD_DAYS.get(period)
    start = end - timedelta(days=days) if days else None
    return start, end


def build_insights_match(user_id: PydanticObjectId, period: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    start, end = get_date_range(period, now)
    match: Dict[str, Any] = {"user_id": user_id, "is_deleted": False}
    if start is not None:
        match["date"] = {"$gte": start, "$lte": end}
    return match


def _to_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=_ROW_COLUMNS)
    # 빠진 값은 빈 리스트/기본값으로 통일
    df["tags"] = df["tags"].apply(lambda v: v if isinstance(v, list) else [])
    df["symbols"] = df["symbols"].apply(lambda v: v if isinstance(v, list) else [])
    return df


def _top_counts(values: pd.Series, key: str, limit: Optional[int] = TOP_LIMIT) -> List[Dict[str, Any]]:
    # 개수 내림차순, 동률이면 이름순 (groupby 가 키를 정렬하고, stable 정렬이 그 순서를 유지)
    if values.empty:
        return []
    counts = values.groupby(values).size().sort_values(ascending=False, kind="stable")
    if limit:
        counts = counts.head(limit)
    return [{key: name, "count": int(count)} for name, count in counts.items()]


def compute_stats(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    """총 개수, 평균 선명도, 자각몽 수/비율, 꿈당 평균 태그 수 (소수점 1자리)"""
    if not rows:
        return dict(EMPTY_STATS)

    df = _to_frame(rows)
    total = len(df)
    clarity = pd.to_numeric(df["clarity"], errors="coerce")
    avg_clarity = clarity.mean()
    lucid_count = int(df["is_lucid"].fillna(False).astype(bool).sum())
    total_tags = int(df["tags"].map(len).sum())

    return {
        "totalDreams": total,
        "avgClarity": round(float(avg_clarity), 1) if pd.notna(avg_clarity) else 0,
        "lucidCount": lucid_count,
        "lucidPercentage": round(lucid_count / total * 100, 1),
        "avgTagsPerDream": round(total_tags / total, 1),
    }


def compute_mood_distribution(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not rows:
        return []
    df = _to_frame(rows)
    return _top_counts(df["mood"].dropna(), "mood", limit=None)


def compute_dreams_over_time(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # 달력 날짜(YYYY-MM-DD, UTC) 별 개수, 날짜 오름차순
    if not rows:
        return []
    df = _to_frame(rows)
    dates = pd.to_datetime(df["date"], utc=True).dt.strftime("%Y-%m-%d")
    counts = dates.groupby(dates).size().sort_index()
    return [{"date": day, "count": int(count)} for day, count in counts.items()]


def compute_top_tags(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not rows:
        return []
    tags = _to_frame(rows)["tags"].explode().dropna()
    return _top_counts(tags, "tag")


def compute_top_symbols(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not rows:
        return []
    symbols = _to_frame(rows)["symbols"].explode().dropna()
    return _top_counts(symbols, "symbol")


class InsightsService:
    def __init__(self, repo: DreamRepository):
        self.repo = repo

    async def _rows(self, user_id: PydanticObjectId, period: str) -> List[Dict[str, Any]]:
        match = build_insights_match(user_id, period)
        rows = await self.repo.find_insight_rows(match)
        logger.debug(f"[InsightsService] {len(rows)} dreams matched for user {user_id} ({period})")
        return rows

    async def get_stats(self, user_id: PydanticObjectId, period: str) -> Dict[str, Any]:
        return compute_stats(await self._rows(user_id, period))

    async def get_moods(self, user_id: PydanticObjectId, period: str) -> Dict[str, Any]:
        rows = await self._rows(user_id, period)
        return {
            "moodDistribution": compute_mood_distribution(rows),
            "dreamsOverTime": compute_dreams_over_time(rows),
        }

    async def get_symbols(self, user_id: PydanticObjectId, period: str) -> Dict[str, Any]:
        rows = await self._rows(user_id, period)
        return {
            "topTags": compute_top_tags(rows),
            "topSymbols": compute_top_symbols(rows),
        }


def get_insights_service(repo: DreamRepository = Depends(DreamRepository)) -> InsightsService:
    return InsightsService(repo)
