# 인사이트 라우터 (로그인 필요)
# - GET /api/insights/stats   : 개수/평균 선명도/자각몽 비율/평균 태그 수
# - GET /api/insights/moods   : 감정 분포 + 날짜별 기록 수
# - GET /api/insights/symbols : 상위 태그/상징
# 모든 엔드포인트는 ?period=7d|30d|90d|1y|all (기본 30d)

from beanie import PydanticObjectId
from fastapi import APIRouter, Depends, Query

from ...core.security import get_current_user_id
from ...schemas.analysis_schema import InsightsPeriod
from ...services.insights_service import InsightsService, get_insights_service

router = APIRouter(prefix="/insights", tags=["insights"])


@router.get("/stats", summary="기간 내 꿈 통계")
async def stats(
    period: InsightsPeriod = Query("30d"),
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: InsightsService = Depends(get_insights_service),
):
    return {"success": True, "data": await service.get_stats(user_id, period)}


@router.get("/moods", summary="감정 분포 / 기간별 기록 수")
async def moods(
    period: InsightsPeriod = Query("30d"),
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: InsightsService = Depends(get_insights_service),
):
    return {"success": True, "data": await service.get_moods(user_id, period)}


@router.get("/symbols", summary="자주 쓰인 태그 / 분석 상징 Top 10")
async def symbols(
    period: InsightsPeriod = Query("30d"),
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: InsightsService = Depends(get_insights_service),
):
    return {"success": True, "data": await service.get_symbols(user_id, period)}
