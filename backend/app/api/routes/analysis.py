# AI 분석 라우터 (로그인 필요)
# - POST /api/analysis/dream/{id}           : 저장된 꿈 분석 후 결과 저장
# - POST /api/analysis/dream/{id}/reanalyze : 재분석 (항상 덮어씀)
# - POST /api/analysis/analyze              : 저장 없이 텍스트만 분석

from typing import Annotated

from beanie import PydanticObjectId
from fastapi import APIRouter, Depends, Path

from ...core.security import get_current_user_id
from ...schemas.analysis_schema import AnalyzeTextRequest
from ...schemas.dream_schema import DREAM_ID_PATTERN, dream_to_public
from ...services.analysis_service import AnalysisService, get_analysis_service

router = APIRouter(prefix="/analysis", tags=["analysis"])

DreamId = Annotated[str, Path(pattern=DREAM_ID_PATTERN)]


async def _analyze(user_id: PydanticObjectId, dream_id: str, service: AnalysisService) -> dict:
    dream, result = await service.analyze_dream(user_id, dream_id)
    return {
        "success": True,
        "message": "Dream analyzed successfully",
        "data": {"dream": dream_to_public(dream), "analysis": result.to_public()},
    }


@router.post("/dream/{dream_id}", summary="꿈 분석")
async def analyze_dream(
    dream_id: DreamId,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: AnalysisService = Depends(get_analysis_service),
):
    return await _analyze(user_id, dream_id, service)


@router.post("/dream/{dream_id}/reanalyze", summary="꿈 재분석")
async def reanalyze_dream(
    dream_id: DreamId,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: AnalysisService = Depends(get_analysis_service),
):
    return await _analyze(user_id, dream_id, service)


@router.post("/analyze", summary="텍스트 분석 (저장하지 않음)")
async def analyze_text(
    payload: AnalyzeTextRequest,
    user_id: PydanticObjectId = Depends(get_current_user_id),
    service: AnalysisService = Depends(get_analysis_service),
):
    result = await service.analyze_text(payload.content)
    return {"success": True, "message": "Text analyzed successfully", "data": {"analysis": result.to_public()}}
