# 분석 결과 저장 서비스
# - 꿈을 불러와 소유자 확인 후 AI 분석 결과를 dream.analysis 에 저장
# - 분석 mood 는 dream.mood 에도 그대로 반영 (재분석 시 항상 덮어씀)

import logging
from typing import Tuple

from beanie import PydanticObjectId
from fastapi import Depends

from ..core.config import Settings, get_settings
from ..models.dream import DreamAnalysis
from ..models.user import utcnow
from ..repositories.dream_repository import DreamRepository
from ..schemas.analysis_schema import AnalysisResult
from . import ai_service
from .dream_service import DreamService

logger = logging.getLogger(__name__)


def apply_analysis(dream, result: AnalysisResult) -> None:
    dream.analysis = DreamAnalysis(
        mood=result.mood,
        symbols=list(result.symbols),
        interpretation=result.interpretation,
        detected_language=result.detected_language,
        analyzed_at=utcnow(),
    )
    dream.mood = result.mood


class AnalysisService:
    def __init__(self, repo: DreamRepository, settings: Settings):
        self.repo = repo
        self.settings = settings
        self.dreams = DreamService(repo)

    async def analyze_dream(self, user_id: PydanticObjectId, dream_id: str) -> Tuple[object, AnalysisResult]:
        # 활성/휴지통 상태 모두 분석 가능
        dream = await self.dreams.get_owned(user_id, dream_id, action="analyze")
        result = await ai_service.analyze_dream(dream.content, self.settings)
        apply_analysis(dream, result)
        dream = await self.repo.save(dream)
        logger.info(f"[AnalysisService] Dream {dream_id} analyzed (mood={result.mood})")
        return dream, result

    async def analyze_text(self, content: str) -> AnalysisResult:
        return await ai_service.analyze_dream(content, self.settings)


def get_analysis_service(
    repo: DreamRepository = Depends(DreamRepository),
    settings: Settings = Depends(get_settings),
) -> AnalysisService:
    return AnalysisService(repo, settings)
