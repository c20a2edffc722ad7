# 꿈 분석 / 인사이트 요청·응답 스키마

from typing import List, Literal

from pydantic import Field

from ..models.dream import MoodType
from .dream_schema import CamelModel

InsightsPeriod = Literal["7d", "30d", "90d", "1y", "all"]


class AnalyzeTextRequest(CamelModel):
    content: str = Field(min_length=10, max_length=10000)


class AnalysisResult(CamelModel):
    """외부 분류 서비스(또는 키워드 분석)의 정규화된 결과"""
    mood: MoodType
    symbols: List[str] = Field(default_factory=list)
    interpretation: str
    detected_language: str

    def to_public(self) -> dict:
        return self.model_dump(by_alias=True)
