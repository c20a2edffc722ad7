# AI 꿈 분석 서비스
# - 외부 Gemini API(generateContent)에 꿈 내용을 보내 mood/symbols/해석을 받아옴
# - API 키가 없거나 호출이 실패하면 키워드 기반 분석으로 대체 (에러로 끝내지 않음)
# - 재시도는 하지 않습니다

import asyncio
import json
import logging
import re
from typing import Any, Dict, List

import requests

from ..core.config import Settings
from ..models.dream import MOODS
from ..schemas.analysis_schema import AnalysisResult

# 로거 설정
logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = """You are an expert dream analyst and psychologist. Analyze the given dream and provide insights.

You MUST respond with valid JSON in this exact format (no markdown, no code blocks, just pure JSON):
{
  "mood": "one of: happy, sad, anxious, peaceful, confused, excited, fearful, neutral",
  "symbols": ["array", "of", "symbolic", "elements"],
  "interpretation": "A thoughtful 2-3 sentence interpretation",
  "detectedLanguage": "the language of the dream text"
}

Guidelines:
- mood: The overall emotional tone (pick the strongest emotion)
- symbols: Key symbolic elements (water, flying, animals, people, places, objects)
- interpretation: Meaningful psychological insight, be specific to THIS dream
- detectedLanguage: The language it was written in

Respond ONLY with the JSON object."""

FALLBACK_INTERPRETATION = "Unable to generate interpretation."
FALLBACK_LANGUAGE = "Unknown"

# 키워드 분석: 위에서부터 처음 걸리는 감정을 사용
MOOD_KEYWORDS = [
    ("happy", ("happy", "joy", "laugh")),
    ("fearful", ("scared", "fear", "monster")),
    ("sad", ("sad", "cry", "lost")),
    ("anxious", ("anxious", "stress", "chase")),
    ("peaceful", ("peace", "calm", "serene")),
    ("excited", ("fly", "adventure", "excit")),
]

SYMBOL_KEYWORDS = [
    "water", "fire", "flying", "falling", "running", "house", "door", "car",
    "animal", "dog", "cat", "bird", "snake", "ocean", "mountain", "forest",
    "school", "work", "family", "friend", "stranger", "baby",
]
MAX_HEURISTIC_SYMBOLS = 5
DEFAULT_SYMBOLS = ["journey", "self-discovery"]

_CODE_FENCE = re.compile(r"```(?:json)?\n?")


class AIServiceError(Exception):
    """외부 AI 호출 실패 (서비스 내부에서만 쓰이고 밖으로는 나가지 않음)"""
    pass


def normalize_analysis(raw: Dict[str, Any]) -> AnalysisResult:
    """외부 응답을 믿지 않고 필드별로 보정합니다.

    - mood 가 8개 값 밖이면 neutral
    - symbols 가 리스트가 아니면 []
    - interpretation / detectedLanguage 가 없으면 기본 문구
    """
    mood = raw.get("mood")
    if mood not in MOODS:
        mood = "neutral"

    symbols = raw.get("symbols")
    if isinstance(symbols, list):
        symbols = [str(s) for s in symbols if isinstance(s, (str, int, float)) and str(s).strip()]
    else:
        symbols = []

    interpretation = raw.get("interpretation")
    if not isinstance(interpretation, str) or not interpretation.strip():
        interpretation = FALLBACK_INTERPRETATION

    language = raw.get("detectedLanguage")
    if not isinstance(language, str) or not language.strip():
        language = FALLBACK_LANGUAGE

    return AnalysisResult(
        mood=mood,
        symbols=symbols,
        interpretation=interpretation,
        detected_language=language,
    )


def heuristic_analysis(content: str) -> AnalysisResult:
    """키워드 기반 분석 (외부 API 를 쓸 수 없을 때의 대체 경로, 항상 같은 입력에 같은 결과)"""
    text = content.lower()

    mood = "neutral"
    for candidate, keywords in MOOD_KEYWORDS:
        if any(k in text for k in keywords):
            mood = candidate
            break

    symbols: List[str] = [s for s in SYMBOL_KEYWORDS if s in text]
    if not symbols:
        symbols = list(DEFAULT_SYMBOLS)
    symbols = symbols[:MAX_HEURISTIC_SYMBOLS]

    interpretation = (
        f"This dream contains themes of {symbols[0]} and reflects a {mood} emotional state. "
        "Your subconscious may be processing recent experiences related to these symbols."
    )
    return AnalysisResult(mood=mood, symbols=symbols, interpretation=interpretation, detected_language="English")


def _call_gemini(content: str, settings: Settings) -> Dict[str, Any]:
    """Gemini generateContent API 를 호출하고 JSON 본문을 dict 로 돌려줍니다.

    주니어 개발자님께:
    Gemini 는 응답 텍스트를 ```json ... ``` 코드 블록으로 감싸서 줄 때가 있어서,
    코드 펜스를 지운 다음 json.loads 로 파싱합니다.
    """
    url = f"{settings.AI_API_BASE}/models/{settings.AI_MODEL}:generateContent"
    body = {
        "contents": [{"parts": [{"text": f"{ANALYSIS_PROMPT}\n\nDream to analyze:\n{content}"}]}],
        "generationConfig": {"temperature": 0.7, "maxOutputTokens": 500},
    }
    logger.info(f"[Gemini] Calling generateContent ({settings.AI_MODEL})")
    resp = requests.post(
        url,
        params={"key": settings.AI_API_KEY},
        json=body,
        timeout=settings.AI_TIMEOUT_SECONDS,
    )
    if not resp.ok:
        try:
            message = resp.json().get("error", {}).get("message")
        except ValueError:
            message = None
        raise AIServiceError(message or f"Gemini API request failed ({resp.status_code})")

    data = resp.json()
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise AIServiceError("No response from Gemini")
    if not isinstance(text, str) or not text:
        raise AIServiceError("No response from Gemini")

    cleaned = _CODE_FENCE.sub("", text).strip()
    parsed = json.loads(cleaned)
    if not isinstance(parsed, dict):
        raise AIServiceError("Gemini response is not a JSON object")
    return parsed


async def analyze_dream(content: str, settings: Settings) -> AnalysisResult:
    if not settings.ai_enabled:
        logger.info("[AIService] No AI_API_KEY configured, using keyword analysis")
        return heuristic_analysis(content)

    try:
        # requests 는 동기 라이브러리라 워커 스레드에서 실행
        raw = await asyncio.to_thread(_call_gemini, content, settings)
    except (requests.exceptions.RequestException, AIServiceError, ValueError) as e:
        # ValueError: json.loads 실패 (JSONDecodeError 포함)
        logger.warning(f"[AIService] AI analysis failed, falling back to keyword analysis: {e}")
        return heuristic_analysis(content)

    return normalize_analysis(raw)
