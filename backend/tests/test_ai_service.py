# AI 분석 서비스 테스트
# 외부 Gemini API 는 모킹하고, 실패 시 키워드 분석으로 대체되는지 확인
import asyncio
from unittest.mock import MagicMock, patch

import requests

from app.services import ai_service
from app.services.ai_service import heuristic_analysis, normalize_analysis

FLIGHT = "I dreamed I was flying over mountains"


def _gemini_response(text, ok=True, status_code=200):
    resp = MagicMock()
    resp.ok = ok
    resp.status_code = status_code
    resp.json.return_value = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return resp


def _with_key(settings):
    return settings.model_copy(update={"AI_API_KEY": "test-key"})


def test_heuristic_is_deterministic():
    first = heuristic_analysis(FLIGHT)
    assert first == heuristic_analysis(FLIGHT)
    assert first.mood == "excited"
    assert first.symbols == ["flying", "mountain"]
    assert first.detected_language == "English"
    assert first.interpretation.startswith("This dream contains themes of flying and reflects a excited")


def test_heuristic_defaults():
    result = heuristic_analysis("Nothing in particular happened at all.")
    assert result.mood == "neutral"
    assert result.symbols == ["journey", "self-discovery"]


def test_heuristic_mood_priority():
    # 여러 감정 키워드가 있으면 먼저 정의된 감정이 이깁니다
    assert heuristic_analysis("I was scared but then I laughed").mood == "happy"


def test_normalize_clamps_bad_values():
    result = normalize_analysis({"mood": "ecstatic", "symbols": "water"})
    assert result.mood == "neutral"
    assert result.symbols == []
    assert result.interpretation == "Unable to generate interpretation."
    assert result.detected_language == "Unknown"


def test_no_api_key_uses_heuristic(settings):
    with patch("app.services.ai_service.requests.post") as post:
        result = asyncio.run(ai_service.analyze_dream(FLIGHT, settings))
    post.assert_not_called()
    assert result == heuristic_analysis(FLIGHT)


def test_gemini_response_with_code_fence(settings):
    text = '```json\n{"mood": "peaceful", "symbols": ["ocean"], "interpretation": "Calm.", "detectedLanguage": "English"}\n```'
    with patch("app.services.ai_service.requests.post", return_value=_gemini_response(text)) as post:
        result = asyncio.run(ai_service.analyze_dream("I floated on a quiet ocean", _with_key(settings)))
    assert post.call_args.kwargs["params"] == {"key": "test-key"}
    assert result.mood == "peaceful"
    assert result.symbols == ["ocean"]
    assert result.to_public() == {
        "mood": "peaceful",
        "symbols": ["ocean"],
        "interpretation": "Calm.",
        "detectedLanguage": "English",
    }


def test_network_error_falls_back(settings):
    with patch("app.services.ai_service.requests.post", side_effect=requests.exceptions.ConnectionError("down")):
        result = asyncio.run(ai_service.analyze_dream(FLIGHT, _with_key(settings)))
    assert result == heuristic_analysis(FLIGHT)


def test_http_error_falls_back(settings):
    resp = _gemini_response("", ok=False, status_code=429)
    resp.json.return_value = {"error": {"message": "quota exceeded"}}
    with patch("app.services.ai_service.requests.post", return_value=resp):
        result = asyncio.run(ai_service.analyze_dream(FLIGHT, _with_key(settings)))
    assert result.mood == "excited"


def test_unparsable_json_falls_back(settings):
    with patch("app.services.ai_service.requests.post", return_value=_gemini_response("not json at all")):
        result = asyncio.run(ai_service.analyze_dream(FLIGHT, _with_key(settings)))
    assert result == heuristic_analysis(FLIGHT)


def test_non_string_text_falls_back(settings):
    resp = _gemini_response("")
    resp.json.return_value = {"candidates": [{"content": {"parts": [{"text": {"mood": "happy"}}]}}]}
    with patch("app.services.ai_service.requests.post", return_value=resp):
        result = asyncio.run(ai_service.analyze_dream(FLIGHT, _with_key(settings)))
    assert result == heuristic_analysis(FLIGHT)
