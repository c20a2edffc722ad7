# 중앙 에러 핸들러
# - AppError -> {success: false, message}
# - 요청 검증 실패 -> 400 {success: false, message: "Validation failed", errors: [...]}
# - 그 외 예외 -> 500 (운영 환경에서는 메시지를 숨김)

import logging
import traceback
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .exceptions import AppError

logger = logging.getLogger(__name__)

# 검증 에러 위치(loc)의 첫 요소는 body/query/path 같은 출처 표시라서 field 이름에서 제외합니다
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    formatted = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        message = err.get("msg", "Invalid value")
        # pydantic 이 붙이는 "Value error, " 접두어 제거
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        formatted.append({"field": ".".join(loc), "message": message})
    return formatted


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    def _with_stack(body: dict, exc: Exception) -> dict:
        if not settings.is_production:
            body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return body

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        body = _with_stack({"success": False, "message": exc.message}, exc)
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "success": False,
                "message": "Validation failed",
                "errors": format_validation_errors(exc.errors()),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            message = f"Route {request.url.path} not found"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=True)
        if settings.is_development:
            body = _with_stack({"success": False, "message": str(exc)}, exc)
        else:
            body = {"success": False, "message": "An unexpected error occurred"}
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)
