# FastAPI 진입점
# - Beanie ODM 초기화 (MongoDB)
# - 라우터 라우팅 (/api 아래)
# - CORS 설정 (클라이언트 주소만, 쿠키 허용)
# - 중앙 에러 핸들러 등록
# - Celery는 별도 프로세스로 동작 (tasks/dream_tasks.py 참고)

import logging
from contextlib import asynccontextmanager
from typing import Optional

from beanie import init_beanie
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo import AsyncMongoClient

from .api.routes.analysis import router as analysis_router
from .api.routes.auth import router as auth_router
from .api.routes.dreams import router as dreams_router
from .api.routes.insights import router as insights_router
from .api.routes.users import router as users_router
from .core.config import Settings, get_settings
from .core.error_handlers import register_exception_handlers
from .models.dream import Dream
from .models.user import User, utcnow

logger = logging.getLogger(__name__)

API_PREFIX = "/api"
APP_VERSION = "1.0.0"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def build_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # 주니어 개발자님께: 꿈/사용자 API 는 전부 MongoDB 가 필요합니다.
        # 연결에 실패하면 반쯤 살아 있는 서버를 띄우지 않고 바로 종료합니다.
        client = AsyncMongoClient(
            settings.MONGODB_URI,
            tz_aware=True,
            maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
            serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        )
        try:
            await client.admin.command("ping")
            await init_beanie(database=client.get_default_database(), document_models=[User, Dream])
        except Exception as e:
            logger.error(f"MongoDB connection failed ({settings.MONGODB_URI}): {e}")
            await client.close()
            raise
        logger.info("MongoDB connected")

        yield

        await client.close()
        logger.info("MongoDB connection closed")

    return lifespan


def create_app(settings: Optional[Settings] = None, init_db: bool = True) -> FastAPI:
    """애플리케이션 팩토리

    settings 를 넘기면 get_settings 의존성도 같은 객체를 쓰도록 덮어씁니다 (테스트용).
    init_db=False 면 MongoDB 연결 없이 앱만 만듭니다.
    """
    custom_settings = settings is not None
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="NightLog API",
        description="꿈 기록 / 휴지통 / AI 분석 / 인사이트 API",
        version=APP_VERSION,
        lifespan=build_lifespan(settings) if init_db else None,
    )
    app.state.settings = settings
    if custom_settings:
        app.dependency_overrides[get_settings] = lambda: settings

    # CORS 허용 도메인 세팅 (쿠키 세션이라 credentials 허용 + 와일드카드 불가)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app, settings)

    # 간단한 헬스체크
    @app.get("/")
    async def root():
        return {"ok": True, "app": settings.APP_NAME, "time": utcnow().isoformat()}

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "app": settings.APP_NAME, "version": APP_VERSION}

    @app.get(f"{API_PREFIX}/health")
    async def api_health():
        return {"success": True, "message": "NightLog API is running", "timestamp": utcnow().isoformat()}

    # API 라우터 등록
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(dreams_router, prefix=API_PREFIX)
    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(insights_router, prefix=API_PREFIX)
    app.include_router(analysis_router, prefix=API_PREFIX)

    logger.info(f"{settings.APP_NAME} app created (env={settings.ENV})")
    return app


app = create_app()
