# 설정 모듈
# - .env 값들을 한 곳에서 관리
# - 기본값을 제공하여 로컬 실행 편의성 확보
# - Settings 객체는 get_settings()로 한 번만 만들고, 필요한 곳에 주입(Depends)합니다

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# 프로젝트 루트 디렉토리 경로 찾기
# 주니어 개발자님께: 이 파일은 backend/app/core/config.py에 있으므로,
# 4단계 상위로 올라가면 프로젝트 루트가 됩니다.
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
ENV_FILE_PATH = PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    APP_NAME: str = "nightlog"
    ENV: str = "development"  # development | test | production
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    MONGODB_URI: str = "mongodb://localhost:27017/nightlog"
    MONGODB_MAX_POOL_SIZE: int = 10
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 5000

    JWT_SECRET_KEY: str = Field(..., description="JWT 토큰 서명에 사용되는 비밀키. 반드시 강력한 랜덤 문자열로 설정하세요.")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # 세션 쿠키 (httpOnly, sameSite=lax)
    COOKIE_NAME: str = "token"
    COOKIE_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 7

    # CORS 허용 도메인이자 메일 본문 링크에 쓰이는 클라이언트 주소
    CLIENT_URL: str = "http://localhost:5173"

    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "NightLog <noreply@nightlog.app>"
    SMTP_TLS: bool = True

    # 아바타 이미지 저장소 (Cloudinary)
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    # 꿈 분석용 외부 AI (Gemini). 키가 없으면 키워드 기반 분석으로 대체됩니다.
    AI_API_KEY: Optional[str] = Field(None, description="Gemini API 키")
    AI_MODEL: str = "gemini-2.0-flash"
    AI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    AI_TIMEOUT_SECONDS: int = 30

    # Celery (환영 메일, 휴지통 정리)
    REDIS_URL: str = "redis://localhost:6379/0"
    TIMEZONE: str = "UTC"
    TRASH_SWEEP_ENABLED: bool = True
    TRASH_SWEEP_HOUR: int = 3

    model_config = SettingsConfigDict(
        # 주니어 개발자님께: env_file에 절대 경로를 지정하면 backend 디렉토리에서 실행해도
        # 프로젝트 루트의 .env 파일을 찾을 수 있습니다.
        env_file=str(ENV_FILE_PATH) if ENV_FILE_PATH.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def is_development(self) -> bool:
        return self.ENV == "development"

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CLIENT_URL.split(",") if o.strip()]

    @property
    def ai_enabled(self) -> bool:
        return bool(self.AI_API_KEY)

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.SMTP_HOST and self.SMTP_USER)

    @property
    def image_store_enabled(self) -> bool:
        return bool(self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET)


@lru_cache
def get_settings() -> Settings:
    # 앱 시작 시 1회 생성, 이후에는 같은 객체를 재사용
    return Settings()
