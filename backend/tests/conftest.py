# 공용 테스트 픽스처
# - MongoDB 없이 돌리기 위해 저장소(Repository)를 메모리 구현으로 바꿔 끼웁니다
# - 환영 메일 큐잉은 항상 모킹 (Redis 불필요)

import asyncio
import os
from datetime import datetime
from typing import Any, Dict, List, Optional
from unittest.mock import patch

# 설정 객체가 만들어지기 전에 필수 환경 변수를 채워둡니다
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["ENV"] = "test"

import pytest
from beanie import PydanticObjectId
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from app.core.config import Settings
from app.main import create_app
from app.models.dream import DreamAnalysis
from app.models.user import UserPreferences, utcnow
from app.repositories.dream_repository import DreamRepository
from app.repositories.user_repository import UserRepository

VALID_PASSWORD = "Passw0rd1"


class FakeUser(BaseModel):
    id: PydanticObjectId = Field(default_factory=PydanticObjectId)
    username: str
    email: str
    hashed_password: str
    avatar: str = ""
    bio: str = ""
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    is_verified: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class FakeDream(BaseModel):
    id: PydanticObjectId = Field(default_factory=PydanticObjectId)
    user_id: PydanticObjectId
    title: str
    content: str
    date: datetime = Field(default_factory=utcnow)
    tags: List[str] = Field(default_factory=list)
    is_lucid: bool = False
    mood: Optional[str] = None
    clarity: int = 3
    analysis: Optional[DreamAnalysis] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


def _field(doc: BaseModel, key: str) -> Any:
    return doc.id if key == "_id" else getattr(doc, key)


def matches(doc: BaseModel, filters: Dict[str, Any]) -> bool:
    """MongoDB 필터 중 서비스가 실제로 만드는 연산자만 흉내냅니다"""
    for key, cond in filters.items():
        if key == "$text":
            words = cond["$search"].lower().split()
            haystack = " ".join([doc.title, doc.content, *doc.tags]).lower()
            if not any(w in haystack for w in words):
                return False
            continue

        value = _field(doc, key)
        if isinstance(cond, dict):
            for op, operand in cond.items():
                if op == "$gte" and not value >= operand:
                    return False
                if op == "$lte" and not value <= operand:
                    return False
                if op == "$lt" and not value < operand:
                    return False
                if op == "$ne" and value == operand:
                    return False
        elif value != cond:
            return False
    return True


class FakeDreamRepository:
    """DreamRepository 와 같은 인터페이스의 메모리 저장소

    get 은 저장된 문서의 복사본을 돌려주고 save 전까지 반영되지 않습니다 (DB 와 같은 동작).
    """

    def __init__(self):
        self.docs: Dict[str, FakeDream] = {}

    def add(self, **fields) -> FakeDream:
        dream = FakeDream(**fields)
        self.docs[str(dream.id)] = dream
        return dream.model_copy(deep=True)

    def stored(self, dream_id) -> Optional[FakeDream]:
        return self.docs.get(str(dream_id))

    async def get(self, dream_id: str):
        doc = self.docs.get(str(dream_id))
        copy = doc.model_copy(deep=True) if doc else None
        # 다른 요청이 끼어들 수 있는 지점
        await asyncio.sleep(0)
        return copy

    async def create(self, user_id, fields):
        return self.add(user_id=user_id, **fields)

    async def save(self, dream):
        dream.updated_at = utcnow()
        self.docs[str(dream.id)] = dream.model_copy(deep=True)
        return dream

    async def delete(self, dream) -> None:
        self.docs.pop(str(dream.id), None)

    def _find(self, filters) -> List[FakeDream]:
        return [d for d in self.docs.values() if matches(d, filters)]

    async def find_page(self, filters, sort, skip, limit):
        found = self._find(filters)
        for field, direction in reversed(sort):
            found.sort(key=lambda d: getattr(d, field), reverse=direction < 0)
        return [d.model_copy(deep=True) for d in found[skip:skip + limit]]

    async def count(self, filters) -> int:
        return len(self._find(filters))

    async def find_trashed(self, user_id):
        found = self._find({"user_id": user_id, "is_deleted": True})
        found.sort(key=lambda d: d.deleted_at, reverse=True)
        return [d.model_copy(deep=True) for d in found]

    async def find_insight_rows(self, match):
        return [
            {
                "date": d.date,
                "clarity": d.clarity,
                "is_lucid": d.is_lucid,
                "tags": list(d.tags),
                "mood": d.mood,
                "symbols": list(d.analysis.symbols) if d.analysis else [],
            }
            for d in self._find(match)
        ]

    async def purge_trashed_before(self, cutoff) -> int:
        expired = [k for k, d in self.docs.items() if d.is_deleted and d.deleted_at < cutoff]
        for key in expired:
            del self.docs[key]
        return len(expired)


class FakeUserRepository:
    def __init__(self):
        self.docs: Dict[str, FakeUser] = {}

    async def get_by_email(self, email: str):
        return next((u.model_copy(deep=True) for u in self.docs.values() if u.email == email.lower()), None)

    async def get_by_username(self, username: str, exclude_id=None):
        for u in self.docs.values():
            if u.username == username and (exclude_id is None or u.id != exclude_id):
                return u.model_copy(deep=True)
        return None

    async def create(self, username: str, email: str, hashed_password: str):
        user = FakeUser(username=username, email=email.lower(), hashed_password=hashed_password)
        self.docs[str(user.id)] = user
        return user.model_copy(deep=True)

    async def get(self, user_id: str):
        user = self.docs.get(str(user_id))
        return user.model_copy(deep=True) if user else None

    async def save(self, user):
        user.updated_at = utcnow()
        self.docs[str(user.id)] = user.model_copy(deep=True)
        return user

    async def delete(self, user) -> None:
        self.docs.pop(str(user.id), None)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        JWT_SECRET_KEY="test-secret-key",
        ENV="test",
        AI_API_KEY=None,
        SMTP_HOST="",
        SMTP_USER="",
        CLOUDINARY_CLOUD_NAME="",
        CLOUDINARY_API_KEY="",
        CLOUDINARY_API_SECRET="",
    )


@pytest.fixture
def dream_repo() -> FakeDreamRepository:
    return FakeDreamRepository()


@pytest.fixture
def user_repo() -> FakeUserRepository:
    return FakeUserRepository()


@pytest.fixture(autouse=True)
def welcome_email_queue():
    with patch("app.api.routes.auth.queue_welcome_email") as mocked:
        yield mocked


@pytest.fixture
def app(settings, dream_repo, user_repo):
    application = create_app(settings, init_db=False)
    application.dependency_overrides[DreamRepository] = lambda: dream_repo
    application.dependency_overrides[UserRepository] = lambda: user_repo
    return application


@pytest.fixture
def make_client(app):
    """사용자마다 쿠키 저장소가 분리된 클라이언트를 만듭니다"""
    def _make() -> TestClient:
        return TestClient(app)
    return _make


@pytest.fixture
def register(make_client):
    def _register(username: str = "dreamer", email: Optional[str] = None) -> TestClient:
        client = make_client()
        resp = client.post(
            "/api/auth/register",
            json={"username": username, "email": email or f"{username}@example.com", "password": VALID_PASSWORD},
        )
        assert resp.status_code == 201, resp.text
        return client
    return _register


@pytest.fixture
def client(register) -> TestClient:
    return register()
