# Celery 작업 & 스케줄
# - 회원가입 환영 메일 발송 (API 요청과 분리해서 백그라운드로)
# - 매일 새벽(TRASH_SWEEP_HOUR) 30일 지난 휴지통 꿈 정리
#   주니어 개발자님께: 보통은 MongoDB TTL 인덱스가 알아서 지우지만,
#   TTL 모니터가 꺼진 환경에서도 같은 결과가 나오도록 같은 조건으로 한 번 더 지웁니다.
# - 실행: celery -A app.tasks.dream_tasks worker -B

import asyncio
import logging
from datetime import timedelta

from beanie import init_beanie
from celery import Celery
from celery.schedules import crontab
from pymongo import AsyncMongoClient

from ..core.config import get_settings
from ..models.dream import TRASH_RETENTION_DAYS, Dream
from ..models.user import User, utcnow
from ..repositories.dream_repository import DreamRepository
from ..services import email_service

logger = logging.getLogger(__name__)

settings = get_settings()

# Celery 앱 초기화
celery_app = Celery("dream_tasks", broker=settings.REDIS_URL, backend=settings.REDIS_URL)
celery_app.conf.timezone = settings.TIMEZONE
# 브로커 연결이 안 되면 재시도하지 않고 바로 실패 (호출한 쪽에서 로그만 남김)
celery_app.conf.task_publish_retry = False


# 비동기 Beanie 초기화 유틸
async def _init_beanie() -> AsyncMongoClient:
    client = AsyncMongoClient(settings.MONGODB_URI, tz_aware=True)
    db = client.get_default_database()
    await init_beanie(database=db, document_models=[User, Dream])
    return client


@celery_app.on_after_configure.connect
def setup_periodic_tasks(sender, **kwargs):
    if not settings.TRASH_SWEEP_ENABLED:
        logger.info("[Tasks] Trash sweep disabled")
        return
    sender.add_periodic_task(
        crontab(hour=settings.TRASH_SWEEP_HOUR, minute=0),
        purge_expired_trash.s(),
        name="purge_expired_trash_daily",
    )


@celery_app.task
def send_welcome_email_task(email: str, username: str) -> bool:
    return email_service.send_welcome_email(settings, email, username)


def queue_welcome_email(email: str, username: str) -> None:
    """환영 메일을 큐에 넣습니다. 브로커가 죽어 있어도 회원가입은 실패시키지 않습니다."""
    try:
        send_welcome_email_task.delay(email, username)
    except Exception as e:
        logger.warning(f"[Tasks] Failed to queue welcome email for {email}: {e}")


async def purge_trash(repo: DreamRepository, now=None) -> int:
    cutoff = (now or utcnow()) - timedelta(days=TRASH_RETENTION_DAYS)
    deleted = await repo.purge_trashed_before(cutoff)
    logger.info(f"[Tasks] Purged {deleted} expired dreams from trash (cutoff={cutoff.isoformat()})")
    return deleted


@celery_app.task
def purge_expired_trash() -> int:
    # Celery는 동기 함수이므로, 내부에서 asyncio 루프 실행
    async def _run():
        client = await _init_beanie()
        try:
            return await purge_trash(DreamRepository())
        finally:
            await client.close()
    return asyncio.run(_run())
