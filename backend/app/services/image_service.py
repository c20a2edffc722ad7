# 이미지 저장소 (Cloudinary) 연동
# - Cloudinary SDK 로 업로드 (서명은 SDK 가 처리)
# - 저장소가 돌려준 secure_url 만 사용합니다

import io
import logging
from typing import Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from ..core.config import Settings
from ..core.exceptions import InternalServerError

logger = logging.getLogger(__name__)

AVATAR_FOLDER = "nightlog/avatars"
# 400x400 얼굴 기준 크롭 + 자동 포맷/품질
AVATAR_TRANSFORMATION = [
    {"width": 400, "height": 400, "crop": "fill", "gravity": "face"},
    {"quality": "auto", "fetch_format": "auto"},
]


def configure_cloudinary(settings: Settings) -> None:
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )


def upload_image(
    settings: Settings,
    content: bytes,
    content_type: str,
    folder: str = AVATAR_FOLDER,
    filename: Optional[str] = None,
) -> str:
    if not settings.image_store_enabled:
        logger.error("[ImageService] Cloudinary is not configured")
        raise InternalServerError("Avatar upload failed")

    configure_cloudinary(settings)
    try:
        result = cloudinary.uploader.upload(
            io.BytesIO(content),
            folder=folder,
            transformation=AVATAR_TRANSFORMATION,
            resource_type="image",
            filename=filename,
        )
    except cloudinary.exceptions.Error as e:
        logger.error(f"[ImageService] Upload failed ({content_type}): {e}", exc_info=True)
        raise InternalServerError("Avatar upload failed")

    secure_url = (result or {}).get("secure_url")
    if not secure_url:
        logger.error("[ImageService] Upload response has no secure_url")
        raise InternalServerError("Avatar upload failed")
    return secure_url
