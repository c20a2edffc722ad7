# 이메일 서비스
# - SMTP 로 HTML + 텍스트 메일 발송
# - SMTP 설정이 없으면 (개발 환경) 실제로 보내지 않고 로그로만 남김
# - 발송 실패는 로그만 남기고 False 를 돌려줍니다 (호출한 쪽을 실패시키지 않음)

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from ..core.config import Settings

logger = logging.getLogger(__name__)

WELCOME_SUBJECT = "Welcome to NightLog - Start Your Dream Journey"


def _send_email(settings: Settings, to_email: str, subject: str, html: str, text: Optional[str] = None):
    # 간단한 SMTP 발송 (Gmail 등)
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to_email
    if text:
        msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30)
    try:
        if settings.SMTP_TLS:
            server.starttls()
        if settings.SMTP_USER and settings.SMTP_PASSWORD:
            server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        server.sendmail(settings.SMTP_FROM, [to_email], msg.as_string())
    finally:
        server.quit()


def send_email(settings: Settings, to_email: str, subject: str, html: str, text: Optional[str] = None) -> bool:
    if not settings.smtp_enabled:
        logger.info(f"[Email] SMTP not configured, skipping send. To: {to_email} Subject: {subject}")
        if text:
            logger.debug(text)
        return True

    try:
        _send_email(settings, to_email, subject, html, text)
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"[Email] Failed to send email to {to_email}: {e}", exc_info=True)
        return False


def render_welcome_email(username: str, client_url: str):
    dashboard_url = f"{client_url.rstrip('/')}/dashboard"
    html = f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Welcome to NightLog</title></head>
<body style="margin:0;padding:40px 20px;background-color:#0a0a0f;font-family:Arial,sans-serif;">
  <div style="max-width:600px;margin:0 auto;background-color:#12121a;border-radius:16px;padding:40px;">
    <h1 style="color:#f8fafc;font-size:28px;text-align:center;">Welcome to NightLog</h1>
    <p style="color:#94a3b8;font-size:16px;">Hi <strong style="color:#f8fafc;">{username}</strong>,</p>
    <p style="color:#94a3b8;font-size:16px;">
      Welcome to NightLog! We're excited to have you join our community of dream explorers.
    </p>
    <p style="color:#94a3b8;font-size:16px;">
      Start recording your dreams and let our AI help you discover hidden patterns,
      symbols, and meanings in your subconscious mind.
    </p>
    <p style="text-align:center;">
      <a href="{dashboard_url}" style="display:inline-block;padding:14px 32px;background:#6366f1;color:#ffffff;text-decoration:none;border-radius:8px;">
        Start Your Journey
      </a>
    </p>
    <p style="color:#64748b;font-size:13px;text-align:center;">Sweet dreams,<br>The NightLog Team</p>
  </div>
</body>
</html>"""

    text = (
        f"Welcome to NightLog, {username}!\n\n"
        "We're excited to have you join our community of dream explorers.\n\n"
        "Start recording your dreams and let our AI help you discover hidden patterns, "
        "symbols, and meanings in your subconscious mind.\n\n"
        f"Get started: {dashboard_url}\n\n"
        "Sweet dreams,\nThe NightLog Team\n"
    )
    return html, text


def send_welcome_email(settings: Settings, email: str, username: str) -> bool:
    html, text = render_welcome_email(username, settings.CLIENT_URL)
    return send_email(settings, email, WELCOME_SUBJECT, html, text)
