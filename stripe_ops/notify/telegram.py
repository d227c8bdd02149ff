from __future__ import annotations

import requests

from stripe_ops.config import settings
from stripe_ops.errors import TelegramError
from stripe_ops.logging_config import get_logger

logger = get_logger(__name__)

TELEGRAM_API = "https://api.telegram.org"

def _url(method: str) -> str:
    return f"{TELEGRAM_API}/bot{settings.TELEGRAM_BOT_TOKEN}/{method}"

def send_telegram(text: str) -> bool:
    """Post ``text`` to the configured chat. Returns False when Telegram is not configured."""
    if not settings.telegram_configured:
        logger.info("telegram not configured, skipping notification")
        return False

    try:
        r = requests.post(
            _url("sendMessage"),
            json={
                "chat_id": settings.TELEGRAM_CHAT_ID,
                "text": text,
                "disable_web_page_preview": True,
            },
            timeout=settings.http_timeout_seconds,
        )
    except requests.RequestException as e:
        raise TelegramError(f"telegram request failed: {e}") from e

    if not r.ok:
        raise TelegramError(f"telegram error: {r.status_code} {r.text[:500]}", status_code=r.status_code)

    logger.info("telegram notification sent", chat_id=settings.TELEGRAM_CHAT_ID)
    return True

# bot identity check for /status
def telegram_ping() -> bool:
    r = requests.get(_url("getMe"), timeout=settings.http_timeout_seconds)
    return r.ok and bool(r.json().get("ok"))
