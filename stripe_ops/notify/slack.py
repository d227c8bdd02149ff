from __future__ import annotations

import requests

from stripe_ops.config import settings
from stripe_ops.errors import SlackError
from stripe_ops.logging_config import get_logger

logger = get_logger(__name__)

SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"

def send_slack(text: str) -> bool:
    """Post ``text`` to the configured channel. Returns False when Slack is not configured."""
    if not settings.slack_configured:
        logger.info(
            "slack not configured, skipping notification",
            missing_token=not settings.SLACK_BOT_TOKEN,
            missing_channel=not settings.SLACK_CHANNEL_ID,
        )
        return False

    try:
        r = requests.post(
            SLACK_POST_MESSAGE_URL,
            headers={"authorization": f"Bearer {settings.SLACK_BOT_TOKEN}"},
            json={
                "channel": settings.SLACK_CHANNEL_ID,
                "text": text,
                "username": "Stripe Bot",
                "icon_emoji": ":money_with_wings:",
            },
            timeout=settings.http_timeout_seconds,
        )
    except requests.RequestException as e:
        raise SlackError(f"slack request failed: {e}") from e

    if not r.ok:
        raise SlackError(f"slack error: {r.status_code}", status_code=r.status_code)

    # slack answers 200 with ok=false for api-level errors
    body = r.json()
    if not body.get("ok"):
        raise SlackError(f"slack api error: {body.get('error', 'unknown')}", status_code=r.status_code)

    logger.info("slack notification sent", channel=settings.SLACK_CHANNEL_ID)
    return True
