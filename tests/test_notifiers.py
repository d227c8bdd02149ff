from unittest.mock import MagicMock, patch

import pytest
import requests

from stripe_ops.config import settings
from stripe_ops.errors import SlackError, TelegramError
from stripe_ops.notify.slack import SLACK_POST_MESSAGE_URL, send_slack
from stripe_ops.notify.telegram import send_telegram

def _resp(status: int = 200, body: dict | None = None) -> MagicMock:
    r = MagicMock()
    r.status_code = status
    r.ok = 200 <= status < 300
    r.text = str(body)
    r.json.return_value = body or {}
    return r

@pytest.fixture()
def telegram_env():
    settings.TELEGRAM_BOT_TOKEN = "123:abc"
    settings.TELEGRAM_CHAT_ID = "-100200"

@pytest.fixture()
def slack_env():
    settings.SLACK_BOT_TOKEN = "xoxb-test"
    settings.SLACK_CHANNEL_ID = "C123"

@patch("stripe_ops.notify.telegram.requests.post")
def test_telegram_send(mock_post, telegram_env):
    mock_post.return_value = _resp(200, {"ok": True})

    assert send_telegram("hello") is True

    url = mock_post.call_args.args[0]
    payload = mock_post.call_args.kwargs["json"]
    assert url == "https://api.telegram.org/bot123:abc/sendMessage"
    assert payload == {"chat_id": "-100200", "text": "hello", "disable_web_page_preview": True}
    assert mock_post.call_args.kwargs["timeout"] == settings.http_timeout_seconds

@patch("stripe_ops.notify.telegram.requests.post")
def test_telegram_error_status_raises(mock_post, telegram_env):
    mock_post.return_value = _resp(400, {"ok": False, "description": "chat not found"})

    with pytest.raises(TelegramError) as exc:
        send_telegram("hello")
    assert exc.value.status_code == 400

@patch("stripe_ops.notify.telegram.requests.post")
def test_telegram_network_error_raises(mock_post, telegram_env):
    mock_post.side_effect = requests.ConnectionError("refused")

    with pytest.raises(TelegramError):
        send_telegram("hello")

@patch("stripe_ops.notify.telegram.requests.post")
def test_telegram_unconfigured_is_skipped(mock_post):
    assert send_telegram("hello") is False
    mock_post.assert_not_called()

@patch("stripe_ops.notify.slack.requests.post")
def test_slack_send(mock_post, slack_env):
    mock_post.return_value = _resp(200, {"ok": True, "ts": "1.2"})

    assert send_slack("hello") is True

    assert mock_post.call_args.args[0] == SLACK_POST_MESSAGE_URL
    assert mock_post.call_args.kwargs["headers"]["authorization"] == "Bearer xoxb-test"
    payload = mock_post.call_args.kwargs["json"]
    assert payload["channel"] == "C123"
    assert payload["text"] == "hello"

@patch("stripe_ops.notify.slack.requests.post")
def test_slack_api_error_raises(mock_post, slack_env):
    # slack reports api failures with http 200
    mock_post.return_value = _resp(200, {"ok": False, "error": "channel_not_found"})

    with pytest.raises(SlackError, match="channel_not_found"):
        send_slack("hello")

@patch("stripe_ops.notify.slack.requests.post")
def test_slack_http_error_raises(mock_post, slack_env):
    mock_post.return_value = _resp(500)

    with pytest.raises(SlackError):
        send_slack("hello")

@patch("stripe_ops.notify.slack.requests.post")
def test_slack_unconfigured_is_skipped(mock_post):
    settings.SLACK_BOT_TOKEN = "xoxb-test"

    assert send_slack("hello") is False
    mock_post.assert_not_called()
