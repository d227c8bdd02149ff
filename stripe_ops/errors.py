class IntegrationError(Exception):
    """An outbound call to Telegram, Slack or Google Sheets failed."""

    service = "integration"

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

class TelegramError(IntegrationError):
    service = "telegram"

class SlackError(IntegrationError):
    service = "slack"

class SheetsError(IntegrationError):
    service = "sheets"
