from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import jwt
import requests

from stripe_ops.errors import SheetsError

TOKEN_URL = "https://oauth2.googleapis.com/token"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"

_JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
_ASSERTION_LIFETIME = timedelta(minutes=60)
_REFRESH_MARGIN = timedelta(seconds=60)

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def service_account_assertion(client_email: str, private_key: str, now: datetime | None = None) -> str:
    iat = now or now_utc()
    exp = iat + _ASSERTION_LIFETIME
    payload = {
        "iss": client_email,
        "scope": SHEETS_SCOPE,
        "aud": TOKEN_URL,
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, private_key, algorithm="RS256")

class ServiceAccountToken:
    """OAuth access token for a Google service account, refreshed shortly before expiry."""

    def __init__(
        self,
        client_email: str,
        private_key: str,
        http: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.client_email = client_email
        self.private_key = private_key
        self.http = http or requests.Session()
        self.timeout = timeout
        self._token: str | None = None
        self._expires_at: datetime | None = None
        self._lock = threading.Lock()

    def get(self) -> str:
        with self._lock:
            now = now_utc()
            if self._token and self._expires_at and now < self._expires_at - _REFRESH_MARGIN:
                return self._token

            assertion = service_account_assertion(self.client_email, self.private_key, now)
            try:
                r = self.http.post(
                    TOKEN_URL,
                    data={"grant_type": _JWT_BEARER_GRANT, "assertion": assertion},
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                raise SheetsError(f"google token request failed: {e}") from e

            if not r.ok:
                raise SheetsError(f"google token error: {r.status_code} {r.text[:500]}", status_code=r.status_code)

            body = r.json()
            self._token = body["access_token"]
            self._expires_at = now + timedelta(seconds=int(body.get("expires_in", 3600)))
            return self._token
