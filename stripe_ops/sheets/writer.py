from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

import requests

from stripe_ops.config import settings
from stripe_ops.errors import SheetsError
from stripe_ops.logging_config import get_logger
from stripe_ops.schemas.payments import PaymentRecord
from stripe_ops.sheets.auth import ServiceAccountToken

logger = get_logger(__name__)

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"

HEADER = [
    "created_at",
    "session_id",
    "payment_status",
    "amount",
    "currency",
    "email",
    "country",
    "gender",
    "age",
    "product_tag",
    "creative_link",
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "platform_placement",
    "ad_name",
    "adset_name",
    "campaign_name",
    "web_campaign",
    "customer_id",
    "client_reference_id",
    "mode",
    "status",
    "raw_metadata_json",
]

ID_COLUMN = "B"  # session_id

# USER_ENTERED would evaluate metadata like "=HYPERLINK(...)" as a formula
_FORMULA_PREFIXES = ("=", "+", "-", "@")

def sheet_cell(value: Any) -> str:
    if value is None:
        return ""
    text = str(value)
    if text.startswith(_FORMULA_PREFIXES):
        return "'" + text
    return text

def payment_row(record: PaymentRecord) -> list[str]:
    values: dict[str, Any] = {
        "created_at": record.created_at.isoformat().replace("+00:00", "Z"),
        "session_id": record.id,
        "payment_status": record.payment_status,
        "amount": f"{record.amount:.2f}",
        "currency": record.currency,
        "email": record.email,
        "country": record.country,
        "gender": record.gender,
        "age": record.age,
        "product_tag": record.product_tag,
        "creative_link": record.creative_link,
        "utm_source": record.utm_source,
        "utm_medium": record.utm_medium,
        "utm_campaign": record.utm_campaign,
        "utm_content": record.utm_content,
        "utm_term": record.utm_term,
        "platform_placement": record.platform_placement,
        "ad_name": record.ad_name,
        "adset_name": record.adset_name,
        "campaign_name": record.campaign_name,
        "web_campaign": record.web_campaign,
        "customer_id": record.customer_id,
        "client_reference_id": record.client_reference_id,
        "mode": record.mode,
        "status": record.status,
        "raw_metadata_json": json.dumps(record.metadata, ensure_ascii=False, sort_keys=True),
    }
    return [sheet_cell(values[col]) for col in HEADER]

class SheetWriter:
    """Appends payment rows to one tab of a spreadsheet through the Sheets REST API."""

    def __init__(
        self,
        doc_id: str,
        token: ServiceAccountToken,
        tab: str = "payments",
        http: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.doc_id = doc_id
        self.token = token
        self.tab = tab
        self.http = http or requests.Session()
        self.timeout = timeout
        self._prepared = False

    def _range(self, a1: str) -> str:
        return quote(f"'{self.tab}'!{a1}", safe="")

    def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        url = f"{SHEETS_API}/{self.doc_id}{path}"
        headers = {"authorization": f"Bearer {self.token.get()}"}
        try:
            r = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise SheetsError(f"sheets request failed: {e}") from e

        if not r.ok:
            raise SheetsError(f"sheets error: {r.status_code} {r.text[:500]}", status_code=r.status_code)
        return r.json() if r.content else {}

    def ensure_tab(self) -> None:
        meta = self._request("GET", "", params={"fields": "sheets.properties.title"})
        titles = {s.get("properties", {}).get("title") for s in meta.get("sheets", [])}
        if self.tab in titles:
            return

        logger.info("creating sheet tab", tab=self.tab)
        self._request(
            "POST",
            ":batchUpdate",
            json={"requests": [{"addSheet": {"properties": {"title": self.tab}}}]},
        )

    def ensure_header(self) -> None:
        body = self._request("GET", f"/values/{self._range('1:1')}")
        rows = body.get("values") or []
        if rows and rows[0] == HEADER:
            return

        logger.info("writing sheet header", tab=self.tab, columns=len(HEADER))
        self._request(
            "PUT",
            f"/values/{self._range('A1')}",
            params={"valueInputOption": "RAW"},
            json={"values": [HEADER]},
        )

    def prepare(self) -> None:
        if self._prepared:
            return
        self.ensure_tab()
        self.ensure_header()
        self._prepared = True

    def existing_ids(self) -> set[str]:
        body = self._request("GET", f"/values/{self._range(f'{ID_COLUMN}2:{ID_COLUMN}')}")
        return {row[0] for row in body.get("values") or [] if row}

    def has_payment(self, payment_id: str) -> bool:
        return payment_id in self.existing_ids()

    def append_payment(self, record: PaymentRecord) -> bool:
        """Append ``record`` unless a row with its id is already there.

        Returns True when a row was written.
        """
        self.prepare()

        if self.has_payment(record.id):
            logger.info("sheet row already present, skipping", session_id=record.id)
            return False

        self._request(
            "POST",
            f"/values/{self._range('A1')}:append",
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            json={"values": [payment_row(record)]},
        )
        logger.info("sheet row appended", session_id=record.id, tab=self.tab)
        return True

_writer: SheetWriter | None = None

def get_sheet_writer() -> SheetWriter | None:
    global _writer
    if not settings.sheets_configured:
        return None
    if _writer is None:
        http = requests.Session()
        token = ServiceAccountToken(
            settings.GOOGLE_SERVICE_EMAIL,
            settings.GOOGLE_SERVICE_PRIVATE_KEY,
            http=http,
            timeout=settings.http_timeout_seconds,
        )
        _writer = SheetWriter(
            settings.GOOGLE_SHEETS_DOC_ID,
            token,
            tab=settings.google_sheets_tab,
            http=http,
            timeout=settings.http_timeout_seconds,
        )
    return _writer
