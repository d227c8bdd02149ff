"""Human-readable purchase notifications for Telegram and Slack."""

from __future__ import annotations

import re

from stripe_ops.schemas.payments import PaymentRecord

TELEGRAM_RULE = "━" * 40
SLACK_RULE = "-" * 27

_CAMPAIGN_TOKENS = "WEB|EN|US|CA|AU|Broad|testora|LC|ABO|Core|cpi|fcb"

_CAMPAIGN_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"([a-zA-Z])(\d)"), r"\1_\2"),
    (re.compile(r"(\d)([a-zA-Z])"), r"\1_\2"),
    (re.compile(r"([a-z])([A-Z])"), r"\1_\2"),
    (re.compile(rf"([a-zA-Z])({_CAMPAIGN_TOKENS})([a-zA-Z])"), r"\1_\2_\3"),
    (re.compile(r"_+"), "_"),
]

def format_campaign_name(name: str | None) -> str | None:
    """Split glued ad/campaign names, e.g. ``summerSale2024`` -> ``summer_Sale_2024``."""
    if not name or name == "N/A":
        return name
    for pattern, repl in _CAMPAIGN_RULES:
        name = pattern.sub(repl, name)
    return name.strip("_")

def mask_email(email: str | None) -> str:
    if not email:
        return "-"
    local, sep, domain = email.partition("@")
    if not sep or not domain:
        return email
    masked = "*" if len(local) <= 1 else local[0] + "*" * (len(local) - 1)
    return f"{masked}@{domain}"

def format_telegram(record: PaymentRecord) -> str:
    lines = [
        f"🟢 Purchase purchase_{record.customer_id or 'unknown'} was processed!",
        TELEGRAM_RULE,
        f"💳 Payment Method: {record.payment_method.title()}",
        f"💰 Amount: {record.amount:.2f} {record.currency}",
        "🏷️ Payments: 1",
        TELEGRAM_RULE,
        f"📧 Email: {record.email or 'N/A'}",
        f"📍 Location: {record.location}",
    ]

    if record.creative_link:
        lines.append(f"🔗 Link: {record.creative_link}")

    campaign = [
        ("Ad", format_campaign_name(record.ad_name)),
        ("Adset", format_campaign_name(record.adset_name)),
        ("Campaign", format_campaign_name(record.campaign_name)),
    ]
    if any(v for _, v in campaign):
        lines.append(TELEGRAM_RULE)
        lines.append("📊 Campaign Data:")
        lines.extend(f"• {label}: {v}" for label, v in campaign if v)

    return "\n".join(lines)

def format_slack(record: PaymentRecord) -> str:
    def na(v: str | None) -> str:
        return v or "N/A"

    lines = [
        f"🟢 *Purchase {record.id} was processed!*",
        SLACK_RULE,
        f"💳 {record.payment_method}",
        f"💰 {record.amount:.2f} {record.currency}",
        f"🏷️ {record.payment_count or '1 payment'}",
        SLACK_RULE,
        f"📧 {na(record.email)}",
        SLACK_RULE,
        f"🌪️ {record.id}",
        f"📍 {na(record.country)}",
        f"🧍 {na(record.gender)}",
        f"🔗 {na(record.creative_link)}",
        na(record.utm_source),
        na(record.platform_placement),
        na(record.ad_name),
        na(record.adset_name),
        na(record.campaign_name or record.utm_campaign),
    ]
    return "\n".join(lines)
