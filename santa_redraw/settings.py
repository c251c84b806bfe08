from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, Field

from santa_redraw.config import (
    PARTICIPANTS_FILE_PATH,
    SUBMISSIONS_CSV_PATH,
    SUBMISSIONS_JSON_PATH,
)


class MultiPurchasePolicy(str, Enum):
    REJECT = "reject"
    FIRST = "first"


class MailgunSettings(BaseModel):
    api_key: str = ""
    domain: str = ""

    def is_configured(self) -> bool:
        return bool(self.api_key and self.domain)


class NetlifyEmailSettings(BaseModel):
    provider: str = ""
    secret: str = ""
    mailgun_domain: str = ""
    site_url: str = ""

    def is_configured(self) -> bool:
        return bool(self.provider and self.secret and self.mailgun_domain and self.site_url)


class DrawSettings(BaseModel):
    participants_path: Path = PARTICIPANTS_FILE_PATH
    submissions_json_path: Path = SUBMISSIONS_JSON_PATH
    submissions_csv_path: Path = SUBMISSIONS_CSV_PATH
    multi_purchase_policy: MultiPurchasePolicy = MultiPurchasePolicy.REJECT


class AppSettings(BaseModel):
    draw: DrawSettings = Field(default_factory=DrawSettings)
    mailgun: MailgunSettings = Field(default_factory=MailgunSettings)
    netlify_emails: NetlifyEmailSettings = Field(default_factory=NetlifyEmailSettings)
    log_level: str = "INFO"


def _env(environ: Mapping[str, str], key: str) -> str:
    return (environ.get(key) or "").strip()


def load_settings(environ: Mapping[str, str] | None = None) -> AppSettings:
    """
    Builds the settings object from environment variables.
    Unset variables fall back to the defaults above; a delivery channel whose
    credentials are missing simply reports is_configured() == False.
    """
    env = os.environ if environ is None else environ

    draw_kwargs = {}
    for field_name, key in (
        ("participants_path", "SANTA_PARTICIPANTS_PATH"),
        ("submissions_json_path", "SANTA_SUBMISSIONS_JSON_PATH"),
        ("submissions_csv_path", "SANTA_SUBMISSIONS_CSV_PATH"),
        ("multi_purchase_policy", "SANTA_MULTI_PURCHASE_POLICY"),
    ):
        value = _env(env, key)
        if value:
            draw_kwargs[field_name] = value.lower() if field_name == "multi_purchase_policy" else value

    return AppSettings(
        draw=DrawSettings(**draw_kwargs),
        mailgun=MailgunSettings(
            api_key=_env(env, "MAILGUN_API_KEY"),
            domain=_env(env, "MAILGUN_DOMAIN"),
        ),
        netlify_emails=NetlifyEmailSettings(
            provider=_env(env, "NETLIFY_EMAILS_PROVIDER"),
            secret=_env(env, "NETLIFY_EMAILS_SECRET"),
            mailgun_domain=_env(env, "NETLIFY_EMAILS_MAILGUN_DOMAIN"),
            site_url=_env(env, "URL").rstrip("/"),
        ),
        log_level=_env(env, "SANTA_LOG_LEVEL").upper() or "INFO",
    )
