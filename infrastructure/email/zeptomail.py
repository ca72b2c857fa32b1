"""ZeptoMail implementation of EmailSender.

Renders the Jinja2 templates in templates/emails and posts them to the
ZeptoMail HTTP API. Any non-2xx answer, transport error or missing API token
raises EmailDeliveryError; nothing is retried here.
"""

import os
from datetime import datetime, timezone
from typing import Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings, TokenSettings
from errors import EmailDeliveryError
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.com/v1.1/email"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


def _humanize_seconds(seconds: int) -> str:
    if seconds % 3600 == 0:
        hours = seconds // 3600
        return f"{hours} hour{'s' if hours != 1 else ''}"
    minutes = max(seconds // 60, 1)
    return f"{minutes} minute{'s' if minutes != 1 else ''}"


class ZeptoMailSender:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        token_settings: Optional[TokenSettings] = None,
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._tokens = token_settings or TokenSettings()
        self._frontend_url = settings.frontend_url.rstrip("/")
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def verification_link(self, token: str) -> str:
        return f"{self._frontend_url}/verify-email/{token}"

    def reset_link(self, token: str) -> str:
        return f"{self._frontend_url}/reset-password/{token}"

    def _render(self, template_name: str, **context) -> tuple[str, str]:
        context.setdefault("year", datetime.now(timezone.utc).year)
        context.setdefault("app_name", self._settings.zepto_from_name)
        html_body = self._jinja.get_template(f"{template_name}.html").render(**context)
        text_body = self._jinja.get_template(f"{template_name}.txt").render(**context)
        return html_body, text_body

    async def _send(
        self,
        to_email: str,
        to_name: Optional[str],
        subject: str,
        html_body: str,
        text_body: str,
    ) -> None:
        if not self._settings.zepto_api_token:
            log.error("email_send_failed", reason="token_not_configured", subject=subject)
            raise EmailDeliveryError("Email delivery is not configured")

        payload: dict = {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [
                {
                    "email_address": {
                        "address": to_email,
                        "name": to_name or to_email,
                    }
                }
            ],
            "subject": subject,
            "htmlbody": html_body,
            "textbody": text_body,
        }

        api_key = self._settings.zepto_api_token
        if not api_key.startswith("Zoho-enczapikey "):
            api_key = f"Zoho-enczapikey {api_key}"
        headers = {"Authorization": api_key, "Content-Type": "application/json"}

        try:
            response = await self._http.post(_ZEPTO_API_URL, json=payload, headers=headers)
        except httpx.HTTPError as e:
            log.error(
                "email_send_error",
                to_email=to_email,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise EmailDeliveryError("Failed to send email") from e

        if response.status_code not in (200, 201, 202):
            log.error(
                "email_send_failed",
                to_email=to_email,
                subject=subject,
                status_code=response.status_code,
                response=response.text[:200],
            )
            raise EmailDeliveryError("Failed to send email")

        log.info("email_sent", to_email=to_email, subject=subject)

    async def send_verification(
        self, email: str, token: str, username: Optional[str]
    ) -> None:
        html_body, text_body = self._render(
            "verification",
            username=username,
            link=self.verification_link(token),
            lifetime=_humanize_seconds(self._tokens.verification_token_ttl_seconds),
        )
        await self._send(
            email, username, "Verify Your Email - IDJ", html_body, text_body
        )

    async def send_password_reset(
        self, email: str, token: str, username: Optional[str]
    ) -> None:
        html_body, text_body = self._render(
            "password_reset",
            username=username,
            link=self.reset_link(token),
            lifetime=_humanize_seconds(self._tokens.reset_token_ttl_seconds),
        )
        await self._send(
            email, username, "Reset Your Password - IDJ", html_body, text_body
        )

    async def send_welcome(self, email: str, username: Optional[str]) -> None:
        html_body, text_body = self._render("welcome", username=username)
        await self._send(email, username, "Welcome to IDJ!", html_body, text_body)
