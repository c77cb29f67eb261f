"""SMTP implementation of EmailProvider.

- smtplib sessions are blocking, so each send runs in a worker thread
- port 465 uses implicit TLS, any other port upgrades with STARTTLS when the
  server offers it
- HTML bodies come from Jinja2 templates; the plain-text alternative is
  derived from the rendered HTML
- every public method returns a bool and never raises
"""

from __future__ import annotations

import asyncio
import html
import os
import re
import smtplib
import ssl
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from config import SmtpSettings
from shared.logging import get_logger

log = get_logger(__name__)

_DEFAULT_TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
_IMPLICIT_TLS_PORT = 465

_BLOCK_RE = re.compile(r"<(style|script|head)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_BREAK_RE = re.compile(r"<\s*(br|/p|/div|/h[1-6]|/li|/tr)\b[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_SPACES_RE = re.compile(r"[ \t\r\f\v]+")
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")


def strip_html(markup: str) -> str:
    """Derive a plain-text body from rendered HTML."""
    text = _BLOCK_RE.sub("", markup)
    text = _BREAK_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    text = _SPACES_RE.sub(" ", text)
    lines = [line.strip() for line in text.split("\n")]
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()


class SmtpEmailProvider:
    def __init__(
        self,
        settings: SmtpSettings,
        app_name: str = "Secure Login",
        app_url: str = "http://localhost:3000",
        code_ttl_minutes: int = 10,
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._app_name = app_name
        self._app_url = app_url
        self._code_ttl_minutes = code_ttl_minutes
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )
        if not settings.is_configured:
            log.warning("email_transport_not_configured", smtp_host=settings.smtp_host or None)

    def _render(self, template_name: str, **context) -> str:
        template = self._jinja.get_template(template_name)
        return template.render(
            app_name=self._app_name,
            app_url=self._app_url,
            year=datetime.now(timezone.utc).year,
            **context,
        )

    def _build_message(self, to_email: str, subject: str, html_body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = formataddr((self._settings.smtp_from_name, self._settings.smtp_from))
        msg["To"] = to_email
        msg.set_content(strip_html(html_body))
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _connect(self) -> smtplib.SMTP:
        s = self._settings
        ctx = ssl.create_default_context()
        if s.smtp_port == _IMPLICIT_TLS_PORT:
            smtp: smtplib.SMTP = smtplib.SMTP_SSL(
                s.smtp_host, s.smtp_port, timeout=s.smtp_timeout_seconds, context=ctx
            )
        else:
            smtp = smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout_seconds)
        try:
            if s.smtp_port != _IMPLICIT_TLS_PORT:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls(context=ctx)
                    smtp.ehlo()
            smtp.login(s.smtp_user, s.smtp_pass)
        except Exception:
            smtp.close()
            raise
        return smtp

    def _deliver(self, msg: EmailMessage) -> None:
        with self._connect() as smtp:
            smtp.send_message(msg)

    def _probe(self) -> None:
        with self._connect() as smtp:
            smtp.noop()

    async def _send(self, to_email: str, subject: str, template_name: str, **context) -> bool:
        if not self._settings.is_configured:
            log.error("email_transport_not_configured", to_email=to_email)
            return False

        try:
            html_body = self._render(template_name, **context)
        except TemplateError as e:
            log.error(
                "email_render_error",
                to_email=to_email,
                template=template_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        msg = self._build_message(to_email, subject, html_body)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            log.error(
                "email_send_error",
                to_email=to_email,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        log.info("email_sent_success", to_email=to_email, subject=subject)
        return True

    async def send_mfa_code(
        self, email: str, code: str, user_name: Optional[str] = None
    ) -> bool:
        subject = f"Your verification code - {self._app_name}"
        return await self._send(
            email,
            subject,
            "mfa_code.html",
            code=code,
            user_name=user_name,
            ttl_minutes=self._code_ttl_minutes,
        )

    async def send_password_reset_code(
        self, email: str, code: str, user_name: Optional[str] = None
    ) -> bool:
        subject = f"Password reset code - {self._app_name}"
        return await self._send(
            email,
            subject,
            "password_reset.html",
            code=code,
            user_name=user_name,
            ttl_minutes=self._code_ttl_minutes,
        )

    async def send_welcome_email(self, email: str, user_name: Optional[str] = None) -> bool:
        subject = f"Welcome to {self._app_name}!"
        return await self._send(email, subject, "welcome.html", user_name=user_name)

    async def test_connection(self) -> bool:
        if not self._settings.is_configured:
            return False
        try:
            await asyncio.to_thread(self._probe)
        except (smtplib.SMTPException, OSError) as e:
            log.error("email_connection_failed", error=str(e), error_type=type(e).__name__)
            return False
        log.info("email_connection_ok", smtp_host=self._settings.smtp_host)
        return True
