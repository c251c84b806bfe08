from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Protocol

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel, Field

from santa_redraw.config import (
    ASSIGNMENT_SUBJECT,
    EMAIL_TIMEOUT,
    MAILGUN_API_BASE,
    NETLIFY_EMAILS_PATH,
    TEMPLATES_DIR,
    TEST_EMAIL_SUBJECT,
)
from santa_redraw.errors import DeliveryError
from santa_redraw.schemas import Assignment, DeliveryReport
from santa_redraw.settings import MailgunSettings, NetlifyEmailSettings


logger = logging.getLogger(__name__)

ASSIGNMENT_TEMPLATE = "assignment"
TEST_TEMPLATE = "test-email"

_templates = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


class OutgoingEmail(BaseModel):
    to: str
    subject: str
    template: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class EmailSender(Protocol):
    async def send(self, email: OutgoingEmail) -> None: ...


def render_email(template: str, parameters: dict[str, Any]) -> str:
    return _templates.get_template(f"{template}.html").render(**parameters)


def compose_assignment_email(assignment: Assignment, to: str) -> OutgoingEmail:
    return OutgoingEmail(
        to=to,
        subject=ASSIGNMENT_SUBJECT,
        template=ASSIGNMENT_TEMPLATE,
        parameters={"giver": assignment.giver, "receiver": assignment.receiver},
    )


async def _post(to: str, url: str, transport: httpx.AsyncBaseTransport | None, **kwargs) -> None:
    try:
        async with httpx.AsyncClient(timeout=EMAIL_TIMEOUT, transport=transport) as client:
            r = await client.post(url, **kwargs)
    except httpx.HTTPError as exc:
        raise DeliveryError(to, str(exc)) from exc
    if r.status_code >= 400:
        raise DeliveryError(to, r.text, status_code=r.status_code)


class MailgunSender:
    """Sends fully rendered HTML through the Mailgun messages API."""

    def __init__(self, settings: MailgunSettings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self.transport = transport

    @property
    def sender_address(self) -> str:
        return f"Secret Santa Admin <mail@{self.settings.domain}>"

    async def send(self, email: OutgoingEmail) -> None:
        await _post(
            email.to,
            f"{MAILGUN_API_BASE}/{self.settings.domain}/messages",
            self.transport,
            auth=("api", self.settings.api_key),
            data={
                "from": self.sender_address,
                "to": email.to,
                "subject": email.subject,
                "html": render_email(email.template, email.parameters),
            },
        )


class NetlifyEmailSender:
    """
    Hands the message to the Netlify Emails function, which renders the
    template named in the URL with `parameters` and relays it to the provider.
    """

    def __init__(self, settings: NetlifyEmailSettings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self.transport = transport

    @property
    def sender_address(self) -> str:
        return f"santa@{self.settings.mailgun_domain}"

    async def send(self, email: OutgoingEmail) -> None:
        await _post(
            email.to,
            f"{self.settings.site_url}{NETLIFY_EMAILS_PATH}/{email.template}",
            self.transport,
            headers={"netlify-emails-secret": self.settings.secret},
            json={
                "from": self.sender_address,
                "to": email.to,
                "subject": email.subject,
                "parameters": email.parameters,
            },
        )


async def deliver_assignments(
    assignments: Iterable[Assignment],
    contacts: dict[str, str],
    sender: EmailSender,
) -> DeliveryReport:
    report = DeliveryReport()
    outgoing: list[OutgoingEmail] = []

    for pair in assignments:
        to = contacts.get(pair.giver)
        if not to:
            logger.warning("Could not find email for giver: %s", pair.giver)
            report.skipped.append(pair.giver)
            continue
        outgoing.append(compose_assignment_email(pair, to))

    report.attempted = len(outgoing)
    results = await asyncio.gather(*(sender.send(e) for e in outgoing), return_exceptions=True)

    for email, result in zip(outgoing, results):
        if isinstance(result, DeliveryError):
            logger.error("%s", result)
            report.failed.append(email.to)
        elif isinstance(result, Exception):
            logger.error("Unexpected failure sending to %s: %r", email.to, result)
            report.failed.append(email.to)
        elif isinstance(result, BaseException):
            raise result

    return report


async def send_test_email(sender: EmailSender, to: str) -> None:
    await sender.send(OutgoingEmail(to=to, subject=TEST_EMAIL_SUBJECT, template=TEST_TEMPLATE))
