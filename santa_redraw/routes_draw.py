from __future__ import annotations

import logging
import random

import httpx
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from santa_redraw.errors import (
    AssignmentError,
    ConflictError,
    DeliveryError,
    MultiplePurchasesError,
    SourceError,
    UnbalancedPoolError,
)
from santa_redraw.repositories.participants_repository import load_roster
from santa_redraw.repositories.submissions_repository import (
    contact_map,
    load_submissions_csv,
    load_submissions_json,
)
from santa_redraw.schemas import AssignmentsPayload, DrawResponse
from santa_redraw.services.assignment_service import resolve_assignments
from santa_redraw.services.mail_service import (
    MailgunSender,
    NetlifyEmailSender,
    deliver_assignments,
    send_test_email,
)
from santa_redraw.settings import AppSettings


logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type, int] = {
    ConflictError: 409,
    MultiplePurchasesError: 422,
    UnbalancedPoolError: 422,
}


def _respond(status_code: int, body: DrawResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=True))


def _failure(exc: Exception) -> JSONResponse:
    status = ERROR_STATUS.get(type(exc), 500)
    logger.error("Error executing draw: %s", exc)
    return _respond(status, DrawResponse(success=False, message=f"An error occurred: {exc}"))


def _not_configured(message: str) -> JSONResponse:
    return _respond(500, DrawResponse(success=False, message=message))


def register_draw_routes(
    app: FastAPI,
    settings: AppSettings,
    rng: random.Random | None = None,
    mail_transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    draw = settings.draw

    @app.post("/generate-assignments")
    async def generate_assignments():
        """
        Draws from participants.json and the CSV submissions without sending anything.
        """
        try:
            roster = load_roster(draw.participants_path)
            submissions = load_submissions_csv(draw.submissions_csv_path)
            outcome = resolve_assignments(roster, submissions, rng=rng, policy=draw.multi_purchase_policy)
        except (AssignmentError, SourceError) as exc:
            return _failure(exc)

        return _respond(200, DrawResponse(
            success=True,
            message=f"Successfully generated {outcome.count} assignments.",
            assignments=outcome.assignments,
        ))

    @app.post("/run-draw")
    async def run_draw():
        """
        Draws from participants.json and the JSON submissions, then mails every giver via Mailgun.
        """
        if not settings.mailgun.is_configured():
            return _not_configured("Mailgun API Key or Domain is not set in environment variables.")

        try:
            roster = load_roster(draw.participants_path)
            submissions = load_submissions_json(draw.submissions_json_path)
            outcome = resolve_assignments(roster, submissions, rng=rng, policy=draw.multi_purchase_policy)
        except (AssignmentError, SourceError) as exc:
            return _failure(exc)

        sender = MailgunSender(settings.mailgun, transport=mail_transport)
        report = await deliver_assignments(outcome.assignments, contact_map(submissions), sender)

        return _respond(200, DrawResponse(
            success=True,
            message=(
                f"Successfully processed the draw. {outcome.count} assignments were finalized "
                f"and {report.attempted} emails were sent."
            ),
            assignments=outcome.assignments,
        ))

    @app.post("/send-emails")
    async def send_emails(payload: AssignmentsPayload):
        """
        Mails an already computed list of assignments through Netlify Emails,
        looking contacts up in the CSV submissions.
        """
        if not settings.netlify_emails.is_configured():
            return _not_configured(
                "Required email environment variables are not set. "
                "Please configure the Netlify Email Integration."
            )

        try:
            submissions = load_submissions_csv(draw.submissions_csv_path)
        except SourceError as exc:
            return _failure(exc)

        sender = NetlifyEmailSender(settings.netlify_emails, transport=mail_transport)
        report = await deliver_assignments(payload.assignments, contact_map(submissions), sender)

        return _respond(200, DrawResponse(
            success=True,
            message=f"{report.attempted} emails were successfully queued for sending.",
        ))

    @app.get("/test-email")
    async def test_email(to: str):
        if not settings.netlify_emails.is_configured():
            return _not_configured(
                "Required email environment variables are not set. "
                "Please configure the Netlify Email Integration."
            )

        sender = NetlifyEmailSender(settings.netlify_emails, transport=mail_transport)
        try:
            await send_test_email(sender, to)
        except DeliveryError as exc:
            return _respond(exc.status_code or 502, DrawResponse(
                success=False,
                message=f"Failed to send test email. {exc}",
            ))

        return _respond(200, DrawResponse(
            success=True,
            message=f"Test email sent successfully! Check the inbox for {to}.",
        ))
