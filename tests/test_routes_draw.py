import json
import random
import tempfile
import unittest
from pathlib import Path

import httpx
from fastapi.testclient import TestClient

from santa_redraw.app_factory import create_app
from santa_redraw.settings import AppSettings, DrawSettings, MailgunSettings, NetlifyEmailSettings


CSV_HEADER = "submitter-name,submitter-email,receiver-1-name,gift-purchased-1,receiver-2-name,gift-purchased-2\n"


class DrawRoutesTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        tmp = Path(self._tmp.name)

        self.participants = tmp / "participants.json"
        self.submissions_json = tmp / "temp-submissions.json"
        self.submissions_csv = tmp / "temp-submissions.csv"

        self.participants.write_text(json.dumps(["Alice", "Bob", "Cara", "Dan"]), encoding="utf-8")
        self.write_json_submissions([
            {"submitter-name": "Alice", "submitter-email": "alice@example.com",
             "receiver-1-name": "Bob", "gift-purchased-1": "true"},
            {"submitter-name": "Bob", "submitter-email": "bob@example.com"},
            {"submitter-name": "Cara", "submitter-email": "cara@example.com"},
        ])
        self.submissions_csv.write_text(
            CSV_HEADER
            + "Alice,alice@example.com,Bob,true,,\n"
            + "Cara,cara@example.com,Dan,false,,\n",
            encoding="utf-8",
        )

        self.requests = []

    def write_json_submissions(self, rows):
        self.submissions_json.write_text(json.dumps(rows), encoding="utf-8")

    def handler(self, request):
        self.requests.append(request)
        return httpx.Response(200, json={"message": "Queued"})

    def client(self, mailgun=True, netlify=True):
        settings = AppSettings(
            draw=DrawSettings(
                participants_path=self.participants,
                submissions_json_path=self.submissions_json,
                submissions_csv_path=self.submissions_csv,
            ),
            mailgun=MailgunSettings(api_key="key", domain="mg.example.com") if mailgun else MailgunSettings(),
            netlify_emails=NetlifyEmailSettings(
                provider="mailgun", secret="s", mailgun_domain="mg.example.com", site_url="https://santa.test",
            ) if netlify else NetlifyEmailSettings(),
        )
        app = create_app(settings, rng=random.Random(11), mail_transport=httpx.MockTransport(self.handler))
        return TestClient(app)

    def test_generate_assignments_returns_full_derangement(self):
        r = self.client().post("/generate-assignments")

        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], "Successfully generated 4 assignments.")
        pairs = body["assignments"]
        self.assertEqual(pairs[0], {"giver": "Alice", "receiver": "Bob"})
        self.assertEqual(sorted(p["giver"] for p in pairs), ["Alice", "Bob", "Cara", "Dan"])
        self.assertEqual(sorted(p["receiver"] for p in pairs), ["Alice", "Bob", "Cara", "Dan"])
        self.assertTrue(all(p["giver"] != p["receiver"] for p in pairs))
        self.assertEqual(self.requests, [])

    def test_only_post_is_accepted(self):
        r = self.client().get("/generate-assignments")
        self.assertEqual(r.status_code, 405)

    def test_run_draw_sends_one_email_per_known_contact(self):
        r = self.client().post("/run-draw")

        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertTrue(body["success"])
        self.assertEqual(
            body["message"],
            "Successfully processed the draw. 4 assignments were finalized and 3 emails were sent.",
        )
        self.assertEqual(len(self.requests), 3)
        self.assertTrue(all(str(req.url).endswith("/mg.example.com/messages") for req in self.requests))

    def test_run_draw_conflict_is_reported_without_sending(self):
        self.write_json_submissions([
            {"submitter-name": "Alice", "receiver-1-name": "Dan", "gift-purchased-1": "true"},
            {"submitter-name": "Cara", "receiver-1-name": "Dan", "gift-purchased-1": "true"},
        ])

        r = self.client().post("/run-draw")

        self.assertEqual(r.status_code, 409)
        body = r.json()
        self.assertFalse(body["success"])
        self.assertIn("Manual intervention is required", body["message"])
        self.assertNotIn("assignments", body)
        self.assertEqual(self.requests, [])

    def test_run_draw_requires_mailgun_settings(self):
        r = self.client(mailgun=False).post("/run-draw")

        self.assertEqual(r.status_code, 500)
        self.assertIn("Mailgun API Key or Domain is not set", r.json()["message"])

    def test_missing_participant_file_is_reported(self):
        self.participants.unlink()
        r = self.client().post("/generate-assignments")

        self.assertEqual(r.status_code, 500)
        self.assertTrue(r.json()["message"].startswith("An error occurred:"))

    def test_send_emails_uses_csv_contacts(self):
        payload = {"assignments": [
            {"giver": "Alice", "receiver": "Bob"},
            {"giver": "Cara", "receiver": "Alice"},
            {"giver": "Bob", "receiver": "Cara"},
        ]}

        r = self.client().post("/send-emails", json=payload)

        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["message"], "2 emails were successfully queued for sending.")
        self.assertEqual(len(self.requests), 2)
        self.assertTrue(all(
            str(req.url) == "https://santa.test/.netlify/functions/emails/assignment" for req in self.requests
        ))

    def test_send_emails_without_site_url_is_not_configured(self):
        settings = AppSettings(
            draw=DrawSettings(submissions_csv_path=self.submissions_csv),
            netlify_emails=NetlifyEmailSettings(provider="mailgun", secret="s", mailgun_domain="mg.example.com"),
        )
        client = TestClient(create_app(settings, mail_transport=httpx.MockTransport(self.handler)))

        r = client.post("/send-emails", json={"assignments": [{"giver": "Alice", "receiver": "Bob"}]})

        self.assertEqual(r.status_code, 500)
        self.assertFalse(r.json()["success"])
        self.assertEqual(self.requests, [])

    def test_send_emails_rejects_invalid_payload(self):
        r = self.client().post("/send-emails", json={"nope": []})
        self.assertEqual(r.status_code, 422)

    def test_test_email_reports_provider_failure(self):
        def failing(request):
            return httpx.Response(503, text="unavailable")

        settings = AppSettings(netlify_emails=NetlifyEmailSettings(
            provider="mailgun", secret="s", mailgun_domain="mg.example.com", site_url="https://santa.test",
        ))
        client = TestClient(create_app(settings, mail_transport=httpx.MockTransport(failing)))

        r = client.get("/test-email", params={"to": "jan@example.com"})

        self.assertEqual(r.status_code, 503)
        self.assertFalse(r.json()["success"])

    def test_test_email_success(self):
        r = self.client().get("/test-email", params={"to": "jan@example.com"})

        self.assertEqual(r.status_code, 200)
        self.assertIn("jan@example.com", r.json()["message"])
        self.assertTrue(str(self.requests[0].url).endswith("/emails/test-email"))


if __name__ == "__main__":
    unittest.main()
