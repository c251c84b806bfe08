from pathlib import Path


PARTICIPANTS_FILE_PATH = Path("participants.json")
SUBMISSIONS_JSON_PATH = Path("temp-submissions.json")
SUBMISSIONS_CSV_PATH = Path("temp-submissions.csv")

TEMPLATES_DIR = Path(__file__).parent / "templates"

MAX_DRAW_ATTEMPTS = 100

MAILGUN_API_BASE = "https://api.mailgun.net/v3"
NETLIFY_EMAILS_PATH = "/.netlify/functions/emails"
EMAIL_TIMEOUT = 10.0

ASSIGNMENT_SUBJECT = "Your New Secret Santa Assignment!"
TEST_EMAIL_SUBJECT = "Secret Santa test email"

SUBMITTER_NAME = "submitter-name"
SUBMITTER_EMAIL = "submitter-email"
RECEIVER_COLUMNS = (
    ("receiver-1-name", "gift-purchased-1"),
    ("receiver-2-name", "gift-purchased-2"),
)
