import os
import logging
from dotenv import load_dotenv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Load .env from project root
try:
    load_dotenv(dotenv_path=os.path.join(PROJECT_ROOT, ".env"))
except Exception:
    load_dotenv()

# Storage
# Either a SQLAlchemy URL or a plain path to a SQLite file
DATABASE_URL = (os.getenv("DATABASE_URL", "") or "").strip() or os.path.join(PROJECT_ROOT, "waitlist.db")
SQL_ECHO = (os.getenv("SQL_ECHO", "0") or "0").strip().lower() in ("1", "true", "yes")

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
ALLOWED_ORIGINS = [o.strip() for o in (os.getenv("ALLOWED_ORIGINS") or "*").split(",") if o.strip()]

# Outbound notification (Resend first, SMTP as fallback)
RESEND_API_KEY = os.getenv("RESEND_API_KEY", "").strip()
RESEND_API_URL = os.getenv("RESEND_API_URL", "https://api.resend.com/emails").strip()
NOTIFICATION_EMAIL = os.getenv("NOTIFICATION_EMAIL", "").strip()
MAIL_FROM = os.getenv("MAIL_FROM", "SmartCap Alerts <onboarding@resend.dev>")
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
APP_NAME = os.getenv("APP_NAME", "SmartCap")

# Hero headline A/B variants shown by the landing page.
# Signups record whichever one the visitor saw; the server does not enforce this list.
HEADLINE_VARIANTS = [
    "Never Miss a Dose Again.",
    "The Peace of Mind Pill Cap.",
    "Automatic Reminders Without the Apps.",
]

RECENT_ROWS_LIMIT = int(os.getenv("RECENT_ROWS_LIMIT", "50"))

# Logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
logger = logging.getLogger("waitlist")

# Static and template dirs. Both live in the source checkout; point these at a copy when running from a regular install
STATIC_DIR = os.path.abspath(os.getenv("STATIC_DIR") or os.path.join(PROJECT_ROOT, "static"))
TEMPLATES_DIR = os.path.abspath(os.getenv("TEMPLATES_DIR") or os.path.join(PROJECT_ROOT, "templates"))
