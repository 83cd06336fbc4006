import os
from dotenv import load_dotenv

load_dotenv()

GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY", "")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
GCP_PROJECT_ID = os.environ.get("GCP_PROJECT_ID", "wishmaker")
GCS_BUCKET_NAME = os.environ.get("GCS_BUCKET_NAME", f"{GCP_PROJECT_ID}-wish-photos")
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(",")

# Public address the shareable /wishes/{slug} links are built from.
PUBLIC_BASE_URL = os.environ.get("PUBLIC_BASE_URL", "http://localhost:5173").rstrip("/")

# "static" (built-in templates) or "gemini"
GREETING_BACKEND = os.environ.get("GREETING_BACKEND", "static").lower()

WISHES_COLLECTION = os.environ.get("WISHES_COLLECTION", "wishes")

# Wizard limits
MAX_PHOTOS = 5
MAX_PHOTO_BYTES = int(os.environ.get("MAX_PHOTO_BYTES", str(10 * 1024 * 1024)))
MAX_WIZARD_SESSIONS = int(os.environ.get("MAX_WIZARD_SESSIONS", "500"))
SLUG_MAX_ATTEMPTS = int(os.environ.get("SLUG_MAX_ATTEMPTS", "5"))

# Timeouts for network-bound collaborators (seconds)
GENERATION_TIMEOUT_SECONDS = float(os.environ.get("GENERATION_TIMEOUT_SECONDS", "30"))
PERSIST_TIMEOUT_SECONDS = float(os.environ.get("PERSIST_TIMEOUT_SECONDS", "60"))
FETCH_TIMEOUT_SECONDS = float(os.environ.get("FETCH_TIMEOUT_SECONDS", "15"))

# How long the share dialog shows "Copied!" after a copy action
COPY_ACK_SECONDS = 2.0
