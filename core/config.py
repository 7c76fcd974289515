import os

# Vikunja server root, without the /api/v1 suffix
BASE_URL = os.getenv("VIKUNJA_URL", "http://localhost:3456")

# API token; when empty the app logs in with USERNAME / PASSWORD
API_TOKEN = os.getenv("VIKUNJA_TOKEN", "")
USERNAME = os.getenv("VIKUNJA_USERNAME", "")
PASSWORD = os.getenv("VIKUNJA_PASSWORD", "")

REQUEST_TIMEOUT = float(os.getenv("VIKUNJA_TIMEOUT", "10"))
# concurrent relation requests per drop
MAX_WORKERS = int(os.getenv("VIKUNJA_MAX_WORKERS", "8"))

SYNC_INTERVAL_MS = 60_000
TOPMOST = os.getenv("VIKUNJA_TOPMOST", "").lower() in ("1", "true", "yes")
WINDOW_GEOMETRY = "760x560"
