"""Centralized application settings.

Every service reads its configuration from these module-level values, which
are populated from the environment once at import time.
"""

import os
from urllib.parse import urlencode

# Object storage
STORAGE_DIR = os.getenv("STORAGE_DIR", "./data/storage")
PUBLIC_MEDIA_BASE_URL = os.getenv(
    "PUBLIC_MEDIA_BASE_URL", "http://localhost:8000/api/v1/media"
).rstrip("/")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", 100 * 1024 * 1024))
ALLOWED_VIDEO_TYPES = (
    "video/mp4",
    "video/mov",
    "video/avi",
    "video/webm",
    "video/quicktime",
)

# Deepgram transcription provider
DEEPGRAM_API_URL = os.getenv("DEEPGRAM_API_URL", "https://api.deepgram.com").rstrip(
    "/"
)
DEEPGRAM_API_KEY = os.getenv("DEEPGRAM_API_KEY", "")
DEEPGRAM_CALLBACK_URL = os.getenv(
    "DEEPGRAM_CALLBACK_URL", "http://localhost:8000/api/v1/deepgram/callback"
)
DEEPGRAM_CALLBACK_SECRET = os.getenv("DEEPGRAM_CALLBACK_SECRET", "")
DEEPGRAM_TIMEOUT_SECONDS = float(os.getenv("DEEPGRAM_TIMEOUT_SECONDS", 30))

# Playback synchronization
SYNC_DEBOUNCE_SECONDS = float(os.getenv("SYNC_DEBOUNCE_SECONDS", 0.05))

# Set by the test suite to skip migrations during app startup
TESTING = os.getenv("TESTING", "false").lower() == "true"


def get_deepgram_callback_url() -> str:
    """Get the callback URL handed to Deepgram.

    Returns:
        Callback URL, with the shared secret appended as a ``token`` query
        parameter when one is configured
    """
    if not DEEPGRAM_CALLBACK_SECRET:
        return DEEPGRAM_CALLBACK_URL
    separator = "&" if "?" in DEEPGRAM_CALLBACK_URL else "?"
    query = urlencode({"token": DEEPGRAM_CALLBACK_SECRET})
    return f"{DEEPGRAM_CALLBACK_URL}{separator}{query}"
