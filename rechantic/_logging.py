import hashlib
import logging
from typing import Any

# Create the library logger
logger = logging.getLogger("rechantic")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_token(token: Any) -> str | None:
    """
    Redacts access tokens and pagination cursors for logging.
    Hashes the value to allow correlation between log lines without revealing it.
    """
    if token is None:
        return None
    try:
        return hashlib.sha256(str(token).encode("utf-8")).hexdigest()[:8]
    except Exception:
        return "<redaction_failed>"
