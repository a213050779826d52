"""Error message sanitization to keep store credentials out of output."""

from __future__ import annotations

import os
import re
from typing import Iterable, Optional


def sanitize_error(message: str, secrets: Optional[Iterable[str]] = None) -> str:
    """Redact tokens, auth headers and home paths from an error message."""
    if not message:
        return message

    sanitized = message
    for secret in secrets or ():
        if secret:
            sanitized = sanitized.replace(secret, "[REDACTED]")

    sanitized = re.sub(r"Bearer\s+\S+", "Bearer [REDACTED]", sanitized)
    sanitized = re.sub(r"Authorization:\s*\S+", "Authorization: [REDACTED]", sanitized)
    sanitized = re.sub(r"(?i)\b(token|api_key|apikey)=[^&\s]+", r"\1=[REDACTED]", sanitized)

    home = os.environ.get("USERPROFILE") or os.environ.get("HOME") or ""
    if home and home != "/":
        sanitized = sanitized.replace(home, "[USER_HOME]")

    return sanitized
