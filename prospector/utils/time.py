"""Clock helpers. Services take a ``clock`` callable defaulting to ``utc_now``."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
