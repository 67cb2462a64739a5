"""Website and email domain normalization for provider lookups."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit


def normalize_domain(raw_url: Optional[str]) -> Optional[str]:
    """Return the bare domain for a website value, or None.

    Rules:
    - Add a scheme when missing so bare hosts parse.
    - Lowercase the host.
    - Drop scheme, port, path, query and fragment.
    - Strip a leading ``www.``.
    """
    if not raw_url or not raw_url.strip():
        return None

    url_text = raw_url.strip()
    parsed = urlsplit(url_text)

    # Handle bare hosts without scheme (e.g., example.com/path)
    if not parsed.scheme or not parsed.netloc:
        parsed = urlsplit(f"http://{url_text.split('://', 1)[-1]}")

    try:
        host = (parsed.hostname or "").lower().rstrip(".")
    except ValueError:
        return None
    if not host or "." not in host:
        return None

    if host.startswith("www."):
        host = host[4:]
    return host or None


def email_domain(email: Optional[str]) -> Optional[str]:
    """Return the lowercased domain part of an email address."""
    if not email or "@" not in email:
        return None
    domain = email.rsplit("@", 1)[1].strip().lower()
    return domain or None


def split_full_name(full_name: str) -> tuple[str, str]:
    """Split a person's name into first name and the remaining last name."""
    parts = (full_name or "").strip().split()
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], " ".join(parts[1:])
