"""Email address helpers shared by the enrichment pipeline."""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_PLACEHOLDER_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"first[._]?name",
        r"last[._]?name",
        r"first[._]?initial",
        r"company(domain)?\.com$",
        r"example\.com$",
        r"domain\.com$",
        r"test[._]?user",
        r"demo[._]?user",
        r"noreply",
        r"donotreply",
        r"placeholder",
        r"tempmail",
        r"temp[._]?email",
    )
]


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and bool(EMAIL_RE.match(email.strip()))


def is_placeholder_email(email: str) -> bool:
    return any(pattern.search(email) for pattern in _PLACEHOLDER_PATTERNS)


def merge_email_data(
    current_email: Optional[str],
    alternative_emails: Optional[Iterable[str]],
    new_email: Optional[str],
) -> Dict[str, Any]:
    """Return the contact field updates needed to record ``new_email``.

    The primary address is only filled when empty. A different address is
    appended to the alternates. Matching is exact (case-sensitive) against
    both the primary and the existing alternates.
    """
    if not new_email or not new_email.strip():
        return {}
    candidate = new_email.strip()

    if not current_email:
        return {"email": candidate}
    if candidate == current_email:
        return {}

    existing: List[str] = list(alternative_emails or [])
    if candidate in existing:
        return {}
    return {"alternative_emails": existing + [candidate]}


def replace_primary_email(
    current_email: Optional[str],
    alternative_emails: Optional[Iterable[str]],
    new_email: Optional[str],
) -> Dict[str, Any]:
    """Return the updates for a manual change of the primary address.

    Unlike ``merge_email_data`` the primary is overwritten, but the previous
    primary is kept as an alternate. The new primary is removed from the
    alternates if it was there.
    """
    candidate = new_email.strip() if new_email and new_email.strip() else None
    if candidate == current_email:
        return {}

    alternates: List[str] = [e for e in alternative_emails or [] if e != candidate]
    if current_email and current_email not in alternates:
        alternates.append(current_email)
    return {"email": candidate, "alternative_emails": alternates}
