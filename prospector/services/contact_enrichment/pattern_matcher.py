"""
Pattern-based email matcher.

Free, local provider tried before any paid API. It learns the company's
address format from colleagues whose emails are already on file and
applies it to the contact's name. Without samples on the company domain
it reports no match rather than guessing.
"""

import unicodedata
from collections import Counter
from typing import Callable, Optional

from prospector.services.contact_enrichment.base import KnownContact, ProviderLookup, ProviderResult
from prospector.utils.domain import email_domain, split_full_name
from prospector.utils.email import is_placeholder_email, is_valid_email

EmailFormat = Callable[[str, str], str]

# Ordered so that ambiguous samples count towards the more common formats first
EMAIL_FORMATS: dict[str, EmailFormat] = {
    "first.last": lambda f, l: f"{f}.{l}",
    "flast": lambda f, l: f"{f[0]}{l}",
    "firstl": lambda f, l: f"{f}{l[0]}",
    "first": lambda f, l: f,
    "last": lambda f, l: l,
    "f.last": lambda f, l: f"{f[0]}.{l}",
    "first_last": lambda f, l: f"{f}_{l}",
    "firstlast": lambda f, l: f"{f}{l}",
    "last.first": lambda f, l: f"{l}.{f}",
}

BASE_CONFIDENCE = 60
PER_SAMPLE_BONUS = 10
MAX_CONFIDENCE = 85


def _clean(value: str) -> str:
    """
    Fold a name token to plain a-z letters.

    Accents are stripped ('Zoë' -> 'zoe') and punctuation dropped. A letter
    with no ASCII form ('ø', 'ß', non-Latin scripts) yields '' so no address
    is built from a mangled name.
    """
    decomposed = unicodedata.normalize("NFKD", value.lower())
    letters = [ch for ch in decomposed if ch.isalpha() and not unicodedata.combining(ch)]
    if any(not ("a" <= ch <= "z") for ch in letters):
        return ""
    return "".join(letters)


def _name_tokens(full_name: str) -> tuple[str, str]:
    first, last = split_full_name(full_name)
    # Multi-part surnames use the final token
    last = last.split()[-1] if last else ""
    return _clean(first), _clean(last)


def detect_formats(name: str, email: str) -> list[str]:
    """Return every known format that reproduces the local part of ``email``."""
    first, last = _name_tokens(name)
    if not first or not last:
        return []
    local = email.split("@", 1)[0].lower()
    return [key for key, build in EMAIL_FORMATS.items() if build(first, last) == local]


class PatternMatcherAdapter:
    key = "pattern"
    search_type = "pattern_search"

    def _samples(self, request: ProviderLookup) -> list[KnownContact]:
        return [
            known
            for known in request.known_contacts
            if known.email
            and is_valid_email(known.email)
            and email_domain(known.email) == request.domain
            and known.name.strip().lower() != request.contact_name.strip().lower()
        ]

    def infer_format(self, samples: list[KnownContact]) -> tuple[Optional[str], int, int]:
        """Return (format, supporting samples, samples with a recognizable format)."""
        votes: Counter = Counter()
        recognized = 0
        for sample in samples:
            formats = detect_formats(sample.name, sample.email)
            if not formats:
                continue
            recognized += 1
            votes.update(formats)
        if not votes:
            return None, 0, recognized

        best = max(EMAIL_FORMATS, key=lambda key: (votes.get(key, 0), -list(EMAIL_FORMATS).index(key)))
        return best, votes[best], recognized

    async def lookup(self, request: ProviderLookup) -> ProviderResult:
        if not request.domain:
            return ProviderResult()
        first, last = _name_tokens(request.contact_name)
        if not first or not last:
            return ProviderResult()

        fmt, support, recognized = self.infer_format(self._samples(request))
        if not fmt:
            return ProviderResult()

        email = f"{EMAIL_FORMATS[fmt](first, last)}@{request.domain}"
        if not is_valid_email(email) or is_placeholder_email(email):
            return ProviderResult()

        confidence = min(MAX_CONFIDENCE, BASE_CONFIDENCE + PER_SAMPLE_BONUS * (support - 1))
        confidence = round(confidence * support / recognized)
        return ProviderResult(email=email, confidence=confidence)
