"""
Parsing of decision-maker search responses.

The LLM is asked for JSON, but answers are free text that usually contains
a JSON object. ``JsonContactResponseParser`` pulls the people array out of
it and scores each name with a weighted heuristic:

    format 0.25, generic terms 0.20, AI baseline 0.30, context 0.15,
    domain rules 0.10

followed by penalties (generic words, similarity to the company name) and
boosts (leadership roles in the leadership tier, industry-specific titles).
Scores are bounded to [20, 95].
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from prospector.errors import ParseError
from prospector.services.llm_client import extract_json_object

logger = logging.getLogger(__name__)

PEOPLE_KEYS = ("leaders", "departmentLeaders", "managers", "targetContacts")

PLACEHOLDER_NAMES = {
    "john doe", "jane doe", "john smith", "jane smith",
    "test user", "demo user", "example user",
    "admin user", "guest user", "unknown user",
}
PLACEHOLDER_FRAGMENTS = ("test", "demo", "example", "admin", "guest", "user")

GENERIC_TERMS = {
    "chief", "executive", "officer", "ceo", "cto", "cfo", "coo", "president",
    "director", "manager", "head", "lead", "senior", "junior", "principal",
    "sales", "marketing", "finance", "accounting", "hr", "operations", "it",
    "support", "customer", "service", "product", "project", "team", "department",
    "admin", "professional", "consultant", "company", "business", "office",
}

VALIDATION_WEIGHTS = {
    "format": 0.25,
    "generic_terms": 0.20,
    "ai_baseline": 0.30,
    "context": 0.15,
    "domain_rules": 0.10,
}
AI_BASELINE_SCORE = 50
MIN_SCORE = 20
MAX_SCORE = 95
LEADERSHIP_BOOST = 15
INDUSTRY_BOOST = 10
INDUSTRY_BOOST_CAP = 92
COMPANY_NAME_PENALTY = 20

INDUSTRY_TITLES: dict[str, list[str]] = {
    "technology": [
        "software engineer", "systems architect", "cto", "developer", "devops engineer",
        "product manager", "scrum master", "data scientist", "full stack", "frontend",
        "backend", "qa engineer", "information security", "cloud architect", "engineer",
    ],
    "healthcare": [
        "physician", "surgeon", "medical director", "nurse practitioner", "chief medical",
        "healthcare administrator", "medical officer", "clinical director", "doctor",
        "specialist", "head of radiology", "chief of staff", "pharmacist",
    ],
    "financial": [
        "investment banker", "financial advisor", "financial analyst", "portfolio manager",
        "wealth manager", "fund manager", "chief financial", "controller", "treasurer",
        "actuary", "underwriter", "financial planner", "credit analyst",
    ],
    "legal": [
        "attorney", "lawyer", "legal counsel", "partner", "associate", "legal director",
        "general counsel", "law partner", "chief legal", "litigator", "solicitor",
        "barrister", "compliance officer", "judge",
    ],
    "construction": [
        "project manager", "general contractor", "construction manager", "site supervisor",
        "architect", "civil engineer", "structural engineer", "estimator", "surveyor",
        "superintendent", "foreman", "master plumber", "master electrician",
    ],
    "retail": [
        "store manager", "retail director", "merchandising manager", "buyer", "category manager",
        "regional manager", "visual merchandiser", "sales associate", "operations manager",
        "ecommerce director", "supply chain manager",
    ],
    "education": [
        "principal", "headmaster", "dean", "professor", "department chair", "superintendent",
        "academic director", "provost", "faculty head", "curriculum director", "school administrator",
        "teacher", "instructor",
    ],
    "manufacturing": [
        "plant manager", "production manager", "quality control", "industrial engineer",
        "operations director", "manufacturing engineer", "supply chain", "procurement manager",
        "facilities manager", "lean manufacturing", "master craftsman",
    ],
    "consulting": [
        "managing partner", "engagement manager", "consulting director", "principal consultant",
        "management consultant", "senior advisor", "strategy consultant", "transformation lead",
        "senior partner", "practice leader", "business consultant",
    ],
}

# First match wins, so broader keywords sit in later industries
INDUSTRY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("technology", ("tech", "software", "digital", "data", "cyber", "computer", "ai", "app")),
    ("healthcare", ("health", "medical", "pharma", "care", "hospital", "clinic", "therapeutics")),
    ("financial", ("financ", "bank", "invest", "capital", "wealth", "asset", "fund")),
    ("legal", ("law", "legal", "attorney", "advocate", "counsel")),
    ("construction", ("construct", "build", "architect", "engineer", "development", "property")),
    ("retail", ("retail", "shop", "store", "market", "consumer")),
    ("education", ("educat", "school", "academy", "learn", "university", "college")),
    ("manufacturing", ("manufact", "factory", "product", "industrial", "good")),
    ("consulting", ("consult", "advisor", "partner", "service", "solution")),
]

NAME_PATTERN = re.compile(r"^[A-Z][a-z]+(?:(?:\s+[A-Z](?:\.|\s+))?(?:\s+[A-Z][a-z]+){1,2})$")
INVALID_CHARS = re.compile(r"[0-9@#$%^&*()+=\[\]{}|\\/<>~`_]")
LEADERSHIP_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\b(ceo|cto|cfo|coo|cmo|cio|chief)\b",
        r"\b(president|founder|co-founder|owner)\b",
        r"\b(chairman|chairwoman|chair)\b",
        r"\b(director|head|lead)\b",
        r"\b(vp|vice president)\b",
        r"\b(partner|principal)\b",
    )
]
FOUNDER_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\b(?:founder|co-founder|founding)\b",
        r"\b(?:owner|proprietor)\b",
        r"\bceo\b",
        r"\b(?:president|chief\s+executive)\b",
        r"\b(?:managing\s+director|managing\s+partner)\b",
    )
]


@dataclass
class DecisionMakerCandidate:
    name: str
    role: Optional[str]
    probability: int
    name_confidence_score: int
    tier: str


class ContactResponseParser(Protocol):
    """Turns one LLM answer into scored candidates. Raises ParseError when unreadable."""

    def parse(
        self,
        response: str,
        *,
        tier: str,
        company_name: str,
        industry: Optional[str] = None,
    ) -> list[DecisionMakerCandidate]:
        ...


def detect_industry(company_name: str) -> Optional[str]:
    name = (company_name or "").lower()
    for industry, keywords in INDUSTRY_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return industry
    return None


def is_placeholder_name(name: str) -> bool:
    normalized = name.strip().lower()
    return normalized in PLACEHOLDER_NAMES or any(fragment in normalized for fragment in PLACEHOLDER_FRAGMENTS)


def is_leadership_role(role: str) -> bool:
    return any(pattern.search(role) for pattern in LEADERSHIP_PATTERNS)


def is_industry_role(role: str, industry: Optional[str]) -> bool:
    titles = INDUSTRY_TITLES.get((industry or "").lower())
    if not titles:
        return False
    role_lower = role.lower()
    return any(title in role_lower for title in titles)


def industry_roles(industry: Optional[str]) -> list[str]:
    titles = INDUSTRY_TITLES.get((industry or "").lower())
    if not titles:
        return ["Team Lead", "Senior Manager", "Project Manager", "Director"]
    return [f"- {title[0].upper()}{title[1:]}" for title in titles]


def count_generic_terms(name: str) -> int:
    return sum(1 for word in re.split(r"[\s-]+", name.lower()) if word in GENERIC_TERMS)


def _bounded(value: float, low: int, high: int) -> float:
    return max(low, min(high, value))


def score_name_format(name: str) -> float:
    parts = name.split()
    score = 50
    score += 35 if NAME_PATTERN.match(name) else -30
    if name == name.upper() and len(name) > 2:
        score -= 40
    if not 2 <= len(parts) <= 4:
        score -= 25
    if len(parts) == 2:
        score += 20
    elif len(parts) == 3:
        score += 15
    elif len(parts) > 4:
        score -= 15 * (len(parts) - 4)
    score += 15 if all(2 <= len(part) <= 20 for part in parts) else -25
    if INVALID_CHARS.search(name):
        score -= 40
    if parts and parts[0] in ("Mr", "Mrs", "Ms", "Dr", "Prof"):
        score += 5
    return _bounded(score, 10, 95)


def score_generic_terms(name: str) -> float:
    score = 80 - count_generic_terms(name) * 25
    if re.search(r"\b(department|team|group|division|office|support|sales|service|info)\b", name, re.IGNORECASE):
        score -= 50
    if re.search(r"\b(contact|inquiry|question|help|service|request|consult|about)\b", name, re.IGNORECASE):
        score -= 45
    if re.search(r"\b(manager|director|president|chief|officer|ceo|cfo|cto|owner|founder)\b", name, re.IGNORECASE):
        if not any(sep in name for sep in (",", "(", "-")):
            score -= 40
    if "@" in name or re.search(r"\b(email|mail)\b", name, re.IGNORECASE):
        score -= 75
    return _bounded(score, 0, 95)


def is_founder_or_owner(context: str) -> bool:
    return any(pattern.search(context or "") for pattern in FOUNDER_PATTERNS)


def score_context(context: str) -> float:
    score = 60
    if re.search(r"\b(ceo|cto|cfo|founder|president|director)\b", context, re.IGNORECASE) and is_founder_or_owner(context):
        score += 20
    if re.search(r"\b(manages|leads|heads|directs)\b", context, re.IGNORECASE):
        score += 10
    if re.search(r"\b(intern|temporary|contractor)\b", context, re.IGNORECASE):
        score -= 10
    return _bounded(score, 20, 95)


def score_domain_rules(name: str, context: str, industry: Optional[str]) -> float:
    score = 70
    if re.search(r"Dr\.|Prof\.|PhD", name, re.IGNORECASE):
        score += 10
    if re.match(r"^[A-Z]\.\s[A-Z][a-z]+$", name):
        score -= 15
    if industry and is_industry_role(context, industry):
        score += 10
    return _bounded(score, 20, 95)


def is_name_similar_to_company(name: str, company_name: str) -> bool:
    normalized_name = re.sub(r"[^a-z0-9]", "", name.lower())
    company = re.sub(r"[^a-z0-9]", "", (company_name or "").lower())
    company = re.sub(r"(inc|llc|ltd|corp|co|company|group|holdings)$", "", company)
    if not company:
        return False
    if normalized_name == company:
        return True
    return len(normalized_name) > 4 and (normalized_name in company or company in normalized_name)


def validate_name(name: str, context: str = "", company_name: str = "", industry: Optional[str] = None) -> int:
    """Weighted 20-95 score for how much ``name`` looks like a real person."""
    steps = {
        "format": score_name_format(name),
        "generic_terms": score_generic_terms(name),
        "ai_baseline": AI_BASELINE_SCORE,
        "context": score_context(context),
        "domain_rules": score_domain_rules(name, context, industry),
    }
    total = sum(score * VALIDATION_WEIGHTS[step] for step, score in steps.items())

    generic_count = count_generic_terms(name)
    if generic_count:
        total = max(MIN_SCORE, total - generic_count * 25)

    if company_name and is_name_similar_to_company(name, company_name) and not is_founder_or_owner(context):
        total = max(MIN_SCORE, total - COMPANY_NAME_PENALTY)

    return round(_bounded(total, MIN_SCORE, MAX_SCORE))


def find_people(payload: Any) -> list[Any]:
    if not isinstance(payload, dict):
        return []
    for key in PEOPLE_KEYS:
        if isinstance(payload.get(key), list):
            return payload[key]
    for value in payload.values():
        if isinstance(value, list):
            return value
    return []


class JsonContactResponseParser:
    """Default parser for the JSON formats requested by each tier prompt."""

    def parse(
        self,
        response: str,
        *,
        tier: str,
        company_name: str,
        industry: Optional[str] = None,
    ) -> list[DecisionMakerCandidate]:
        payload = extract_json_object(response)
        if payload is None:
            raise ParseError(tier, "No JSON object found in response")

        industry = industry or detect_industry(company_name)
        candidates: list[DecisionMakerCandidate] = []
        for person in find_people(payload):
            if not isinstance(person, dict):
                continue
            name = str(person.get("name") or "").strip()
            role = str(person.get("role") or "").strip() or None
            if not name or is_placeholder_name(name):
                continue

            score = validate_name(name, role or "", company_name, industry)
            probability = score
            if tier == "leadership" and role and is_leadership_role(role):
                probability = min(MAX_SCORE, probability + LEADERSHIP_BOOST)
            if role and is_industry_role(role, industry):
                probability = min(INDUSTRY_BOOST_CAP, probability + INDUSTRY_BOOST)

            candidates.append(
                DecisionMakerCandidate(
                    name=name,
                    role=role,
                    probability=probability,
                    name_confidence_score=score,
                    tier=tier,
                )
            )

        logger.debug("Parsed %d candidates from %s response", len(candidates), tier)
        return candidates
