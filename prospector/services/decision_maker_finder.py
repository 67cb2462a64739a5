"""
Decision-maker finder.

Issues one LLM query per enabled role tier, parses each answer into scored
candidates, then merges them in tier order. Names are deduplicated
case-insensitively (first occurrence wins), low-confidence entries and the
literal "Unknown" are dropped and the list is truncated to max_contacts.
Order follows tier order; there is no re-ranking.

Later tiers are skipped once enough candidates are in hand. When the
filtered list is thin, disabled leadership tiers run as a fallback pass and
their candidates are appended. With a custom search target every
candidate is rescored by how closely its role matches the target.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Protocol

from prospector.core.config import settings
from prospector.errors import ParseError, ProviderError
from prospector.services.confidence import clamp_score
from prospector.services.decision_maker_parser import (
    ContactResponseParser,
    DecisionMakerCandidate,
    JsonContactResponseParser,
    detect_industry,
    industry_roles,
)

logger = logging.getLogger(__name__)

MINIMUM_CONTACTS = 5
OPTIMAL_CONTACTS = 10
MAXIMUM_CONTACTS = 15
HIGH_QUALITY_PROBABILITY = 70

AFFINITY_BASELINE = -5
AFFINITY_BONUSES = {1: 15, 2: 10, 3: 5}
ROLE_LEVEL_RE = re.compile(
    r"\b(senior|junior|lead|principal|head|chief|vice|assistant|associate|director|manager|"
    r"supervisor|coordinator|specialist|analyst|executive|officer)\b"
)
ROLE_STOP_WORDS = {"and", "the", "for"}
ROLE_GROUPS = {
    "marketing": ["marketing", "brand", "advertising", "communications", "pr", "digital", "content", "social"],
    "engineering": ["engineering", "software", "development", "technical", "technology", "architect", "programmer"],
    "sales": ["sales", "business development", "account", "revenue", "commercial", "partnership"],
    "operations": ["operations", "logistics", "supply chain", "procurement", "fulfillment", "manufacturing"],
    "finance": ["finance", "accounting", "financial", "treasury", "budget", "controller", "audit"],
    "hr": ["human resources", "hr", "people", "talent", "recruiting", "organizational"],
    "product": ["product", "innovation", "strategy", "planning", "roadmap"],
    "legal": ["legal", "compliance", "regulatory", "counsel", "risk", "governance"],
}

NO_DATA_NOTICE = "IMPORTANT: If you cannot find data, return an empty array. Do NOT make up data."
PERSON_FIELDS = """For each person, provide their:
- Full name (first and last name)
- Current role/position"""

DEFAULT_DEPARTMENTS = """
- Engineering/Development/IT
- Sales/Business Development
- Marketing/Communications
- Finance/Accounting
- Operations
- Human Resources
- Product Management"""

INDUSTRY_DEPARTMENTS = {
    "technology": """
- Engineering/Development
- Product Management
- Customer Success
- Data Science
- Information Security
- Technical Operations
- UX/Design""",
    "healthcare": """
- Medical Affairs
- Clinical Operations
- Patient Services
- Healthcare Administration
- Medical Research
- Regulatory Affairs
- Care Management""",
    "financial": """
- Investment Banking
- Asset Management
- Risk Management
- Wealth Management
- Trading
- Financial Analysis
- Credit Operations""",
}


class ChatClient(Protocol):
    async def complete(self, prompt: str, system_prompt: str, response_format: Optional[str] = None) -> str:
        ...


@dataclass
class DecisionMakerConfig:
    industry: Optional[str] = None
    max_contacts: int = 10
    minimum_confidence: int = 30
    enable_core_leadership: bool = True
    enable_department_heads: bool = True
    enable_middle_management: bool = True
    enable_custom_search: bool = False
    custom_search_target: str = ""
    use_multiple_queries: bool = True
    enable_fallback: bool = True

    @classmethod
    def from_settings(cls) -> "DecisionMakerConfig":
        return cls(
            max_contacts=settings.DECISION_MAKER_MAX_CONTACTS,
            minimum_confidence=settings.DECISION_MAKER_MIN_CONFIDENCE,
        )

    @classmethod
    def from_approach(cls, approach_config: Optional[dict[str, Any]]) -> "DecisionMakerConfig":
        """Build from a SearchApproach.config document, falling back to settings."""
        config = cls.from_settings()
        data = approach_config or {}
        if data.get("minimum_confidence") is not None:
            config.minimum_confidence = int(data["minimum_confidence"])
        if data.get("max_contacts") is not None:
            config.max_contacts = int(data["max_contacts"])
        if data.get("industry"):
            config.industry = data["industry"]

        sub_searches = data.get("sub_searches") or {}
        for key, attr in (
            ("core_leadership", "enable_core_leadership"),
            ("department_heads", "enable_department_heads"),
            ("middle_management", "enable_middle_management"),
            ("custom_search", "enable_custom_search"),
            ("fallback", "enable_fallback"),
        ):
            if key in sub_searches:
                setattr(config, attr, bool(sub_searches[key]))
        if sub_searches.get("custom_search_target"):
            config.custom_search_target = str(sub_searches["custom_search_target"])
        return config

    def with_overrides(self, **overrides: Any) -> "DecisionMakerConfig":
        values = {k: v for k, v in overrides.items() if v is not None and hasattr(self, k)}
        return DecisionMakerConfig(**{**self.__dict__, **values})


@dataclass
class RoleTier:
    key: str
    system_prompt: str
    user_prompt: str
    response_format: str


@dataclass
class DecisionMakerSearchResult:
    candidates: list[DecisionMakerCandidate] = field(default_factory=list)
    failed_tiers: list[str] = field(default_factory=list)
    skipped_tiers: list[str] = field(default_factory=list)
    fallback_tiers: list[str] = field(default_factory=list)


def core_leadership_tier(company_name: str, industry: Optional[str]) -> RoleTier:
    prompt = f"""Identify the core leadership team at {company_name}. Focus on:
1. C-level executives (CEO, CTO, CFO, COO, etc.)
2. Founders and co-founders
3. Board members and directors
4. Division/department heads

{PERSON_FIELDS}

{NO_DATA_NOTICE}"""
    if industry:
        prompt += f"\nThis company is in the {industry} industry. Focus on industry-specific leadership roles."
    return RoleTier(
        key="leadership",
        system_prompt=(
            "You are an expert in identifying key leadership personnel at companies.\n"
            "Your task is to identify the leadership team members at the specified company."
        ),
        user_prompt=prompt,
        response_format='{"leaders": [{"name": "John Smith", "role": "Chief Executive Officer"}]}',
    )


def department_heads_tier(company_name: str, industry: Optional[str]) -> RoleTier:
    departments = INDUSTRY_DEPARTMENTS.get((industry or "").lower(), DEFAULT_DEPARTMENTS)
    industry_context = (
        f"This company is in the {industry} industry. Focus on industry-specific department leaders."
        if industry
        else ""
    )
    prompt = f"""Identify the key department leaders at {company_name}. Focus on these departments:
{departments}

{industry_context}

{PERSON_FIELDS}

{NO_DATA_NOTICE}"""
    return RoleTier(
        key="department_head",
        system_prompt=(
            "You are an expert in identifying department leaders at companies.\n"
            "Your task is to identify key people leading various departments at the specified company."
        ),
        user_prompt=prompt,
        response_format='{"departmentLeaders": [{"name": "Jane Doe", "role": "Head of Marketing"}]}',
    )


def middle_management_tier(company_name: str, industry: Optional[str]) -> RoleTier:
    prompt = f"""Identify important middle managers and key technical leaders at {company_name}. Focus on:
1. Team leads
2. Senior managers
3. Project managers
4. Technical specialists with authority
5. Key decision-makers below C-level

{PERSON_FIELDS}

{NO_DATA_NOTICE}"""
    if industry:
        roles = "\n".join(industry_roles(industry))
        prompt += f"\nThis company is in the {industry} industry. Focus especially on these roles:\n{roles}"
    return RoleTier(
        key="middle_management",
        system_prompt=(
            "You are an expert in identifying influential middle managers and technical leaders at companies.\n"
            "Your task is to identify key people who make important decisions but may not be in the C-suite."
        ),
        user_prompt=prompt,
        response_format='{"managers": [{"name": "Alice Johnson", "role": "Senior Product Manager"}]}',
    )


def custom_target_tier(company_name: str, target: str, industry: Optional[str]) -> RoleTier:
    prompt = f"""Find people at {company_name} who have roles related to: {target}

Look for variations and similar positions, such as:
- Direct matches to "{target}"
- Related roles and titles
- People who might handle responsibilities related to {target}

{PERSON_FIELDS}

{NO_DATA_NOTICE}"""
    if industry:
        prompt += f"\nThis company is in the {industry} industry. Consider industry-specific variations of this role."
    return RoleTier(
        key="custom_target",
        system_prompt=(
            "You are an expert in identifying specific professionals at companies.\n"
            "Your task is to find people with the specific role or position requested at the specified company."
        ),
        user_prompt=prompt,
        response_format=f'{{"targetContacts": [{{"name": "John Smith", "role": "{target} or related position"}}]}}',
    )


def build_tiers(company_name: str, config: DecisionMakerConfig, industry: Optional[str]) -> list[RoleTier]:
    """Enabled tiers in query order. Without multiple queries only the first one runs."""
    tiers: list[RoleTier] = []
    if config.enable_core_leadership:
        tiers.append(core_leadership_tier(company_name, industry))
    if config.enable_department_heads:
        tiers.append(department_heads_tier(company_name, industry))
    if config.enable_middle_management:
        tiers.append(middle_management_tier(company_name, industry))
    if config.enable_custom_search and config.custom_search_target.strip():
        tiers.append(custom_target_tier(company_name, config.custom_search_target.strip(), industry))
    if not config.use_multiple_queries:
        tiers = tiers[:1]
    return tiers


FALLBACK_TIER_BUILDERS = {
    "leadership": core_leadership_tier,
    "department_head": department_heads_tier,
}


def merge_candidates(
    candidates: list[DecisionMakerCandidate],
    *,
    minimum_confidence: int,
    max_contacts: int,
) -> list[DecisionMakerCandidate]:
    """Dedupe by case-insensitive name (first wins), filter, then truncate."""
    seen: set[str] = set()
    merged: list[DecisionMakerCandidate] = []
    for candidate in candidates:
        normalized = candidate.name.strip().lower()
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        if normalized == "unknown" or candidate.probability < minimum_confidence:
            continue
        merged.append(candidate)
    return merged[:max_contacts]


def _high_quality_count(candidates: list[DecisionMakerCandidate]) -> int:
    return sum(1 for c in candidates if c.probability >= HIGH_QUALITY_PROBABILITY)


def should_continue_searching(candidates: list[DecisionMakerCandidate]) -> bool:
    """False once enough usable candidates exist to skip the remaining tiers."""
    if len(candidates) >= MAXIMUM_CONTACTS:
        return False
    return not (_high_quality_count(candidates) >= 8 and len(candidates) >= OPTIMAL_CONTACTS)


def plan_fallback_tiers(candidates: list[DecisionMakerCandidate], config: DecisionMakerConfig) -> list[str]:
    """
    Disabled tiers worth running when the filtered result is thin.

    Below MINIMUM_CONTACTS core leadership is added (and department heads
    too when fewer than three survived). Below OPTIMAL_CONTACTS with fewer
    than five high-quality candidates only core leadership is added.
    """
    count = len(candidates)
    tiers: list[str] = []
    if count < MINIMUM_CONTACTS:
        if not config.enable_core_leadership:
            tiers.append("leadership")
        if not config.enable_department_heads and count < 3:
            tiers.append("department_head")
    elif count < OPTIMAL_CONTACTS and _high_quality_count(candidates) < 5:
        if not config.enable_core_leadership:
            tiers.append("leadership")
    return tiers


def _role_keywords(role: str) -> list[str]:
    cleaned = ROLE_LEVEL_RE.sub("", role.lower())
    return [w for w in re.split(r"[\s\-_/]+", cleaned) if len(w) > 2 and w not in ROLE_STOP_WORDS]


def _mentions(role: str, keyword: str) -> bool:
    return re.search(rf"\b{re.escape(keyword)}\b", role) is not None


def role_affinity_tier(role: Optional[str], target: str) -> Optional[int]:
    """
    How closely ``role`` matches the custom search target.

    1: one contains the other. 2: they share a functional keyword once
    seniority words are removed. 3: both fall in the same functional
    group. None: no affinity.
    """
    contact_role = (role or "").lower().strip()
    target_role = target.lower().strip()
    if not contact_role or not target_role:
        return None
    if target_role in contact_role or contact_role in target_role:
        return 1

    contact_keywords = _role_keywords(contact_role)
    for keyword in _role_keywords(target_role):
        if any(keyword in ck or ck in keyword for ck in contact_keywords):
            return 2

    for keywords in ROLE_GROUPS.values():
        if any(_mentions(contact_role, k) for k in keywords) and any(_mentions(target_role, k) for k in keywords):
            return 3
    return None


def apply_role_affinity(candidates: list[DecisionMakerCandidate], target: str) -> list[DecisionMakerCandidate]:
    """Shift every probability by the baseline plus the affinity bonus, clamped to 0-100."""
    scored: list[DecisionMakerCandidate] = []
    for candidate in candidates:
        score = candidate.probability + AFFINITY_BASELINE
        tier = role_affinity_tier(candidate.role, target)
        if tier:
            score += AFFINITY_BONUSES[tier]
        scored.append(replace(candidate, probability=clamp_score(score)))
    return scored


class DecisionMakerFinder:
    def __init__(self, llm: ChatClient, parser: Optional[ContactResponseParser] = None):
        self.llm = llm
        self.parser = parser or JsonContactResponseParser()

    async def _run_tier(
        self,
        tier: RoleTier,
        company_name: str,
        industry: Optional[str],
        result: DecisionMakerSearchResult,
    ) -> list[DecisionMakerCandidate]:
        try:
            response = await self.llm.complete(tier.user_prompt, tier.system_prompt, tier.response_format)
            candidates = self.parser.parse(
                response,
                tier=tier.key,
                company_name=company_name,
                industry=industry,
            )
        except (ProviderError, ParseError) as exc:
            logger.warning("Decision-maker tier %s failed for %s: %s", tier.key, company_name, exc)
            result.failed_tiers.append(tier.key)
            return []
        logger.info("Tier %s returned %d candidates for %s", tier.key, len(candidates), company_name)
        return candidates

    def _merge(self, collected: list[DecisionMakerCandidate], config: DecisionMakerConfig) -> list[DecisionMakerCandidate]:
        target = config.custom_search_target.strip()
        if config.enable_custom_search and target:
            collected = apply_role_affinity(collected, target)
        return merge_candidates(
            collected,
            minimum_confidence=config.minimum_confidence,
            max_contacts=config.max_contacts,
        )

    async def search(self, company_name: str, config: Optional[DecisionMakerConfig] = None) -> DecisionMakerSearchResult:
        config = config or DecisionMakerConfig.from_settings()
        industry = config.industry or detect_industry(company_name)
        result = DecisionMakerSearchResult()
        collected: list[DecisionMakerCandidate] = []

        for tier in build_tiers(company_name, config, industry):
            usable = merge_candidates(
                collected,
                minimum_confidence=config.minimum_confidence,
                max_contacts=MAXIMUM_CONTACTS,
            )
            if collected and not should_continue_searching(usable):
                logger.info("Skipping tier %s for %s: %d candidates already", tier.key, company_name, len(usable))
                result.skipped_tiers.append(tier.key)
                continue
            collected.extend(await self._run_tier(tier, company_name, industry, result))

        merged = self._merge(collected, config)

        if config.enable_fallback:
            for key in plan_fallback_tiers(merged, config):
                logger.info("Fallback tier %s for %s after %d candidates", key, company_name, len(merged))
                result.fallback_tiers.append(key)
                tier = FALLBACK_TIER_BUILDERS[key](company_name, industry)
                collected.extend(await self._run_tier(tier, company_name, industry, result))
            if result.fallback_tiers:
                merged = self._merge(collected, config)

        result.candidates = merged
        return result

    async def find_key_decision_makers(
        self,
        company_name: str,
        config: Optional[DecisionMakerConfig] = None,
    ) -> list[DecisionMakerCandidate]:
        return (await self.search(company_name, config)).candidates
