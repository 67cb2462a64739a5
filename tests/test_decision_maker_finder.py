import asyncio
import json

import pytest

from prospector.errors import ProviderTransient
from prospector.services.decision_maker_finder import (
    DecisionMakerConfig,
    DecisionMakerFinder,
    build_tiers,
    merge_candidates,
    plan_fallback_tiers,
    role_affinity_tier,
)
from prospector.services.decision_maker_parser import DecisionMakerCandidate


class ScriptedLLM:
    """Answers tier prompts in order; exceptions are raised instead of returned."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    async def complete(self, prompt, system_prompt, response_format=None):
        self.prompts.append(prompt)
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


class PassThroughParser:
    """Reads {"people": [[name, role, probability], ...]} without scoring."""

    def parse(self, response, *, tier, company_name, industry=None):
        return [
            DecisionMakerCandidate(name=name, role=role, probability=prob, name_confidence_score=prob, tier=tier)
            for name, role, prob in json.loads(response)["people"]
        ]


def people(*rows):
    return json.dumps({"people": [list(row) for row in rows]})


def config(**overrides):
    return DecisionMakerConfig(max_contacts=10, minimum_confidence=30).with_overrides(**overrides)


@pytest.mark.unit
def test_case_insensitive_dedupe_keeps_first_tier():
    llm = ScriptedLLM(
        people(("Jane Doe", "CEO", 80)),
        people(("jane doe", "Head of Sales", 90), ("Raj Patel", "CTO", 70)),
        people(),
    )
    finder = DecisionMakerFinder(llm, PassThroughParser())

    result = asyncio.run(finder.search("Acme Widgets", config()))

    assert [(c.name, c.tier) for c in result.candidates] == [("Jane Doe", "leadership"), ("Raj Patel", "department_head")]
    assert result.failed_tiers == []


@pytest.mark.unit
def test_failed_tier_is_skipped():
    llm = ScriptedLLM(
        ProviderTransient("perplexity", "timeout"),
        "no json here",
        '{"managers": [{"name": "Raj Patel", "role": "Engineering Manager"}]}',
    )
    finder = DecisionMakerFinder(llm)

    result = asyncio.run(finder.search("Acme Widgets", config()))

    assert result.failed_tiers == ["leadership", "department_head"]
    assert [c.name for c in result.candidates] == ["Raj Patel"]


@pytest.mark.unit
def test_threshold_unknown_and_cap():
    llm = ScriptedLLM(
        people(("Unknown", "CEO", 99), ("Low Score", "Clerk", 10), ("Ann Lee", "CFO", 60), ("Bo Chan", "COO", 50)),
    )
    finder = DecisionMakerFinder(llm, PassThroughParser())

    result = asyncio.run(finder.search("Acme Widgets", config(use_multiple_queries=False, max_contacts=1)))

    assert [c.name for c in result.candidates] == ["Ann Lee"]


@pytest.mark.unit
def test_single_query_mode_runs_first_enabled_tier():
    cfg = config(use_multiple_queries=False, enable_core_leadership=False)
    tiers = build_tiers("Acme", cfg, None)
    assert [t.key for t in tiers] == ["department_head"]


@pytest.mark.unit
def test_custom_tier_requires_target():
    assert "custom_target" not in [t.key for t in build_tiers("Acme", config(enable_custom_search=True), None)]
    tiers = build_tiers("Acme", config(enable_custom_search=True, custom_search_target="procurement"), None)
    assert tiers[-1].key == "custom_target"
    assert "procurement" in tiers[-1].user_prompt


@pytest.mark.unit
def test_industry_changes_department_prompt():
    tier = build_tiers("Acme", config(enable_core_leadership=False), "healthcare")[0]
    assert "Clinical Operations" in tier.user_prompt


@pytest.mark.unit
def test_merge_candidates_dedupes_before_filtering():
    low = DecisionMakerCandidate(name="Jane Doe", role=None, probability=10, name_confidence_score=10, tier="a")
    high = DecisionMakerCandidate(name="JANE DOE", role=None, probability=90, name_confidence_score=90, tier="b")
    assert merge_candidates([low, high], minimum_confidence=30, max_contacts=5) == []


@pytest.mark.unit
def test_config_from_approach_document():
    cfg = DecisionMakerConfig.from_approach(
        {
            "minimum_confidence": 45,
            "max_contacts": 4,
            "sub_searches": {"middle_management": False, "custom_search": True, "custom_search_target": "legal"},
        }
    )
    assert cfg.minimum_confidence == 45
    assert cfg.max_contacts == 4
    assert not cfg.enable_middle_management
    assert cfg.enable_custom_search
    assert cfg.custom_search_target == "legal"


@pytest.mark.unit
def test_find_key_decision_makers_returns_candidates_only():
    llm = ScriptedLLM('{"leaders": [{"name": "Sarah Johnson", "role": "Chief Executive Officer"}]}')
    finder = DecisionMakerFinder(llm)

    candidates = asyncio.run(finder.find_key_decision_makers("Acme Widgets", config(use_multiple_queries=False)))

    assert [(c.name, c.probability, c.name_confidence_score) for c in candidates] == [("Sarah Johnson", 86, 71)]
    assert "Acme Widgets" in llm.prompts[0]


@pytest.mark.unit
def test_thin_result_runs_disabled_leadership_tier_as_fallback():
    llm = ScriptedLLM(
        people(("Raj Patel", "Engineering Manager", 70)),
        people(("Jane Doe", "CEO", 80), ("raj patel", "CTO", 90)),
    )
    finder = DecisionMakerFinder(llm, PassThroughParser())
    cfg = config(enable_core_leadership=False, enable_middle_management=False)

    result = asyncio.run(finder.search("Acme Widgets", cfg))

    assert result.fallback_tiers == ["leadership"]
    assert [(c.name, c.tier) for c in result.candidates] == [("Raj Patel", "department_head"), ("Jane Doe", "leadership")]
    assert "core leadership" in llm.prompts[1]


@pytest.mark.unit
def test_fallback_plan_depends_on_count_and_quality():
    def candidates(n, prob):
        return [
            DecisionMakerCandidate(name=f"Person {i}", role=None, probability=prob, name_confidence_score=prob, tier="x")
            for i in range(n)
        ]

    narrow = config(enable_core_leadership=False, enable_department_heads=False)
    assert plan_fallback_tiers(candidates(2, 80), narrow) == ["leadership", "department_head"]
    assert plan_fallback_tiers(candidates(4, 80), narrow) == ["leadership"]
    assert plan_fallback_tiers(candidates(6, 50), narrow) == ["leadership"]
    assert plan_fallback_tiers(candidates(6, 80), narrow) == []
    assert plan_fallback_tiers(candidates(2, 80), config()) == []


@pytest.mark.unit
def test_fallback_can_be_disabled():
    llm = ScriptedLLM(people(("Raj Patel", "Engineering Manager", 70)))
    finder = DecisionMakerFinder(llm, PassThroughParser())
    cfg = config(enable_core_leadership=False, enable_middle_management=False, enable_fallback=False)

    result = asyncio.run(finder.search("Acme Widgets", cfg))

    assert result.fallback_tiers == []
    assert len(llm.prompts) == 1


@pytest.mark.unit
def test_later_tiers_skipped_once_enough_candidates():
    llm = ScriptedLLM(people(*[(f"Leader {i}", "Director", 80) for i in range(15)]))
    finder = DecisionMakerFinder(llm, PassThroughParser())

    result = asyncio.run(finder.search("Acme Widgets", config()))

    assert result.skipped_tiers == ["department_head", "middle_management"]
    assert len(llm.prompts) == 1
    assert len(result.candidates) == 10


@pytest.mark.unit
def test_role_affinity_tiers():
    assert role_affinity_tier("Procurement Director", "procurement") == 1
    assert role_affinity_tier("VP Marketing", "Marketing Director") == 2
    assert role_affinity_tier("Head of Logistics", "procurement") == 3
    assert role_affinity_tier("Chief Financial Officer", "procurement") is None
    assert role_affinity_tier(None, "procurement") is None


@pytest.mark.unit
def test_custom_target_rescores_before_threshold():
    llm = ScriptedLLM(
        people(("Ana Ruiz", "Procurement Manager", 60), ("Ben Ode", "Head of Logistics", 40), ("Cy Fox", "CFO", 33)),
    )
    finder = DecisionMakerFinder(llm, PassThroughParser())
    cfg = config(
        enable_core_leadership=False,
        enable_department_heads=False,
        enable_middle_management=False,
        enable_custom_search=True,
        custom_search_target="procurement",
        enable_fallback=False,
    )

    result = asyncio.run(finder.search("Acme Widgets", cfg))

    assert [(c.name, c.probability) for c in result.candidates] == [("Ana Ruiz", 70), ("Ben Ode", 40)]
    assert [c.name_confidence_score for c in result.candidates] == [60, 40]
