import pytest

from prospector.errors import ParseError
from prospector.services.decision_maker_parser import (
    JsonContactResponseParser,
    detect_industry,
    is_name_similar_to_company,
    validate_name,
)


@pytest.mark.unit
def test_leadership_candidate_scoring():
    response = 'Here you go:\n{"leaders": [{"name": "Sarah Johnson", "role": "Chief Executive Officer"}]}'

    [candidate] = JsonContactResponseParser().parse(response, tier="leadership", company_name="Acme Widgets")

    assert candidate.name == "Sarah Johnson"
    assert candidate.name_confidence_score == 71
    assert candidate.probability == 86
    assert candidate.tier == "leadership"


@pytest.mark.unit
def test_leadership_boost_only_in_leadership_tier():
    response = '{"departmentLeaders": [{"name": "Sarah Johnson", "role": "Chief Executive Officer"}]}'

    [candidate] = JsonContactResponseParser().parse(response, tier="department_head", company_name="Acme Widgets")

    assert candidate.probability == 71


@pytest.mark.unit
def test_placeholders_and_blank_names_dropped():
    response = '{"managers": [{"name": "John Doe", "role": "CEO"}, {"name": "", "role": "CTO"}, "junk"]}'
    assert JsonContactResponseParser().parse(response, tier="middle_management", company_name="Acme") == []


@pytest.mark.unit
def test_unreadable_response_raises_parse_error():
    with pytest.raises(ParseError):
        JsonContactResponseParser().parse("I could not find anyone.", tier="leadership", company_name="Acme")


@pytest.mark.unit
def test_generic_names_score_low():
    assert validate_name("Sales Department") < validate_name("Sarah Johnson")
    assert 20 <= validate_name("SALES TEAM") <= 95


@pytest.mark.unit
def test_company_name_similarity():
    assert is_name_similar_to_company("Acme", "Acme Inc")
    assert not is_name_similar_to_company("Sarah Johnson", "Acme Inc")


@pytest.mark.unit
def test_detect_industry():
    assert detect_industry("Bright Software") == "technology"
    assert detect_industry("Lakeside Hospital") == "healthcare"
    assert detect_industry("Acme Widgets") is None
