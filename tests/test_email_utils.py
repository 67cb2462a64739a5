import pytest

from prospector.utils.domain import email_domain, normalize_domain, split_full_name
from prospector.utils.email import is_placeholder_email, is_valid_email, merge_email_data, replace_primary_email


@pytest.mark.unit
def test_merge_fills_empty_primary():
    assert merge_email_data(None, [], "aeu@teamshares.com") == {"email": "aeu@teamshares.com"}


@pytest.mark.unit
def test_merge_appends_different_address_to_alternates():
    updates = merge_email_data("aeu@teamshares.com", [], "alex.eu@teamshares.com")
    assert updates == {"alternative_emails": ["alex.eu@teamshares.com"]}


@pytest.mark.unit
def test_merge_ignores_known_addresses():
    assert merge_email_data("aeu@teamshares.com", [], "aeu@teamshares.com") == {}
    assert merge_email_data("aeu@teamshares.com", ["alex@teamshares.com"], "alex@teamshares.com") == {}
    assert merge_email_data("aeu@teamshares.com", [], "  ") == {}


@pytest.mark.unit
def test_merge_is_case_sensitive():
    updates = merge_email_data("aeu@teamshares.com", [], "AEU@teamshares.com")
    assert updates == {"alternative_emails": ["AEU@teamshares.com"]}


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw,expected",
    [
        ("https://www.Teamshares.com:443/about", "teamshares.com"),
        ("https://www.Teamshares.com/about?x=1", "teamshares.com"),
        ("teamshares.com", "teamshares.com"),
        ("http://app.acme.io:8080", "app.acme.io"),
        ("localhost", None),
        ("", None),
        (None, None),
    ],
)
def test_normalize_domain(raw, expected):
    assert normalize_domain(raw) == expected


@pytest.mark.unit
def test_name_and_email_helpers():
    assert split_full_name("Mary Ann van Dyke") == ("Mary", "Ann van Dyke")
    assert split_full_name("Cher") == ("Cher", "")
    assert email_domain("Alex@TeamShares.com") == "teamshares.com"
    assert email_domain("nope") is None


@pytest.mark.unit
def test_email_validity_and_placeholders():
    assert is_valid_email("a.b@c.io")
    assert not is_valid_email("a b@c.io")
    assert is_placeholder_email("first.last@company.com")
    assert is_placeholder_email("noreply@acme.com")
    assert not is_placeholder_email("sarah.johnson@acme.com")


@pytest.mark.unit
def test_manual_primary_change_keeps_previous_address():
    updates = replace_primary_email("aeu@teamshares.com", ["alex.eu@teamshares.com"], "alex.eu@teamshares.com")
    assert updates == {"email": "alex.eu@teamshares.com", "alternative_emails": ["aeu@teamshares.com"]}


@pytest.mark.unit
def test_manual_primary_change_edge_cases():
    assert replace_primary_email("aeu@teamshares.com", [], " aeu@teamshares.com ") == {}
    assert replace_primary_email(None, [], "aeu@teamshares.com") == {
        "email": "aeu@teamshares.com",
        "alternative_emails": [],
    }
    assert replace_primary_email("aeu@teamshares.com", [], None) == {
        "email": None,
        "alternative_emails": ["aeu@teamshares.com"],
    }
