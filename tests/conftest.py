"""
Pytest configuration and shared fixtures.
"""

import os
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Optional

import pytest

from prospector.services.confidence import average_feedback_score, clamp_score, feedback_points, fuse_confidence

CONFIDENCE_FIELDS = ("probability", "name_confidence_score", "user_feedback_score")
FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class FakeContactStore:
    """In-memory ContactStore with the same update and feedback rules as ContactRepository."""

    def __init__(self):
        self.companies: dict[uuid.UUID, SimpleNamespace] = {}
        self.contacts: dict[uuid.UUID, SimpleNamespace] = {}
        self.feedback: dict[uuid.UUID, list[str]] = {}
        self.updates: list[dict[str, Any]] = []

    def add_company(self, user_id, name: str, website: Optional[str] = None, **fields) -> SimpleNamespace:
        company = SimpleNamespace(
            id=uuid.uuid4(),
            user_id=user_id,
            name=name,
            website=website,
            industry=fields.pop("industry", None),
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
            **fields,
        )
        self.companies[company.id] = company
        return company

    def add_contact(self, user_id, company, name: str, **fields) -> SimpleNamespace:
        values = {
            "role": None,
            "email": None,
            "alternative_emails": [],
            "probability": None,
            "name_confidence_score": None,
            "user_feedback_score": None,
            "feedback_count": 0,
            "completed_searches": [],
            "linkedin_url": None,
            "phone_number": None,
            "department": None,
            "location": None,
            "verification_source": None,
            "last_validated": None,
            "last_enriched": None,
        }
        values.update(fields)
        contact = SimpleNamespace(
            id=uuid.uuid4(),
            user_id=user_id,
            company_id=company.id,
            name=name,
            created_at=FIXED_NOW,
            updated_at=FIXED_NOW,
            **values,
        )
        self.contacts[contact.id] = contact
        return contact

    async def get_contact(self, user_id, contact_id):
        contact = self.contacts.get(contact_id)
        if contact is None or contact.user_id != user_id:
            return None
        return contact

    async def get_company(self, user_id, company_id):
        company = self.companies.get(company_id)
        if company is None or company.user_id != user_id:
            return None
        return company

    async def update_contact(self, user_id, contact_id, updates):
        contact = await self.get_contact(user_id, contact_id)
        if contact is None:
            return None
        self.updates.append(dict(updates))
        for field_name, value in updates.items():
            if field_name in CONFIDENCE_FIELDS and value is not None:
                value = clamp_score(value)
            setattr(contact, field_name, value)
        contact.last_enriched = FIXED_NOW
        return contact

    async def list_contacts_by_company(self, user_id, company_id):
        return [
            c for c in self.contacts.values()
            if c.user_id == user_id and c.company_id == company_id
        ]

    async def delete_contacts_by_company(self, user_id, company_id):
        doomed = [c.id for c in await self.list_contacts_by_company(user_id, company_id)]
        for contact_id in doomed:
            del self.contacts[contact_id]
        return len(doomed)

    async def add_contact_feedback(self, user_id, contact_id, feedback_type):
        feedback_points(feedback_type)
        contact = await self.get_contact(user_id, contact_id)
        if contact is None:
            return None
        types = self.feedback.setdefault(contact_id, [])
        types.append(feedback_type)
        user_score = average_feedback_score(types)
        await self.update_contact(
            user_id,
            contact_id,
            {
                "user_feedback_score": user_score,
                "feedback_count": len(types),
                "probability": fuse_confidence(contact.name_confidence_score, user_score, len(types)),
            },
        )
        return SimpleNamespace(
            id=uuid.uuid4(),
            contact_id=contact_id,
            feedback_type=feedback_type,
            created_at=FIXED_NOW,
        )


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def store():
    return FakeContactStore()


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")
    config.addinivalue_line("markers", "server: requires running HTTP server")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"
    run_server = os.environ.get("RUN_SERVER_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")
    skip_server = pytest.mark.skip(reason="server tests skipped by default; set RUN_SERVER_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)
        if "server" in item.keywords and not run_server:
            item.add_marker(skip_server)
