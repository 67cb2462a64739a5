"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from prospector.models.company import Company
from prospector.models.contact import Contact
from prospector.models.contact_feedback import ContactFeedback
from prospector.models.search_approach import SearchApproach

# Export all models
__all__ = [
    "Company",
    "Contact",
    "ContactFeedback",
    "SearchApproach",
]
