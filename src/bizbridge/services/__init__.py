"""Service façades composing the read resolver, normalizer, guard and classifier."""

from .announcements import AnnouncementService
from .contacts import ContactService
from .dependencies import AnnouncementDependencies, ContactDependencies, WeeklyBusinessDependencies
from .weekly_business import WeeklyBusinessService

__all__ = [
    "AnnouncementDependencies",
    "AnnouncementService",
    "ContactDependencies",
    "ContactService",
    "WeeklyBusinessDependencies",
    "WeeklyBusinessService",
]
