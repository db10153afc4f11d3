"""Collaborator bundles handed to the service façades.

Each bundle names every collaborator its service uses. Mandatory ones are
checked at construction; optional ones (the SQL reader and writer) switch
capabilities on when present.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Tuple

from ..collaborators import (
    AnnouncementReader,
    AnnouncementWriter,
    CalendarCollaborator,
    CompanyReader,
    ConfigCollaborator,
    LegacyReader,
    LegacyWriter,
    NewStoreReader,
    NewStoreWriter,
    PotentialContactReader,
    PotentialContactWriter,
    WeekInfoCollaborator,
)
from ..errors import MissingDependencyError

Clock = Callable[[], datetime]


def _check_required(bundle: Any, required: Tuple[str, ...]) -> None:
    missing = [name for name in required if getattr(bundle, name) is None]
    if missing:
        raise MissingDependencyError(
            f"{type(bundle).__name__} missing required collaborator(s): {', '.join(missing)}"
        )


@dataclass
class WeeklyBusinessDependencies:
    legacy_reader: Optional[LegacyReader] = None
    legacy_writer: Optional[LegacyWriter] = None
    week_info: Optional[WeekInfoCollaborator] = None
    calendar: Optional[CalendarCollaborator] = None
    system_config: Optional[ConfigCollaborator] = None
    new_store_reader: Optional[NewStoreReader] = None
    clock: Optional[Clock] = None

    REQUIRED = ("legacy_reader", "legacy_writer", "week_info", "calendar", "system_config")

    def __post_init__(self) -> None:
        _check_required(self, self.REQUIRED)


@dataclass
class ContactDependencies:
    contact_reader: Optional[LegacyReader] = None
    potential_reader: Optional[PotentialContactReader] = None
    potential_writer: Optional[PotentialContactWriter] = None
    company_reader: Optional[CompanyReader] = None
    new_store_reader: Optional[NewStoreReader] = None
    new_store_writer: Optional[NewStoreWriter] = None
    clock: Optional[Clock] = None

    REQUIRED = ("contact_reader", "potential_reader", "potential_writer", "company_reader")

    def __post_init__(self) -> None:
        _check_required(self, self.REQUIRED)


@dataclass
class AnnouncementDependencies:
    reader: Optional[AnnouncementReader] = None
    writer: Optional[AnnouncementWriter] = None

    REQUIRED = ("reader", "writer")

    def __post_init__(self) -> None:
        _check_required(self, self.REQUIRED)


def from_mapping(bundle_type: type, values: Mapping[str, Any]):
    """Build a bundle from a plain mapping, ignoring keys it doesn't declare."""
    known = {f.name for f in fields(bundle_type)}
    return bundle_type(**{k: v for k, v in values.items() if k in known})


def resolve_actor_name(user: Any, default: str = "System") -> str:
    """
    Display name for audit fields from an already-resolved actor.

    Accepts a plain string or a mapping/object with displayName, username or name.
    """
    if user is None:
        return default
    if isinstance(user, str):
        return user.strip() or default
    for attr in ("displayName", "username", "name"):
        value = user.get(attr) if isinstance(user, Mapping) else getattr(user, attr, None)
        if value:
            return str(value)
    return default
