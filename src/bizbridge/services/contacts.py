"""Contacts: official contacts (SQL-written) and potential contacts (sheet rows).

Official contacts have fully moved to the SQL writer. They are addressed by
``contactId`` and never need a row position. Potential contacts (business-card
intake) stay on the sheet and are addressed by ``rowIndex``.
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config.loader import ServiceSettings
from ..convergence.resolver import ReadMode, SourceConvergenceResolver
from ..errors import MissingDependencyError, NotFoundError
from ..normalization.normalizer import attach_company_name, company_name_map, merge_fields, normalize_contact
from ..utils.logging import get_logger
from ..utils.time import now_in_zone
from .dependencies import ContactDependencies, resolve_actor_name

logger = get_logger(__name__)

Record = Dict[str, Any]

CONTACT_LIST_CACHE_KEY = "contactList"
POTENTIAL_CACHE_KEY = "contacts"

LINKED_CONTACT_FIELDS = (
    "contactId",
    "sourceId",
    "name",
    "companyId",
    "department",
    "position",
    "mobile",
    "phone",
    "email",
)


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current: int
    total: int
    total_items: int = Field(alias="totalItems")
    has_next: bool = Field(alias="hasNext")
    has_prev: bool = Field(alias="hasPrev")


def paginate(items: List[Record], page: int, page_size: int) -> tuple[List[Record], Pagination]:
    """Slice one page; ``has_next`` iff page * size < total, ``has_prev`` iff page > 1."""
    page = max(1, int(page))
    total_items = len(items)
    start = (page - 1) * page_size
    return items[start:start + page_size], Pagination(
        current=page,
        total=math.ceil(total_items / page_size),
        total_items=total_items,
        has_next=page * page_size < total_items,
        has_prev=page > 1,
    )


def _normalize_key(value: Any) -> str:
    return str(value or "").lower().strip()


def _created_sort_key(contact: Record) -> tuple:
    """Newest first; rows without a parseable createdTime go last."""
    raw = contact.get("createdTime")
    try:
        created = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return (1, 0.0)
    return (0, -created.timestamp())


class ContactService:
    def __init__(self, deps: ContactDependencies, settings: Optional[ServiceSettings] = None):
        self.deps = deps
        self.settings = settings or ServiceSettings()
        self.contact_reader = deps.contact_reader
        self.potential_reader = deps.potential_reader
        self.potential_writer = deps.potential_writer
        self.company_reader = deps.company_reader
        self.new_store_writer = deps.new_store_writer

        primary = None
        lookup = None
        if deps.new_store_reader is not None:
            primary = {ReadMode.ENTRIES: deps.new_store_reader.get_all}
            lookup = deps.new_store_reader.get_by_id
        else:
            logger.warning("[contacts] SQL reader not injected, reads use the sheet only")

        self.resolver = SourceConvergenceResolver(
            name="contacts",
            legacy_readers={ReadMode.ENTRIES: self.contact_reader.get_all},
            primary_readers=primary,
            primary_lookup=lookup,
            normalizers={ReadMode.ENTRIES: normalize_contact},
            id_field="contactId",
        )

    def _today_label(self) -> str:
        if self.deps.clock is not None:
            now = self.deps.clock()
        else:
            now = now_in_zone(self.settings.timezone)
        return now.date().isoformat()

    def _signal_invalidate(self, reader: Any, key: str) -> None:
        try:
            reader.invalidate_cache(key)
        except Exception as exc:
            logger.warning(f"Cache invalidation for {key} failed: {exc}")

    def _require_writer(self, action: str):
        if self.new_store_writer is None:
            raise MissingDependencyError(f"SQL contact writer not configured; cannot {action} contact")
        return self.new_store_writer

    async def _company_names(self) -> Dict[str, str]:
        return company_name_map(await self.company_reader.get_company_list())

    async def _official_contacts(self) -> List[Record]:
        contacts = await self.resolver.fetch(ReadMode.ENTRIES)
        names = await self._company_names()
        return [attach_company_name(contact, names) for contact in contacts]

    # ------------------------------------------------------------------
    # Official contacts
    # ------------------------------------------------------------------

    async def search_official_contacts(self, query: Optional[str] = None, page: int = 1) -> Record:
        try:
            contacts = await self._official_contacts()
            if query:
                term = query.lower()
                contacts = [
                    c for c in contacts
                    if term in _normalize_key(c.get("name")) or term in _normalize_key(c.get("companyName"))
                ]
            data, pagination = paginate(contacts, page, self.settings.contacts_per_page)
            return {"data": data, "pagination": pagination.model_dump(by_alias=True)}
        except Exception:
            logger.error("search_official_contacts failed", exc_info=True)
            raise

    async def get_contact_by_id(self, contact_id: str) -> Optional[Record]:
        """Contact with company name joined; None when absent from both stores."""
        try:
            contact = await self.resolver.fetch_one(contact_id)
        except Exception:
            logger.error(f"get_contact_by_id fallback failed ({contact_id})", exc_info=True)
            raise
        if contact is None:
            return None
        return attach_company_name(contact, await self._company_names())

    async def create_contact(self, contact_data: Record, user: Any = None) -> Record:
        try:
            writer = self._require_writer("create")
            result = await writer.create(contact_data, resolve_actor_name(user))
        except Exception:
            logger.error("create_contact failed", exc_info=True)
            raise
        self._signal_invalidate(self.contact_reader, CONTACT_LIST_CACHE_KEY)
        return result

    async def update_contact(self, contact_id: str, update_data: Record, user: Any = None) -> Record:
        try:
            writer = self._require_writer("update")
            if await self.resolver.fetch_one(contact_id) is None:
                raise NotFoundError("Contact", contact_id)
            await writer.update_by_id(contact_id, update_data, resolve_actor_name(user))
        except Exception:
            logger.error(f"update_contact failed ({contact_id})", exc_info=True)
            raise
        self._signal_invalidate(self.contact_reader, CONTACT_LIST_CACHE_KEY)
        return {"success": True}

    async def delete_contact(self, contact_id: str, user: Any = None) -> Record:
        try:
            writer = self._require_writer("delete")
            if await self.resolver.fetch_one(contact_id) is None:
                raise NotFoundError("Contact", contact_id)
            await writer.delete_by_id(contact_id)
        except Exception:
            logger.error(f"delete_contact failed ({contact_id})", exc_info=True)
            raise
        self._signal_invalidate(self.contact_reader, CONTACT_LIST_CACHE_KEY)
        logger.info(f"Deleted contact {contact_id} by {resolve_actor_name(user)}")
        return {"success": True}

    async def get_linked_contacts(self, opportunity_id: str) -> List[Record]:
        """
        Official contacts linked to an opportunity, with business-card links.

        Display path: failures are logged and yield [].
        """
        try:
            links = await self.potential_reader.get_all_opp_contact_links()
            linked_ids = {
                link.get("contactId")
                for link in links
                if link.get("opportunityId") == opportunity_id and link.get("status") == "active"
            }
            if not linked_ids:
                return []

            contacts = await self.resolver.fetch(ReadMode.ENTRIES)
            names = await self._company_names()
            potential = await self.potential_reader.get_contacts()

            card_links: Dict[str, str] = {}
            for card in potential:
                if card.get("name") and card.get("company") and card.get("driveLink"):
                    key = f"{_normalize_key(card['name'])}|{_normalize_key(card['company'])}"
                    card_links.setdefault(key, card["driveLink"])

            linked = []
            for contact in contacts:
                if contact.get("contactId") not in linked_ids:
                    continue
                company_name = names.get(contact.get("companyId")) or ""
                drive_link = ""
                if contact.get("name") and company_name:
                    key = f"{_normalize_key(contact['name'])}|{_normalize_key(company_name)}"
                    drive_link = card_links.get(key, "")
                view = {field: contact.get(field, "") for field in LINKED_CONTACT_FIELDS}
                view["companyName"] = company_name
                view["driveLink"] = drive_link
                linked.append(view)
            return linked
        except Exception:
            logger.error(f"get_linked_contacts failed ({opportunity_id})", exc_info=True)
            return []

    # ------------------------------------------------------------------
    # Potential contacts (business cards)
    # ------------------------------------------------------------------

    async def get_dashboard_stats(self) -> Dict[str, int]:
        try:
            contacts = await self.potential_reader.get_contacts()
            return {
                "total": len(contacts),
                "pending": sum(1 for c in contacts if not c.get("status") or c.get("status") == "Pending"),
                "processed": sum(1 for c in contacts if c.get("status") == "Processed"),
                "dropped": sum(1 for c in contacts if c.get("status") == "Dropped"),
            }
        except Exception:
            logger.error("get_dashboard_stats failed", exc_info=True)
            return {"total": 0, "pending": 0, "processed": 0, "dropped": 0}

    async def get_potential_contacts(self, limit: Optional[int] = None) -> List[Record]:
        """Non-empty card rows, newest first, at most ``limit`` (0 means no limit)."""
        if limit is None:
            limit = self.settings.potential_contacts_limit
        try:
            contacts = await self.potential_reader.get_contacts()
        except Exception:
            logger.error("get_potential_contacts failed", exc_info=True)
            raise
        contacts = [c for c in contacts if c.get("name") or c.get("company")]
        contacts.sort(key=_created_sort_key)
        if limit > 0:
            contacts = contacts[:limit]
        return contacts

    async def search_contacts(self, query: Optional[str] = None) -> Record:
        contacts = await self.get_potential_contacts(limit=0)
        if query:
            term = query.lower()
            contacts = [
                c for c in contacts
                if term in _normalize_key(c.get("name")) or term in _normalize_key(c.get("company"))
            ]
        return {"data": contacts}

    async def update_potential_contact(self, row_index: int, update_data: Record, modifier: Any = None) -> Record:
        """
        Read-merge-write of one card row. ``notes`` are appended, not replaced.

        Raises:
            NotFoundError: If no card row has this row index
        """
        modifier_name = resolve_actor_name(modifier)
        try:
            row_index = int(row_index)
            contacts = await self.potential_reader.get_contacts()
            target = next((c for c in contacts if c.get("rowIndex") == row_index), None)
            if target is None:
                raise NotFoundError("Potential contact row", row_index)

            merged = merge_fields(target, update_data)
            if update_data.get("notes"):
                entry = f"[{modifier_name} {self._today_label()}] {update_data['notes']}"
                old_notes = target.get("notes") or ""
                merged["notes"] = f"{old_notes}\n{entry}" if old_notes else entry

            await self.potential_writer.write_potential_contact_row(row_index, merged)
        except Exception:
            logger.error(f"update_potential_contact failed (row {row_index})", exc_info=True)
            raise
        self._signal_invalidate(self.potential_reader, POTENTIAL_CACHE_KEY)
        return {"success": True}
