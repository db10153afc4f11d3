"""SQL store reader/writer for official contacts and the company list."""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from ..collaborators import CompanyReader, NewStoreReader, NewStoreWriter
from ..errors import NotFoundError
from ..utils.id_generator import new_contact_id
from ..utils.logging import get_logger
from ..utils.time import utc_now_z
from .schema import Company, Contact
from .sqlite_client import run_in_session

logger = get_logger(__name__)

# DTO key -> ORM attribute, for fields callers may write
CONTACT_WRITABLE_FIELDS = {
    "sourceId": "source_id",
    "name": "name",
    "companyId": "company_id",
    "department": "department",
    "jobTitle": "job_title",
    "position": "job_title",
    "mobile": "mobile",
    "phone": "phone",
    "email": "email",
}


def contact_row_to_dto(row: Contact) -> Dict[str, Any]:
    return {
        "contactId": row.contact_id,
        "sourceId": row.source_id,
        "name": row.name,
        "companyId": row.company_id,
        "department": row.department,
        "jobTitle": row.job_title,
        "mobile": row.mobile,
        "phone": row.phone,
        "email": row.email,
        "createdTime": row.created_time,
        "updatedTime": row.updated_time,
    }


def find_contact_by_id(session: Session, contact_id: str) -> Optional[Contact]:
    return session.query(Contact).filter(Contact.contact_id == contact_id).first()


def _apply_fields(row: Contact, data: Dict[str, Any]) -> None:
    for key, attr in CONTACT_WRITABLE_FIELDS.items():
        if key in data:
            setattr(row, attr, data[key])


class SqlContactReader(NewStoreReader):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def get_all(self) -> List[Dict[str, Any]]:
        def _query(session: Session) -> List[Dict[str, Any]]:
            rows = session.query(Contact).order_by(Contact.name, Contact.contact_id).all()
            return [contact_row_to_dto(row) for row in rows]

        return await run_in_session(self.session_factory, _query)

    async def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        def _query(session: Session) -> Optional[Dict[str, Any]]:
            row = find_contact_by_id(session, record_id)
            return contact_row_to_dto(row) if row else None

        return await run_in_session(self.session_factory, _query)


class SqlContactWriter(NewStoreWriter):
    """Writes official contacts by ``contactId``; no row addressing."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def create(self, data: Dict[str, Any], actor: str) -> Dict[str, Any]:
        if not data.get("name"):
            raise ValueError("Contact must have a name")
        now = utc_now_z()
        contact_id = data.get("contactId") or new_contact_id()

        def _insert(session: Session) -> None:
            if find_contact_by_id(session, contact_id):
                raise ValueError(f"Contact already exists: {contact_id}")
            row = Contact(
                contact_id=contact_id,
                created_time=now,
                updated_time=now,
                created_by=actor,
                updated_by=actor,
            )
            _apply_fields(row, data)
            session.add(row)

        await run_in_session(self.session_factory, _insert)
        logger.debug(f"Created contact: {contact_id}")
        return {"success": True, "id": contact_id}

    async def update_by_id(self, record_id: str, data: Dict[str, Any], actor: str) -> Dict[str, Any]:
        def _update(session: Session) -> None:
            row = find_contact_by_id(session, record_id)
            if row is None:
                raise NotFoundError("Contact", record_id)
            _apply_fields(row, data)
            row.updated_time = utc_now_z()
            row.updated_by = actor

        await run_in_session(self.session_factory, _update)
        logger.debug(f"Updated contact: {record_id}")
        return {"success": True, "id": record_id}

    async def delete_by_id(self, record_id: str) -> Dict[str, Any]:
        def _delete(session: Session) -> None:
            row = find_contact_by_id(session, record_id)
            if row is None:
                raise NotFoundError("Contact", record_id)
            session.delete(row)

        await run_in_session(self.session_factory, _delete)
        logger.debug(f"Deleted contact: {record_id}")
        return {"success": True, "id": record_id}


class SqlCompanyReader(CompanyReader):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def get_company_list(self) -> List[Dict[str, Any]]:
        def _query(session: Session) -> List[Dict[str, Any]]:
            rows = session.query(Company).order_by(Company.company_name).all()
            return [{"companyId": row.company_id, "companyName": row.company_name} for row in rows]

        return await run_in_session(self.session_factory, _query)
