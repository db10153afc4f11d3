import uuid
from datetime import UTC, datetime


def new_record_id(prefix: str) -> str:
    return f"{prefix}-{datetime.now(UTC).strftime('%Y%m%d')}-{uuid.uuid4().hex[:8]}"


def new_contact_id() -> str:
    return new_record_id("C")


def new_entry_id() -> str:
    return new_record_id("WB")
