"""View-contract normalization for records from either store.

Sheet rows use localized (Chinese) column names and carry ``rowIndex``. SQL
DTOs use camelCase names and never carry ``rowIndex``. Both are turned into
one view contract that keeps every native key and adds the canonical ones, so
consumers reading either naming keep working through the migration.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

Record = Dict[str, Any]

ROW_INDEX_KEY = "rowIndex"

# Presence of this key marks a sheet-shaped entry.
LEGACY_DATE_KEY = "日期"

# canonical field -> sheet column
ENTRY_LEGACY_ALIASES: Dict[str, str] = {
    "date": LEGACY_DATE_KEY,
    "weekId": "weekId",
    "category": "category",
    "topic": "主題",
    "participants": "參與人員",
    "summaryContent": "重點摘要",
    "todoItems": "待辦事項",
    "createdTime": "createdTime",
    "updatedTime": "lastUpdateTime",
    "createdBy": "建立者",
    "recordId": "recordId",
}

# canonical field -> SQL DTO key, where they differ
ENTRY_SQL_NAMES: Dict[str, str] = {
    "date": "entryDate",
}

ENTRY_CANONICAL_FIELDS = tuple(ENTRY_LEGACY_ALIASES)

CONTACT_CANONICAL_FIELDS = (
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


def _text(value: Any) -> Any:
    """Missing values become ''; anything else passes through."""
    return "" if value is None else value


def is_legacy_entry(raw: Mapping[str, Any]) -> bool:
    return LEGACY_DATE_KEY in raw


def normalize_entry(raw: Mapping[str, Any]) -> Record:
    """
    Build the view contract for a weekly business entry.

    Sheet input: every native key is kept as-is and canonical fields are added
    from their localized columns where the row doesn't already carry them.

    SQL input: every DTO key is kept, the legacy column names are synthesized
    from the canonical values, and ``date`` is taken from ``entryDate``.

    ``rowIndex`` only ever comes from sheet input; SQL input never gets the
    key at all. Running the result through again changes nothing.
    """
    if is_legacy_entry(raw):
        view = dict(raw)
        for canonical, legacy_key in ENTRY_LEGACY_ALIASES.items():
            if canonical not in view:
                view[canonical] = _text(raw.get(legacy_key))
        return view

    view = dict(raw)
    view.pop(ROW_INDEX_KEY, None)
    for canonical, legacy_key in ENTRY_LEGACY_ALIASES.items():
        value = _text(raw.get(ENTRY_SQL_NAMES.get(canonical, canonical)))
        view[legacy_key] = value
        view.setdefault(canonical, value)
        if view[canonical] is None:
            view[canonical] = value
    return view


def normalize_contact(raw: Mapping[str, Any]) -> Record:
    """
    Build the view contract for an official contact.

    SQL rows name the job title ``jobTitle``; sheet rows use ``position``.
    Both end up with ``position``. Sheet rows keep ``rowIndex``.
    """
    view = dict(raw)
    view["position"] = raw.get("jobTitle") or raw.get("position") or ""
    for field in CONTACT_CANONICAL_FIELDS:
        view[field] = _text(view.get(field))
    return view


def company_name_map(companies: Iterable[Mapping[str, Any]]) -> Dict[str, str]:
    return {c.get("companyId"): c.get("companyName") for c in companies if c.get("companyId")}


def attach_company_name(contact: Mapping[str, Any], company_names: Mapping[str, Optional[str]]) -> Record:
    """Join ``companyName``; unknown companies show their id."""
    view = dict(contact)
    company_id = contact.get("companyId")
    view["companyName"] = company_names.get(company_id) or _text(company_id)
    return view


def merge_fields(target: Mapping[str, Any], update: Mapping[str, Any]) -> Record:
    """
    Merge ``update`` onto ``target`` key by key; values from ``update`` win.

    Keys only in ``target`` are kept, keys only in ``update`` are added.
    Neither input is modified.
    """
    merged: Record = {}
    for key, value in target.items():
        merged[key] = value
    for key, value in update.items():
        merged[key] = value
    return merged
