from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..utils.time import get_zone

DEFAULT_CONFIG_PATH = Path("bizbridge.config.yaml")

DEFAULT_FILTER_RULES_KEY = "日曆篩選規則"
DEFAULT_BLOCK_RULE_KEY = "DX_屏蔽關鍵字"
DEFAULT_TRANSFER_RULE_KEY = "AT_轉移關鍵字"


class ServiceSettings(BaseModel):
    """Settings shared by the service façades."""

    timezone: str = Field(default="Asia/Taipei", description="IANA zone used for calendar day keys")
    personal_calendar_id: Optional[str] = Field(default=None, description="Calendar whose events form bucket A (DX)")
    calendar_id: Optional[str] = Field(default=None, description="Team calendar whose events form bucket B (AT)")
    contacts_per_page: int = Field(default=20, ge=1)
    potential_contacts_limit: int = Field(default=2000, ge=0)
    filter_rules_key: str = DEFAULT_FILTER_RULES_KEY
    block_rule_key: str = DEFAULT_BLOCK_RULE_KEY
    transfer_rule_key: str = DEFAULT_TRANSFER_RULE_KEY
    sqlite_path: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        get_zone(value)
        return value


def load_config(path: Path | None = None) -> Dict[str, Any]:
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(path: Path | None = None) -> ServiceSettings:
    """
    Load and validate service settings from YAML.

    The file may hold the settings at top level or under a ``services`` key.
    A ``calendar`` section may carry ``timezone``, ``personal_calendar_id``,
    ``calendar_id`` and the rule keys.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the structure or any value is invalid
    """
    config = load_config(path)
    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")

    section = config.get("services", config)
    if not isinstance(section, dict):
        raise ValueError("Config 'services' must be a dictionary")

    flattened: Dict[str, Any] = {k: v for k, v in section.items() if k != "calendar"}
    calendar = section.get("calendar") or {}
    if not isinstance(calendar, dict):
        raise ValueError("Config 'calendar' must be a dictionary")
    flattened.update(calendar)

    pagination = flattened.pop("pagination", None)
    if isinstance(pagination, dict) and "contacts_per_page" in pagination:
        flattened.setdefault("contacts_per_page", pagination["contacts_per_page"])

    try:
        return ServiceSettings(**flattened)
    except ValidationError as exc:
        raise ValueError(f"Invalid service settings: {exc}") from exc
