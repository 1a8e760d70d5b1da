"""Application settings loaded from environment variables.

Values are read once at startup, after load_dotenv() has merged any .env file
into the process environment. Invalid values raise a pydantic ValidationError
so misconfiguration fails fast.

Variables:
    CPQ_CATALOG_PATH: JSON catalog file (built-in sample catalog when unset).
    CPQ_APPROVAL_THRESHOLD: Totals above this require approval (default 5000).
    CPQ_QUOTE_VALIDITY_DAYS: Days a quote stays valid (default 30).
    CPQ_UNDO_MAX_SIZE: Undo history depth (default 100).
    CPQ_NOTIFICATION_HISTORY: Notifications kept for polling (default 500).
    CPQ_COMPANY_NAME: Name printed on the preview (default "Kitchen CPQ Solutions").
    CPQ_LOG_LEVEL: Root log level (default INFO).
"""

import os
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "CPQ_"


class Settings(BaseModel):
    """Runtime configuration for the CPQ service."""

    catalog_path: Optional[str] = Field(default=None, description="JSON catalog file")
    approval_threshold: Decimal = Field(default=Decimal("5000"), ge=0)
    quote_validity_days: int = Field(default=30, ge=1)
    undo_max_size: int = Field(default=100, ge=1)
    notification_history: int = Field(default=500, ge=1)
    company_name: str = Field(default="Kitchen CPQ Solutions", min_length=1)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level '{v}'")
        return level

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """Build settings from CPQ_* environment variables.

        Args:
            load_env_file: Merge a .env file into the environment first.

        Returns:
            Settings with environment overrides applied to the defaults.
        """
        if load_env_file:
            load_dotenv()
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        return cls.model_validate(values)
