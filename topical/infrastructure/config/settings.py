from typing import Optional
from pydantic import BaseModel, Field
import os


class TopicalSettings(BaseModel):
    """Runtime configuration, read from TOPICAL_* environment variables"""
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or console")
    service_name: str = Field(default="topical")
    storage_prefix: str = Field(default="topical/", description="Prefix for per-conversation storage keys")
    sqlite_path: Optional[str] = Field(None, description="Database file for SqliteStorage")
    prompt_max_turns: int = Field(default=2, ge=1, description="Default attempts before a prompt gives up")
    collect_orphans: bool = Field(default=True, description="Delete unreachable instances at end of turn")

    @classmethod
    def from_env(cls) -> "TopicalSettings":
        """Build settings from the environment, falling back to defaults"""

        values = {}
        for name in cls.model_fields:
            raw = os.getenv(f"TOPICAL_{name.upper()}")
            if raw is not None:
                values[name] = raw
        return cls.model_validate(values)


_settings: Optional[TopicalSettings] = None


def get_settings() -> TopicalSettings:
    """Get the process-wide settings, loading them on first use"""
    global _settings
    if _settings is None:
        _settings = TopicalSettings.from_env()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
