"""Sorter configuration."""

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..analysis.events import EventCalendar
from .types import NamingPattern

DEFAULT_EXTENSIONS: Tuple[str, ...] = (".jpg", ".jpeg")

# Full term, used when the due date is on or after the birth date
FULL_TERM_WEEKS = 39


class SorterSettings(BaseSettings):
    """Defaults loaded from environment variables (BABYSORT_*)."""

    weeks_threshold: int = 1
    months_threshold: int = 3
    years_threshold: int = 1
    sequence_padding: int = 3
    extensions: List[str] = list(DEFAULT_EXTENSIONS)
    naming_scheme: str = "NameGroupSequence"
    date_format: str = "YYYY-MM-DD HH-mm-ss"

    model_config = SettingsConfigDict(
        env_prefix="BABYSORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class Configuration(BaseModel):
    """Immutable settings for a sorting run."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1, description="Name of the baby")
    birth_date: datetime
    due_date: Optional[datetime] = Field(
        default=None,
        validate_default=True,
        description="Due date, defaults to the birth date",
    )
    weeks_threshold: int = Field(default=1, ge=0)
    months_threshold: int = Field(default=3, ge=0)
    years_threshold: int = Field(default=1, ge=1)
    sequence_padding: int = Field(default=3, ge=1)
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    naming_pattern: NamingPattern
    events: EventCalendar = Field(default_factory=EventCalendar)
    date_format: str = "YYYY-MM-DD HH-mm-ss"

    @field_validator("due_date")
    @classmethod
    def _default_due_date(
        cls, value: Optional[datetime], info: ValidationInfo
    ) -> Optional[datetime]:
        if value is None:
            return info.data.get("birth_date")
        return value

    @field_validator("extensions")
    @classmethod
    def _require_extensions(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            return DEFAULT_EXTENSIONS
        return value

    @property
    def weeks_of_pregnancy(self) -> int:
        """Weeks of pregnancy at birth."""
        if self.due_date is None or self.due_date >= self.birth_date:
            return FULL_TERM_WEEKS
        lateness = self.birth_date - self.due_date
        return FULL_TERM_WEEKS + lateness.days // 7

    def has_valid_extension(self, name: str) -> bool:
        """Check whether a file name ends with a recognised extension."""
        lowered = name.lower()
        return any(lowered.endswith(ext.lower()) for ext in self.extensions)


# Global settings instance
settings = SorterSettings()
