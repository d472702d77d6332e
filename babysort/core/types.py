"""
Type definitions for the photo sorter.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Photo(BaseModel):
    """A photo discovered in a scan root.

    Photos are immutable, each pipeline stage returns updated copies.
    """

    model_config = ConfigDict(frozen=True)

    path: Path = Field(description="Current location of the file")
    scan_root: Path = Field(description="Directory the photo was discovered under")
    discovery_index: int = Field(default=0, description="Position in discovery order")
    timestamp: Optional[datetime] = Field(
        default=None, description="Resolved creation timestamp"
    )
    timestamp_resolved: bool = Field(
        default=False, description="Whether timestamp resolution has been attempted"
    )
    content_hash: Optional[str] = None
    event: Optional[str] = Field(default=None, description="Assigned event name")
    sequence_id: int = 1
    target_path: Optional[Path] = None
    staged: bool = False

    @property
    def extension(self) -> str:
        """Extension of the file, including the dot."""
        name = self.path.name
        index = name.rfind(".")
        return name[index:] if index >= 0 else ""

    @property
    def is_no_op(self) -> bool:
        """True if the photo already sits at its target path."""
        if self.target_path is None:
            return False
        return self.path.resolve() == self.target_path.resolve()


class Event(BaseModel):
    """A named time interval that overrides age brackets.

    Both bounds are exclusive.
    """

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    name: str

    @model_validator(mode="after")
    def _check_bounds(self) -> "Event":
        if not self.start < self.end:
            raise ValueError("start must be before end")
        return self

    def contains(self, timestamp: Optional[datetime]) -> bool:
        if timestamp is None:
            return False
        return self.start < timestamp < self.end


class ElementKind(str, Enum):
    """Kinds of naming pattern element."""

    LITERAL = "literal"
    SEQUENCE = "s"  # zero padded sequence id
    AGE = "a"  # age bracket
    NAME = "n"  # subject name
    DATE = "d"  # creation timestamp
    GROUP = "g"  # event name, or age bracket outside events


class NameElement(BaseModel):
    """A single element of a naming pattern."""

    model_config = ConfigDict(frozen=True)

    kind: ElementKind
    text: str = ""

    @property
    def pattern_text(self) -> str:
        if self.kind == ElementKind.LITERAL:
            return self.text
        return f"%{self.kind.value}"


class NamingPattern(BaseModel):
    """An ordered sequence of name elements."""

    model_config = ConfigDict(frozen=True)

    elements: Tuple[NameElement, ...] = ()

    @property
    def pattern_text(self) -> str:
        return "".join(element.pattern_text for element in self.elements)


Groups = Dict[str, List[Photo]]


@dataclass
class GroupingResult:
    """Photos bucketed into groups plus per-event match counts."""

    groups: Groups = field(default_factory=dict)
    event_counts: Dict[Event, int] = field(default_factory=dict)

    @property
    def unused_events(self) -> List[Event]:
        return [event for event, count in self.event_counts.items() if count == 0]


class DeduplicationResult(BaseModel):
    """Result of duplicate detection."""

    groups: Groups = Field(default_factory=dict)
    duplicates_found: int = 0
    duplicates_removed: int = 0
    duplicate_sets: List[List[Path]] = Field(default_factory=list)


class GroupReport(BaseModel):
    """What the reorganizer did for one group."""

    label: str
    photos: List[Photo] = Field(default_factory=list)
    moved: int = 0
    copied: int = 0
    no_ops: int = 0
    staged: int = 0
    conflicts: int = 0
    skipped: bool = False


class SortResult(BaseModel):
    """Summary of a complete sorting run."""

    total_photos: int = 0
    dry_run: bool = False
    groups: List[GroupReport] = Field(default_factory=list)
    unused_events: List[str] = Field(default_factory=list)
    duplicates_found: int = 0
    duplicates_removed: int = 0
    cleaned_directories: int = 0

    @property
    def conflicts_resolved(self) -> int:
        return sum(report.staged for report in self.groups)

    @property
    def relocated(self) -> int:
        return sum(report.moved + report.copied for report in self.groups)
