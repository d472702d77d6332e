"""
Naming patterns for sorted photos.

A naming pattern is a string containing format specifiers that are populated
from the properties of each photo:

    %n  baby name
    %a  age bracket of the photo
    %g  group name, the event name if the photo is in an event else the age
    %d  creation date and time
    %s  sequence id, zero padded

Anything else is used literally.
"""

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, List

import arrow

from ..analysis.age import classify_age
from ..core.types import ElementKind, NameElement, NamingPattern, Photo
from ..shared.media_utils import MAX_FILENAME_LENGTH, safe_filename

if TYPE_CHECKING:
    from ..core.config import Configuration

SPECIFIERS = {kind.value: kind for kind in ElementKind if kind != ElementKind.LITERAL}


def parse_pattern(pattern: str) -> NamingPattern:
    """
    Parse a naming pattern string.

    Args:
        pattern: Pattern text, e.g. "%n %g %s"

    Returns:
        Compiled naming pattern
    """
    elements: List[NameElement] = []
    literal: List[str] = []

    def flush() -> None:
        if literal:
            elements.append(NameElement(kind=ElementKind.LITERAL, text="".join(literal)))
            literal.clear()

    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "%" and i < len(pattern) - 1:
            code = pattern[i + 1]
            kind = SPECIFIERS.get(code)
            if kind is not None:
                flush()
                elements.append(NameElement(kind=kind))
            else:
                # Not a format specifier
                literal.append(char)
                literal.append(code)
            i += 2
            continue
        literal.append(char)
        i += 1

    flush()
    return NamingPattern(elements=tuple(elements))


class NamingScheme(str, Enum):
    """Built-in naming schemes."""

    NAME_AGE_SEQUENCE = "NameAgeSequence"  # Ada 3 Months 001.jpg
    AGE_NAME_SEQUENCE = "AgeNameSequence"  # 3 Months Ada 001.jpg
    NAME_AGE_DATE = "NameAgeDate"  # Ada 3 Months 2024-04-05 10-00-00.jpg
    NAME_GROUP_SEQUENCE = "NameGroupSequence"  # Ada Trip 001.jpg
    GROUP_NAME_SEQUENCE = "GroupNameSequence"  # Trip Ada 001.jpg
    NAME_GROUP_DATE = "NameGroupDate"  # Ada Trip 2024-01-05 10-00-00.jpg

    @property
    def pattern_text(self) -> str:
        return _SCHEME_PATTERNS[self]

    @property
    def pattern(self) -> NamingPattern:
        return parse_pattern(self.pattern_text)


_SCHEME_PATTERNS = {
    NamingScheme.NAME_AGE_SEQUENCE: "%n %a %s",
    NamingScheme.AGE_NAME_SEQUENCE: "%a %n %s",
    NamingScheme.NAME_AGE_DATE: "%n %a %d",
    NamingScheme.NAME_GROUP_SEQUENCE: "%n %g %s",
    NamingScheme.GROUP_NAME_SEQUENCE: "%g %n %s",
    NamingScheme.NAME_GROUP_DATE: "%n %g %d",
}


def render_element(
    element: NameElement, photo: Photo, config: "Configuration"
) -> str:
    """Render the text of a single pattern element for a photo."""
    kind = element.kind
    if kind == ElementKind.LITERAL:
        return element.text
    elif kind == ElementKind.SEQUENCE:
        return str(photo.sequence_id).zfill(config.sequence_padding)
    elif kind == ElementKind.AGE:
        return classify_age(photo.timestamp, config)
    elif kind == ElementKind.NAME:
        return config.name
    elif kind == ElementKind.DATE:
        if photo.timestamp is None:
            return ""
        return arrow.get(photo.timestamp).format(config.date_format)
    elif kind == ElementKind.GROUP:
        if photo.event is not None:
            return photo.event
        return classify_age(photo.timestamp, config)

    # All enum cases covered
    raise ValueError(f"Unknown pattern element {kind}")  # pragma: no cover


def render_name(pattern: NamingPattern, photo: Photo, config: "Configuration") -> str:
    """Render the file name body (without extension) for a photo."""
    return "".join(render_element(element, photo, config) for element in pattern.elements)


def target_filename(
    pattern: NamingPattern, photo: Photo, config: "Configuration"
) -> str:
    """Render the sanitised target file name for a photo, keeping its extension."""
    body = safe_filename(
        render_name(pattern, photo, config),
        max_length=MAX_FILENAME_LENGTH - len(photo.extension),
    )
    return body + photo.extension


def group_directory(root: Path, label: str, subfolders: bool) -> Path:
    """Directory photos of a group are sorted into under a root."""
    if subfolders:
        return root / safe_filename(label)
    return root
