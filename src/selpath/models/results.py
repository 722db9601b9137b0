"""Pydantic models for fallback descriptors and resolution results."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from selpath.models.selectors import SelectorType


class ExtractMode(str, Enum):
    """What a regex descriptor returns."""

    ELEMENTS = 'elements'
    TEXT = 'text'
    ATTR = 'attr'
    MATCH = 'match'


class FallbackDescriptor(BaseModel):
    """One candidate selector in an ordered fallback list.

    Accepts both the field names below and the keys used in descriptor files
    (``selector``, ``extractMode``, ``location``).

    Attributes:
        selector_text: CSS selector, XPath expression or regular expression
        type: Selector type, css when omitted
        attribute: Regex only - match this attribute instead of text content
        extract_mode: Regex only - elements, text, attr or match
        group: Capture index to keep from list-shaped regex matches
        location_map: Regex only - output field name to capture index

    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    selector_text: str = Field(default='', alias='selector')
    type: SelectorType | None = None
    attribute: str | None = None
    extract_mode: ExtractMode | None = Field(default=None, alias='extractMode')
    group: int | None = None
    location_map: dict[str, int] | None = Field(default=None, alias='location')

    @field_validator('type', 'extract_mode', mode='before')
    @classmethod
    def _lowercase(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value

    @field_validator('location_map', mode='before')
    @classmethod
    def _flatten_location(cls, value: Any) -> Any:
        """Accept ``{"field": {"index": 1, "description": "..."}}`` as well as ``{"field": 1}``."""
        if not isinstance(value, dict):
            return value
        return {name: entry.get('index', 0) if isinstance(entry, dict) else entry for name, entry in value.items()}


class DescriptorAttempt(BaseModel):
    """Outcome of evaluating a single descriptor.

    Attributes:
        index: Position of the descriptor in the input list
        selector: Selector text as given
        type: Resolved selector type, None when it could not be determined
        status: matched, empty, skipped or failed
        reason: Short explanation of the status
        count: Number of results produced

    """

    index: int
    selector: str = ''
    type: SelectorType | None = None
    status: Literal['matched', 'empty', 'skipped', 'failed']
    reason: str = ''
    count: int = 0


class ResolutionReport(BaseModel):
    """Everything a fallback resolution did.

    Attributes:
        attempts: One entry per descriptor that was looked at
        matches: The results returned to the caller
        winning_index: Index of the first descriptor with results, if any

    """

    attempts: list[DescriptorAttempt] = Field(default_factory=list)
    matches: list[Any] = Field(default_factory=list)
    winning_index: int | None = None

    @property
    def success(self) -> bool:
        """Whether any descriptor produced results."""
        return bool(self.matches)

    @property
    def failures(self) -> list[DescriptorAttempt]:
        """Attempts that raised an error."""
        return [attempt for attempt in self.attempts if attempt.status == 'failed']
