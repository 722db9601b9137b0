"""Pydantic models for parsed CSS selector data."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, RootModel, model_validator


class SelectorType(str, Enum):
    """Which pipeline stage handles a raw selector string."""

    CSS = 'css'
    XPATH = 'xpath'
    REGEX = 'regex'


class Combinator(str, Enum):
    """Relationship between a segment and the one before it.

    Values are the CSS source tokens; ``NONE`` is only legal on the first segment of a chain.
    """

    NONE = ''
    DESCENDANT = ' '
    CHILD = '>'
    ADJACENT_SIBLING = '+'
    GENERAL_SIBLING = '~'


class AttributeOperator(str, Enum):
    """Attribute test operators, keyed by their CSS source token."""

    EXISTS = ''
    EQUALS = '='
    NOT_EQUALS = '!='
    CONTAINS_WORD = '~='
    DASH_MATCH = '|='
    STARTS_WITH = '^='
    ENDS_WITH = '$='
    CONTAINS = '*='


class AttributeTest(BaseModel):
    """A single ``[name OP value]`` test.

    Attributes:
        name: Attribute name
        operator: Comparison operator
        value: Comparison value, None for existence tests

    """

    model_config = ConfigDict(frozen=True)

    name: str
    operator: AttributeOperator = AttributeOperator.EXISTS
    value: str | None = None


class PseudoClass(BaseModel):
    """A pseudo-class or pseudo-element with its raw argument text."""

    model_config = ConfigDict(frozen=True)

    name: str
    arg: str = ''


class Segment(BaseModel):
    """One simple selector step plus the combinator linking it to the previous step.

    Attributes:
        combinator: Relationship to the previous segment
        tag: Element name, '*' for any element
        id: Value of a ``#id`` test, if present
        classes: Class names in source order, duplicates kept
        attributes: Attribute tests in source order
        pseudo: Pseudo-class attached to this step
        pseudo_element: Pseudo-element (``::text``, ``::attr(href)``); not compiled into XPath

    """

    model_config = ConfigDict(frozen=True)

    combinator: Combinator = Combinator.NONE
    tag: str = '*'
    id: str | None = None
    classes: tuple[str, ...] = Field(default_factory=tuple)
    attributes: tuple[AttributeTest, ...] = Field(default_factory=tuple)
    pseudo: PseudoClass | None = None
    pseudo_element: PseudoClass | None = None


class Chain(RootModel[tuple[Segment, ...]]):
    """An ordered, non-empty run of segments forming one compound selector."""

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def _check_combinators(self) -> 'Chain':
        if not self.root:
            raise ValueError('a chain needs at least one segment')
        if self.root[0].combinator is not Combinator.NONE:
            raise ValueError('the first segment of a chain cannot have a combinator')
        for index, segment in enumerate(self.root[1:], start=1):
            if segment.combinator is Combinator.NONE:
                raise ValueError(f'segment {index} is missing its combinator')
        return self

    def __iter__(self):  # type: ignore[override]
        return iter(self.root)

    def __getitem__(self, index: int) -> Segment:
        return self.root[index]

    def __len__(self) -> int:
        return len(self.root)
