"""Models package for selpath."""

from selpath.models.results import DescriptorAttempt, ExtractMode, FallbackDescriptor, ResolutionReport
from selpath.models.selectors import (
    AttributeOperator,
    AttributeTest,
    Chain,
    Combinator,
    PseudoClass,
    Segment,
    SelectorType,
)

__all__ = [
    'AttributeOperator',
    'AttributeTest',
    'Chain',
    'Combinator',
    'DescriptorAttempt',
    'ExtractMode',
    'FallbackDescriptor',
    'PseudoClass',
    'ResolutionReport',
    'Segment',
    'SelectorType',
]
