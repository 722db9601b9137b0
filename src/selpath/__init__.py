"""
selpath - CSS selector to XPath compilation with fallback resolution
=====================================================================

Compiles a CSS3-like selector grammar (plus a set of jQuery-style
pseudo-classes) into XPath 1.0, memoizes the results, and resolves ordered
lists of CSS / XPath / regex selectors against a document tree.

Main Components:
    - SelectorCompiler: CSS to XPath compilation with a thread-safe cache
    - FallbackResolver: Try selectors in order until one matches
    - LxmlTreeEvaluator: Tree evaluator over lxml.html documents

Example:
    >>> from selpath import compile_selector
    >>> compile_selector('ul > li:first-child')
    '//ul/li[not(preceding-sibling::*)]'
"""

__version__ = '0.1.0'

from selpath.config import EngineConfig
from selpath.core import (
    CompiledCache,
    FallbackResolver,
    SelectorCompiler,
    cache_key,
    clear_compiled,
    compile_selector,
    detect_selector_type,
    get_compiled,
    is_initialized,
    parse_selector,
    reset,
    resolve_fallback,
    set_compiled,
)
from selpath.exceptions import (
    EvaluationError,
    InvalidRegexError,
    InvalidSelectorError,
    SelpathError,
    UnsupportedSelectorTypeError,
)
from selpath.models import (
    AttributeOperator,
    AttributeTest,
    Chain,
    Combinator,
    DescriptorAttempt,
    ExtractMode,
    FallbackDescriptor,
    PseudoClass,
    ResolutionReport,
    Segment,
    SelectorType,
)
from selpath.tree import LxmlTreeEvaluator, TreeEvaluator

__all__ = [
    # Compilation
    'SelectorCompiler',
    'CompiledCache',
    'compile_selector',
    'parse_selector',
    'detect_selector_type',
    'cache_key',
    'get_compiled',
    'set_compiled',
    'clear_compiled',
    'is_initialized',
    'reset',
    # Resolution
    'FallbackResolver',
    'resolve_fallback',
    # Trees
    'TreeEvaluator',
    'LxmlTreeEvaluator',
    # Configuration
    'EngineConfig',
    # Models
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
    # Errors
    'SelpathError',
    'InvalidSelectorError',
    'UnsupportedSelectorTypeError',
    'InvalidRegexError',
    'EvaluationError',
]
