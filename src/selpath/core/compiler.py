"""Selector compilation entry point.

``SelectorCompiler`` turns CSS into XPath through the parser and assembler,
memoizing results in a ``CompiledCache``. XPath passes through untouched and
regular expressions are only validated. The module-level functions work on a
process-wide default compiler.
"""

import hashlib
import logging
import re

from selpath.config import EngineConfig
from selpath.core import parser
from selpath.core.assembler import assemble
from selpath.core.cache import CompiledCache
from selpath.core.regex import compile_pattern
from selpath.exceptions import InvalidSelectorError, UnsupportedSelectorTypeError
from selpath.models import Chain, PseudoClass, SelectorType

logger = logging.getLogger(__name__)

PATTERN_REGEX_SELECTOR = re.compile(r'^/.*/[imsxuADUX]*$', re.DOTALL)
PATTERN_UNCLOSED_PREDICATE = re.compile(r'\[[^\]]*$')
PATTERN_PSEUDO_ELEMENT = re.compile(r'::(?P<name>text|attr)(?:\(\s*(?P<arg>[^)]*?)\s*\))?\s*$', re.IGNORECASE)


def cache_key(text: str) -> str:
    """MD5 hex digest of the trimmed selector text."""
    return hashlib.md5(text.strip().encode('utf-8')).hexdigest()


def detect_selector_type(text: str) -> SelectorType:
    """Guess the type of a selector string.

    ``/pattern/flags`` is a regular expression, anything else starting with
    ``/`` is XPath, and the rest is CSS.
    """
    text = text.strip()
    if PATTERN_REGEX_SELECTOR.match(text):
        return SelectorType.REGEX
    if text.startswith('/'):
        return SelectorType.XPATH
    return SelectorType.CSS


def split_pseudo_element(text: str) -> tuple[str, PseudoClass | None]:
    """Separate a trailing ``::text`` or ``::attr(name)`` from a CSS selector.

    Returns:
        The selector without the pseudo-element, and the pseudo-element if there was one.

    """
    match = PATTERN_PSEUDO_ELEMENT.search(text)
    if not match:
        return text.strip(), None
    name = match.group('name').lower()
    arg = (match.group('arg') or '').strip('"\'')
    return text[: match.start()].strip(), PseudoClass(name=name, arg=arg)


def coerce_selector_type(selector_type: SelectorType | str) -> SelectorType:
    """Accept a ``SelectorType`` or its case-insensitive string value.

    Raises:
        UnsupportedSelectorTypeError: For any other value.

    """
    if isinstance(selector_type, SelectorType):
        return selector_type
    if isinstance(selector_type, str):
        try:
            return SelectorType(selector_type.strip().lower())
        except ValueError:
            raise UnsupportedSelectorTypeError(selector_type) from None
    raise UnsupportedSelectorTypeError(selector_type)


class SelectorCompiler:
    """Compiles selectors to XPath, caching CSS results.

    Attributes:
        cache: Memo of compiled CSS selectors
        max_nesting_depth: Deepest ``:not`` / ``:has`` nesting accepted

    """

    def __init__(self, cache: CompiledCache | None = None, max_nesting_depth: int = parser.DEFAULT_MAX_DEPTH):
        """Initialize the compiler.

        Args:
            cache: Cache to use. Defaults to a new, private cache.
            max_nesting_depth: Nesting limit for recursive pseudo-classes. Defaults to 16.

        """
        self.cache = cache if cache is not None else CompiledCache()
        self.max_nesting_depth = max_nesting_depth

    @classmethod
    def from_config(cls, config: EngineConfig, cache: CompiledCache | None = None) -> 'SelectorCompiler':
        return cls(cache=cache, max_nesting_depth=config.max_nesting_depth)

    def compile(self, text: str, selector_type: SelectorType | str = SelectorType.CSS) -> str:
        """Compile a selector into an XPath expression.

        Args:
            text: Selector text
            selector_type: css, xpath or regex. Defaults to css.

        Returns:
            The XPath expression for CSS (XPath-shaped CSS input starting with ``/`` passes
            through unchanged), the trimmed text otherwise.

        Raises:
            InvalidSelectorError: If the text is empty or the CSS is malformed.
            InvalidRegexError: If a regex selector does not compile.
            UnsupportedSelectorTypeError: If ``selector_type`` is not recognised.

        """
        kind = coerce_selector_type(selector_type)
        selector = text.strip() if isinstance(text, str) else ''
        if not selector:
            raise InvalidSelectorError(str(text or ''), 'selector is empty')

        if kind is SelectorType.XPATH:
            return selector
        if kind is SelectorType.REGEX:
            compile_pattern(selector)
            return selector

        return self.cache.get_or_compile(cache_key(selector), lambda: self._compile_css(selector))

    def parse(self, text: str) -> list[Chain]:
        return parser.parse_selector(text, max_depth=self.max_nesting_depth)

    def _compile_css(self, selector: str) -> str:
        # Already XPath
        if selector.startswith('/'):
            return selector
        chains = self.parse(selector)
        xpath = assemble(chains, max_depth=self.max_nesting_depth)
        if PATTERN_UNCLOSED_PREDICATE.search(xpath):
            raise InvalidSelectorError(selector, f'compiled to an unclosed predicate: {xpath}')
        logger.debug('Compiled "%s" -> %s', selector, xpath)
        return xpath


_default_compiler = SelectorCompiler()


def get_default_compiler() -> SelectorCompiler:
    return _default_compiler


def compile_selector(text: str, selector_type: SelectorType | str = SelectorType.CSS) -> str:
    """Compile with the process-wide default compiler and cache."""
    return _default_compiler.compile(text, selector_type)


def parse_selector(text: str) -> list[Chain]:
    return _default_compiler.parse(text)


def get_compiled() -> dict[str, str]:
    """Snapshot of the default cache, keyed by ``cache_key``."""
    return _default_compiler.cache.get_all()


def set_compiled(entries: dict[str, str]) -> None:
    """Replace the default cache contents."""
    _default_compiler.cache.replace_all(entries)


def clear_compiled() -> None:
    _default_compiler.cache.clear()


def is_initialized() -> bool:
    return _default_compiler.cache.is_initialized()


def reset() -> None:
    """Empty the default cache and mark it uninitialized."""
    _default_compiler.cache.reset()
