"""Splits CSS selector text into chains of segments.

The grammar is small enough for a purpose-built scanner: a character walk that
knows when it is inside ``[...]``, ``(...)`` or a quoted string, plus a handful
of regular expressions for the simple-selector components of each part.
"""

import logging
import re
from collections.abc import Iterator

from pydantic import ValidationError

from selpath.exceptions import InvalidSelectorError
from selpath.models import AttributeOperator, AttributeTest, Chain, Combinator, PseudoClass, Segment

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 16

COMBINATOR_TOKENS = {
    '>': Combinator.CHILD,
    '+': Combinator.ADJACENT_SIBLING,
    '~': Combinator.GENERAL_SIBLING,
}

PATTERN_NAME = re.compile(r'[a-zA-Z0-9_-]+')
PATTERN_ATTRIBUTE = re.compile(
    r'\[\s*(?P<name>[a-zA-Z0-9_:-]+)\s*'
    r'(?:(?P<op>[*~|^$!]?=)\s*(?P<quote>["\']?)(?P<value>.*?)(?P=quote)\s*)?\]'
)
PATTERN_ID = re.compile(r'#([a-zA-Z0-9_-]+)')
PATTERN_CLASS = re.compile(r'\.([a-zA-Z0-9_-]+)')


def _scan(text: str) -> Iterator[tuple[int, str, bool]]:
    """Walk ``text`` yielding ``(index, char, at_top_level)``.

    A character is at top level when it is outside brackets, parentheses and
    quotes. Opening and closing delimiters themselves are reported as nested.
    """
    brackets = 0
    parens = 0
    quote = ''
    for index, char in enumerate(text):
        if quote:
            if char == quote:
                quote = ''
            yield index, char, False
            continue
        if char in '"\'' and (brackets or parens):
            quote = char
            yield index, char, False
        elif char == '[':
            brackets += 1
            yield index, char, False
        elif char == ']' and brackets:
            brackets -= 1
            yield index, char, False
        elif char == '(':
            parens += 1
            yield index, char, False
        elif char == ')' and parens:
            parens -= 1
            yield index, char, False
        else:
            yield index, char, brackets == 0 and parens == 0


def split_chains(text: str) -> list[str]:
    """Split a selector group on commas that are not inside brackets, parentheses or quotes."""
    chains: list[str] = []
    start = 0
    for index, char, top in _scan(text):
        if char == ',' and top:
            chains.append(text[start:index].strip())
            start = index + 1
    chains.append(text[start:].strip())
    return chains


def split_compound(text: str) -> list[tuple[Combinator, str]]:
    """Split one chain into ``(combinator, part)`` pairs.

    Explicit combinators win over the whitespace around them; whitespace alone
    means descendant. A leading or trailing combinator is dropped.

    Raises:
        InvalidSelectorError: If two explicit combinators follow each other.

    """
    parts: list[tuple[Combinator, str]] = []
    pending = Combinator.NONE
    current: list[str] = []

    def flush() -> None:
        nonlocal pending
        if current:
            parts.append((pending if parts else Combinator.NONE, ''.join(current)))
            current.clear()
            pending = Combinator.DESCENDANT

    for _, char, top in _scan(text):
        if top and char.isspace():
            flush()
        elif top and char in COMBINATOR_TOKENS:
            flush()
            if pending not in (Combinator.NONE, Combinator.DESCENDANT):
                raise InvalidSelectorError(text, f'unexpected combinator "{char}"')
            pending = COMBINATOR_TOKENS[char]
        else:
            current.append(char)
    flush()
    return parts


def _extract_pseudo(part: str, double_colon: bool) -> tuple[PseudoClass | None, str]:
    """Find the first top-level ``:name(arg)`` (or ``::name(arg)``) and cut it out of ``part``."""
    chars = list(_scan(part))
    for position, (index, char, top) in enumerate(chars):
        if char != ':' or not top:
            continue
        is_double = index + 1 < len(part) and part[index + 1] == ':'
        follows_colon = index > 0 and part[index - 1] == ':'
        if follows_colon or is_double != double_colon:
            continue
        name_start = index + (2 if double_colon else 1)
        name_match = PATTERN_NAME.match(part, name_start)
        if not name_match:
            continue
        end = name_match.end()
        arg = ''
        if end < len(part) and part[end] == '(':
            close = _matching_paren(chars, end)
            if close is None:
                raise InvalidSelectorError(part, f'unclosed argument for ":{name_match.group()}"')
            arg = part[end + 1 : close].strip()
            end = close + 1
        return PseudoClass(name=name_match.group(), arg=arg), part[:index] + part[end:]
    return None, part


def _matching_paren(chars: list[tuple[int, str, bool]], open_index: int) -> int | None:
    depth = 0
    quote = ''
    for index, char, _ in chars[open_index:]:
        if quote:
            if char == quote:
                quote = ''
        elif char in '"\'':
            quote = char
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return index
    return None


def parse_part(part: str, combinator: Combinator = Combinator.NONE) -> Segment:
    """Parse one simple selector (no combinators) into a ``Segment``.

    Components are taken out in a fixed order so that text belonging to an
    earlier component (``.active`` inside ``:not(.active)``, a dot inside an
    attribute value) is never captured by a later one.

    Args:
        part: Simple selector text such as ``li.item[data-id="3"]:first-child``
        combinator: Combinator linking this segment to the previous one

    Returns:
        The parsed segment.

    Raises:
        InvalidSelectorError: If a pseudo-class argument is unclosed.

    """
    source = part
    pseudo_element, part = _extract_pseudo(part, double_colon=True)
    pseudo, part = _extract_pseudo(part, double_colon=False)
    # Only the first pseudo-class of a step is compiled
    extra, part = _extract_pseudo(part, double_colon=False)
    while extra is not None:
        logger.debug('Ignoring extra pseudo-class ":%s" in "%s"', extra.name, source)
        extra, part = _extract_pseudo(part, double_colon=False)

    attributes = []
    for match in PATTERN_ATTRIBUTE.finditer(part):
        op = match.group('op')
        attributes.append(
            AttributeTest(
                name=match.group('name'),
                operator=AttributeOperator(op or ''),
                value=match.group('value') if op else None,
            )
        )
    part = PATTERN_ATTRIBUTE.sub('', part)

    id_match = PATTERN_ID.search(part)
    element_id = None
    if id_match:
        element_id = id_match.group(1)
        part = part[: id_match.start()] + part[id_match.end() :]

    classes = tuple(PATTERN_CLASS.findall(part))
    part = PATTERN_CLASS.sub('', part)

    return Segment(
        combinator=combinator,
        tag=part.strip() or '*',
        id=element_id,
        classes=classes,
        attributes=tuple(attributes),
        pseudo=pseudo,
        pseudo_element=pseudo_element,
    )


def parse_selector(text: str, depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Chain]:
    """Parse selector text into one chain per comma-separated selector.

    Args:
        text: CSS selector text
        depth: Current ``:not`` / ``:has`` nesting level
        max_depth: Deepest nesting allowed before giving up

    Returns:
        List of chains in source order.

    Raises:
        InvalidSelectorError: If the text is empty, nests too deeply or is malformed.

    """
    text = text.strip()
    if not text:
        raise InvalidSelectorError(text, 'selector is empty')
    if depth > max_depth:
        raise InvalidSelectorError(text, f'nesting deeper than {max_depth} levels')

    chains = []
    for chain_text in split_chains(text):
        if not chain_text:
            raise InvalidSelectorError(text, 'empty selector in comma-separated list')
        segments = [parse_part(part, combinator) for combinator, part in split_compound(chain_text)]
        if not segments:
            raise InvalidSelectorError(text, f'"{chain_text}" has no simple selectors')
        try:
            chains.append(Chain(tuple(segments)))
        except ValidationError as e:
            raise InvalidSelectorError(chain_text, str(e)) from e
    return chains
