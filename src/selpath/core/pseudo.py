"""Compiles CSS pseudo-classes into XPath 1.0 predicates.

Every pseudo-class maps to a single bracketed predicate. Names without an entry
compile to an empty string, i.e. no constraint at all, so a misspelled
pseudo-class widens a selector instead of failing it.
"""

import logging
import re
from collections.abc import Callable

from selpath.core.parser import DEFAULT_MAX_DEPTH, parse_selector
from selpath.core.xpath import ends_with, has_word, literal
from selpath.models import AttributeOperator

logger = logging.getLogger(__name__)

PATTERN_NTH = re.compile(r'^(?P<a>[+-]?\d*)n(?P<b>[+-]\d+)?$')
PATTERN_INTEGER = re.compile(r'^[+-]?\d+$')
PATTERN_SLICE = re.compile(r'^(?P<start>\d*):(?P<end>\d*)$')
PATTERN_SLICE_LENGTH = re.compile(r'^(?P<start>\d*):\+(?P<length>\d+)$')

_HIDDEN_STYLE = (
    'contains(@style,"display:none") or contains(@style,"display: none") or '
    'contains(@style,"visibility:hidden") or contains(@style,"visibility: hidden")'
)

# =============================================================================
# STATIC PSEUDO-CLASSES - fixed predicates, no argument
# =============================================================================

STATIC_PSEUDO: dict[str, str] = {
    # Sibling position
    'first-child': '[not(preceding-sibling::*)]',
    'last-child': '[not(following-sibling::*)]',
    'only-child': '[not(preceding-sibling::*) and not(following-sibling::*)]',
    # Positional shorthands
    'first': '[1]',
    'last': '[last()]',
    'even': '[position() mod 2 = 0]',
    'odd': '[position() mod 2 = 1]',
    # Structure
    'root': '[not(parent::*)]',
    'empty': '[not(*) and not(text()[normalize-space()])]',
    'parent': '[*]',
    'blank': '[not(text()[normalize-space()]) and not(*)]',
    'parent-only-text': '[text()[normalize-space()] and not(*)]',
    'depth-0': '[not(ancestor::*)]',
    'depth-1': '[count(ancestor::*) = 1]',
    'depth-2': '[count(ancestor::*) = 2]',
    'depth-3': '[count(ancestor::*) = 3]',
    'depth-4': '[count(ancestor::*) = 4]',
    'depth-5': '[count(ancestor::*) = 5]',
    # Form state
    'enabled': '[not(@disabled) and not(@type="hidden")]',
    'disabled': '[@disabled="disabled" or @disabled]',
    'checked': '[@checked="checked" or @checked]',
    'selected': '[@selected="selected" or @selected]',
    'required': '[@required="required" or @required]',
    'optional': '[not(@required)]',
    'read-only': '[@readonly="readonly" or @readonly]',
    'read-write': '[not(@readonly)]',
    'indeterminate': '[@indeterminate="indeterminate"]',
    'default': '[@default]',
    'placeholder-shown': '[@placeholder and (not(@value) or @value="")]',
    'in-range': '[@min and @max and @value and number(@value) >= number(@min) and number(@value) <= number(@max)]',
    'out-of-range': '[@min and @max and @value and (number(@value) < number(@min) or number(@value) > number(@max))]',
    'user-invalid': '[@aria-invalid="true"]',
    'user-valid': '[not(@aria-invalid="true")]',
    'valid': '[@valid="valid"]',
    'invalid': '[@invalid="invalid"]',
    'autofill': '[contains(@style,"background-color") or contains(@style,"background")]',
    # Interaction and document state, approximated by attributes
    'focus': '[@focus]',
    'focus-within': '[descendant::*[@focus] or ancestor::*[@focus]]',
    'focus-visible': '[@focus and @tabindex]',
    'hover': '[@hover]',
    'active': '[@active]',
    'visited': '[self::a]',
    'target': '[@name=substring-after(.,"#") and substring-after(.,"#")!=""]',
    'target-within': '[descendant::*[@name=substring-after(.,"#") and substring-after(.,"#")!=""]]',
    # Input types
    'text': '[self::input and (not(@type) or @type="text")]',
    'password': '[@type="password"]',
    'checkbox': '[@type="checkbox"]',
    'radio': '[@type="radio"]',
    'file': '[@type="file"]',
    'email': '[@type="email"]',
    'url': '[@type="url"]',
    'number': '[@type="number"]',
    'tel': '[@type="tel"]',
    'search': '[@type="search"]',
    'date': '[@type="date"]',
    'datetime': '[@type="datetime"]',
    'time': '[@type="time"]',
    'datetime-local': '[@type="datetime-local"]',
    'month': '[@type="month"]',
    'week': '[@type="week"]',
    'color': '[@type="color"]',
    'range': '[@type="range"]',
    'submit': '[@type="submit"]',
    'reset': '[@type="reset"]',
    'button': '[self::button or self::input[@type="button" or @type="submit" or @type="reset"]]',
    'image': '[self::img or (self::input and @type="image")]',
    # Element families
    'header': '[self::h1 or self::h2 or self::h3 or self::h4 or self::h5 or self::h6]',
    'input': '[self::input or self::textarea or self::select or self::button]',
    'link': '[self::a and @href]',
    'any-link': '[self::a[@href] or self::area[@href]]',
    'local-link': '[self::a and starts-with(@href,"#")]',
    'list': '[self::ul or self::ol]',
    'list-item': '[self::li]',
    'table-cell': '[self::td or self::th]',
    'table-row': '[self::tr]',
    'table-header': '[self::th]',
    # Element names
    'video': '[self::video]',
    'audio': '[self::audio]',
    'canvas': '[self::canvas]',
    'svg': '[self::svg]',
    'script': '[self::script]',
    'style': '[self::style]',
    'meta': '[self::meta]',
    'base': '[self::base]',
    'head': '[self::head]',
    'body': '[self::body]',
    'title': '[self::title]',
    'figure': '[self::figure]',
    'figcaption': '[self::figcaption]',
    'details': '[self::details]',
    'summary': '[self::summary]',
    'dialog': '[self::dialog]',
    'menu': '[self::menu]',
    'table': '[self::table]',
    'tr': '[self::tr]',
    'td': '[self::td]',
    'th': '[self::th]',
    'thead': '[self::thead]',
    'tbody': '[self::tbody]',
    'tfoot': '[self::tfoot]',
    'ul': '[self::ul]',
    'ol': '[self::ol]',
    'li': '[self::li]',
    'dl': '[self::dl]',
    'dt': '[self::dt]',
    'dd': '[self::dd]',
    'form': '[self::form]',
    'label': '[self::label]',
    'fieldset': '[self::fieldset]',
    'legend': '[self::legend]',
    'section': '[self::section]',
    'article': '[self::article]',
    'aside': '[self::aside]',
    'nav': '[self::nav]',
    'main': '[self::main]',
    'footer': '[self::footer]',
    # Visibility
    'visible': f'[not(@hidden) and not(@type="hidden") and not({_HIDDEN_STYLE})]',
    'hidden': f'[@hidden or @type="hidden" or {_HIDDEN_STYLE}]',
    # Direction
    'dir-ltr': '[@dir="ltr"]',
    'dir-rtl': '[@dir="rtl"]',
    'dir-auto': '[@dir="auto"]',
}


# =============================================================================
# NTH-* ARITHMETIC
# =============================================================================


def parse_nth(formula: str) -> tuple[int, int] | None:
    """Parse an ``an+b`` formula (or a plain integer) into ``(a, b)``.

    ``even`` and ``odd`` are not handled here; they compile to their own predicates.

    Returns:
        The coefficient and offset, or None if the formula is not recognised.

    """
    formula = re.sub(r'\s+', '', formula.lower())
    if PATTERN_INTEGER.match(formula):
        return 0, int(formula)
    match = PATTERN_NTH.match(formula)
    if not match:
        return None
    coefficient = match.group('a')
    if coefficient in ('', '+'):
        a = 1
    elif coefficient == '-':
        a = -1
    else:
        a = int(coefficient)
    return a, int(match.group('b') or 0)


def compile_nth(formula: str, reverse: bool = False, of_type: bool = False, tag: str = '*') -> str:
    """Compile an ``nth-*`` formula into a predicate.

    The arithmetic is written once against a position expression; ``reverse``
    and ``of_type`` only change which expression stands for the CSS index.

    Args:
        formula: ``even``, ``odd``, ``an+b`` or an integer
        reverse: Count from the last sibling (``nth-last-*``)
        of_type: Count only siblings named ``tag`` (``nth-*-of-type``)
        tag: Element name used by the of-type variants

    Returns:
        A bracketed predicate, or ``''`` for an unrecognised formula.

    """
    if of_type:
        axis = 'following-sibling' if reverse else 'preceding-sibling'
        pos = f'(count({axis}::{tag}) + 1)'
    elif reverse:
        pos = '(last() - position() + 1)'
    else:
        pos = 'position()'

    key = re.sub(r'\s+', '', formula.lower())
    if key == 'even':
        return f'[{pos} mod 2 = 0]'
    if key == 'odd':
        return f'[{pos} mod 2 = 1]'

    terms = parse_nth(key)
    if terms is None:
        return ''
    a, b = terms

    if a == 0:
        if reverse and not of_type:
            return f'[position() = last() - ({b} - 1)]'
        return f'[{pos} = {b}]'
    if b == 0:
        return f'[{pos} mod {abs(a)} = 0]'
    if a > 0:
        if b > 0:
            return f'[{pos} >= {b} and {pos} mod {a} = {b % a}]'
        return f'[{pos} mod {a} = {b % a}]'
    step = abs(a)
    if b > 0:
        return f'[{pos} <= {b} and {pos} mod {step} = {b % step}]'
    return f'[{pos} mod {step} = 0]'


# =============================================================================
# ARGUMENT HELPERS
# =============================================================================


def _unquote(arg: str) -> str:
    arg = arg.strip()
    if len(arg) >= 2 and arg[0] == arg[-1] and arg[0] in '"\'':
        return arg[1:-1]
    return arg


def _to_int(value: str) -> int | None:
    value = value.strip()
    return int(value) if PATTERN_INTEGER.match(value) else None


def _pair(arg: str) -> tuple[str, str] | None:
    parts = [part.strip() for part in arg.split(',')]
    if len(parts) != 2 or not all(parts):
        return None
    return parts[0], parts[1]


def _int_pair(arg: str) -> tuple[int, int] | None:
    pair = _pair(arg)
    if pair is None:
        return None
    low, high = _to_int(pair[0]), _to_int(pair[1])
    if low is None or high is None:
        return None
    return low, high


def _compare(template: str, offset: int = 0) -> Callable[[str], str]:
    """Build a compiler for ``name(n)`` pseudo-classes taking one integer."""

    def compile_compare(arg: str) -> str:
        number = _to_int(arg)
        return '' if number is None else template.format(n=number + offset)

    return compile_compare


def _range(template: str) -> Callable[[str], str]:
    """Build a compiler for ``name(low,high)`` pseudo-classes."""

    def compile_range(arg: str) -> str:
        pair = _int_pair(arg)
        return '[true()]' if pair is None else template.format(low=pair[0], high=pair[1])

    return compile_range


def _attr_length(operator: str) -> Callable[[str], str]:
    def compile_attr_length(arg: str) -> str:
        pair = _pair(arg)
        length = _to_int(pair[1]) if pair else None
        if pair is None or length is None:
            return '[true()]'
        name = pair[0]
        return f'[@{name} and string-length(@{name}) {operator} {length}]'

    return compile_attr_length


# =============================================================================
# PSEUDO-CLASSES WITH ARGUMENTS
# =============================================================================


def compile_slice(arg: str) -> str:
    """Compile ``:slice()``.

    Two forms are accepted, both with 0-based starts:

    - ``start:end`` - end exclusive, either bound optional. ``0:`` (or ``:``)
      selects everything and compiles to no predicate.
    - ``start:+length`` - ``length`` elements beginning at ``start``, end inclusive.

    """
    arg = re.sub(r'\s+', '', arg)
    match = PATTERN_SLICE_LENGTH.match(arg)
    if match:
        start = int(match.group('start') or 0)
        length = int(match.group('length'))
        if length == 0:
            return '[false()]'
        return f'[position() >= {start + 1} and position() <= {start + length}]'

    match = PATTERN_SLICE.match(arg)
    if not match:
        return ''
    start = int(match.group('start') or 0)
    end = int(match.group('end')) if match.group('end') else None
    if start == 0 and end is None:
        return ''
    if end is None:
        return f'[position() >= {start + 1}]'
    if start == 0:
        return f'[position() <= {end}]'
    return f'[position() >= {start + 1} and position() < {end + 1}]'


def compile_text_match(arg: str) -> str:
    pattern = _unquote(arg)
    if pattern.endswith('*'):
        return f'[starts-with(normalize-space(.),{literal(pattern[:-1])})]'
    return f'[normalize-space(.)={literal(pattern)}]'


def compile_attr_match(arg: str) -> str:
    pair = _pair(arg)
    if pair is None:
        return '[true()]'
    name, pattern = pair[0], _unquote(pair[1])
    if pattern.endswith('*'):
        return f'[@{name} and starts-with(@{name},{literal(pattern[:-1])})]'
    return f'[@{name}={literal(pattern)}]'


def compile_lang(arg: str) -> str:
    code = _unquote(arg)
    return f'[@lang={literal(code)} or starts-with(@lang,{literal(code + "-")})]'


ARG_PSEUDO: dict[str, Callable[[str], str]] = {
    # Text content
    'contains': lambda arg: f'[contains(string(.),{literal(_unquote(arg))})]',
    'contains-text': lambda arg: f'[contains(text(),{literal(_unquote(arg))})]',
    'starts-with': lambda arg: f'[starts-with(string(.),{literal(_unquote(arg))})]',
    'ends-with': lambda arg: f'[{ends_with("string(.)", _unquote(arg))}]',
    'text-match': compile_text_match,
    # Positional, 0-based arguments
    'eq': _compare('[position() = {n}]', offset=1),
    'gt': _compare('[position() > {n}]', offset=1),
    'lt': _compare('[position() < {n}]', offset=1),
    'between': _range('[position() >= {low} and position() <= {high}]'),
    'slice': compile_slice,
    # nth-* without a tag
    'nth-child': lambda arg: compile_nth(arg),
    'nth-last-child': lambda arg: compile_nth(arg, reverse=True),
    # Counting
    'text-length-gt': _compare('[string-length(normalize-space(.)) > {n}]'),
    'text-length-lt': _compare('[string-length(normalize-space(.)) < {n}]'),
    'text-length-eq': _compare('[string-length(normalize-space(.)) = {n}]'),
    'text-length-between': _range(
        '[string-length(normalize-space(.)) >= {low} and string-length(normalize-space(.)) <= {high}]'
    ),
    'children-gt': _compare('[count(*) > {n}]'),
    'children-lt': _compare('[count(*) < {n}]'),
    'children-eq': _compare('[count(*) = {n}]'),
    'attr-count-gt': _compare('[count(@*) > {n}]'),
    'attr-count-lt': _compare('[count(@*) < {n}]'),
    'attr-count-eq': _compare('[count(@*) = {n}]'),
    'attr-length-gt': _attr_length('>'),
    'attr-length-lt': _attr_length('<'),
    'attr-length-eq': _attr_length('='),
    'depth-between': _range('[count(ancestor::*) >= {low} and count(ancestor::*) <= {high}]'),
    # Attributes
    'has-attr': lambda arg: f'[@{arg.strip()}]' if arg.strip() else '',
    'data': lambda arg: f'[@data-{arg.strip()}]' if arg.strip() else '',
    'attr-match': compile_attr_match,
    'lang': compile_lang,
}

TYPED_PSEUDO: dict[str, Callable[[str, str], str]] = {
    'first-of-type': lambda _, tag: f'[not(preceding-sibling::{tag})]',
    'last-of-type': lambda _, tag: f'[not(following-sibling::{tag})]',
    'only-of-type': lambda _, tag: f'[not(preceding-sibling::{tag}) and not(following-sibling::{tag})]',
    'nth-of-type': lambda arg, tag: compile_nth(arg, of_type=True, tag=tag),
    'nth-last-of-type': lambda arg, tag: compile_nth(arg, reverse=True, of_type=True, tag=tag),
}


# =============================================================================
# RECURSIVE PSEUDO-CLASSES
# =============================================================================


def compile_not(arg: str, depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Compile ``:not(inner)``.

    Only the first segment of the first chain in ``inner`` is used, and of that
    only the id, the classes and ``=`` attribute tests are negated. Tags, other
    attribute operators, pseudo-classes and further segments are ignored.
    """
    segment = parse_selector(arg, depth + 1, max_depth)[0][0]

    conditions = []
    if segment.id:
        conditions.append(f'not(@id={literal(segment.id)})')
    for class_name in segment.classes:
        conditions.append(f'not({has_word("class", class_name)})')
    for attribute in segment.attributes:
        if attribute.operator is AttributeOperator.EQUALS and attribute.value is not None:
            conditions.append(f'not(@{attribute.name}={literal(attribute.value)})')

    if not conditions:
        return ''
    return f'[{" and ".join(conditions)}]'


def compile_has(arg: str, depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Compile ``:has(inner)`` into a descendant-existence test."""
    from selpath.core.assembler import assemble_chain

    tests = []
    for chain in parse_selector(arg, depth + 1, max_depth):
        xpath = assemble_chain(chain, depth + 1, max_depth)
        tests.append('descendant::' + xpath.removeprefix('//'))
    return f'[{" or ".join(tests)}]'


def compile_pseudo(
    name: str,
    arg: str = '',
    tag: str = '*',
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """Compile a pseudo-class into an XPath predicate.

    Args:
        name: Pseudo-class name without the colon, matched case-insensitively
        arg: Text between the parentheses, '' when there are none
        tag: Tag of the segment the pseudo-class is attached to
        depth: Nesting level of the segment, for ``:not`` / ``:has`` recursion
        max_depth: Deepest nesting allowed

    Returns:
        A predicate starting with ``[``, or ``''`` for unknown names.

    """
    key = name.lower()
    if key in STATIC_PSEUDO:
        return STATIC_PSEUDO[key]
    if key in ARG_PSEUDO:
        return ARG_PSEUDO[key](arg)
    if key in TYPED_PSEUDO:
        return TYPED_PSEUDO[key](arg, tag)
    if key == 'not':
        return compile_not(arg, depth, max_depth)
    if key == 'has':
        return compile_has(arg, depth, max_depth)

    logger.debug('Unknown pseudo-class ":%s" compiles to no predicate', name)
    return ''
