"""Turns parsed chains into a single XPath 1.0 expression."""

from selpath.core.parser import DEFAULT_MAX_DEPTH
from selpath.core.pseudo import compile_pseudo
from selpath.core.xpath import ends_with, has_word, literal
from selpath.models import AttributeOperator, AttributeTest, Chain, Combinator, Segment

CONNECTORS = {
    Combinator.NONE: '//',
    Combinator.DESCENDANT: '//',
    Combinator.CHILD: '/',
    Combinator.ADJACENT_SIBLING: '/following-sibling::',
    Combinator.GENERAL_SIBLING: '/following-sibling::',
}


def compile_attribute(test: AttributeTest) -> str:
    """Compile one attribute test into a bracketed predicate."""
    name = test.name
    if test.operator is AttributeOperator.EXISTS or test.value is None:
        return f'[@{name}]'

    operator = test.operator
    value = literal(test.value)
    if operator is AttributeOperator.EQUALS:
        return f'[@{name}={value}]'
    if operator is AttributeOperator.NOT_EQUALS:
        return f'[@{name} and @{name}!={value}]'
    if operator is AttributeOperator.CONTAINS_WORD:
        return f'[{has_word(name, test.value)}]'
    if operator is AttributeOperator.DASH_MATCH:
        return f'[@{name}={value} or starts-with(@{name},{literal(test.value + "-")})]'
    if operator is AttributeOperator.STARTS_WITH:
        return f'[starts-with(@{name},{value})]'
    if operator is AttributeOperator.ENDS_WITH:
        return f'[@{name} and {ends_with("@" + name, test.value)}]'
    return f'[contains(@{name},{value})]'


def compile_segment(segment: Segment, depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Compile one segment into a location step, connector included.

    Predicates follow the tag in a fixed order: the adjacent-sibling ``[1]``,
    id, classes, attribute tests, then the pseudo-class.
    """
    parts = [CONNECTORS[segment.combinator], segment.tag]
    if segment.combinator is Combinator.ADJACENT_SIBLING:
        parts.append('[1]')
    if segment.id:
        parts.append(f'[@id={literal(segment.id)}]')
    parts.extend(f'[{has_word("class", class_name)}]' for class_name in segment.classes)
    parts.extend(compile_attribute(test) for test in segment.attributes)
    if segment.pseudo is not None:
        parts.append(compile_pseudo(segment.pseudo.name, segment.pseudo.arg, segment.tag, depth, max_depth))
    return ''.join(parts)


def assemble_chain(chain: Chain, depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    return ''.join(compile_segment(segment, depth, max_depth) for segment in chain)


def assemble(chains: list[Chain], depth: int = 0, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Compile chains into one expression, unioned with ``|``.

    Args:
        chains: Chains from ``parse_selector``
        depth: Nesting level, non-zero inside ``:not`` / ``:has``
        max_depth: Deepest nesting allowed

    Returns:
        The XPath expression.

    """
    return ' | '.join(assemble_chain(chain, depth, max_depth) for chain in chains)
