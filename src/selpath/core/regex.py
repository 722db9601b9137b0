"""Regular-expression selectors: element search, match extraction and location maps.

Patterns come either delimited, ``/body/flags``, or bare. Matching is done in
Python against the text content (or an attribute value) of each element the
tree evaluator reports.
"""

import re
from functools import lru_cache
from typing import Any

from selpath.exceptions import InvalidRegexError
from selpath.tree import TreeEvaluator

PATTERN_DELIMITED = re.compile(r'^/(?P<body>.*)/(?P<flags>[a-zA-Z]*)$', re.DOTALL)

FLAGS = {
    'i': re.IGNORECASE,
    'm': re.MULTILINE,
    's': re.DOTALL,
    'x': re.VERBOSE,
    'u': 0,
}


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a delimited or bare pattern.

    Args:
        pattern: ``/body/flags`` with flags from ``imsxu``, or a plain Python pattern

    Returns:
        The compiled pattern.

    Raises:
        InvalidRegexError: If the pattern does not compile or carries an unsupported flag.

    """
    body = pattern
    flags = 0
    match = PATTERN_DELIMITED.match(pattern)
    if match:
        body = match.group('body')
        for flag in match.group('flags'):
            if flag not in FLAGS:
                raise InvalidRegexError(pattern, f'unsupported flag "{flag}"')
            flags |= FLAGS[flag]

    try:
        return re.compile(body, flags)
    except re.error as e:
        raise InvalidRegexError(pattern, str(e)) from e


def find_by_regex(
    evaluator: TreeEvaluator,
    pattern: str,
    context: Any = None,
    attribute: str | None = None,
) -> list[Any]:
    """Return the elements whose text content matches ``pattern``.

    With ``attribute`` set, an element matches on that attribute's value
    instead, and elements without the attribute never match.
    """
    compiled = compile_pattern(pattern)
    found = []
    for element in evaluator.all_elements(context):
        if attribute is not None:
            subject = evaluator.get_attribute(element, attribute)
            if subject is None:
                continue
        else:
            subject = evaluator.text_content(element)
        if compiled.search(subject):
            found.append(element)
    return found


def regex_match(
    evaluator: TreeEvaluator,
    pattern: str,
    context: Any = None,
    attribute: str | None = None,
) -> list[str | list[str]]:
    """Collect every match of ``pattern`` across all elements.

    Each element is matched on ``attribute`` when it has it, otherwise on its
    text content; elements with nothing to match are skipped. A pattern without
    groups yields the full match string, one with groups yields the list of its
    non-empty groups.

    Args:
        evaluator: Tree to search
        pattern: Delimited or bare pattern
        context: Restrict the search to descendants of this node
        attribute: Attribute to prefer over text content

    Returns:
        Matches in document order.

    """
    compiled = compile_pattern(pattern)
    results: list[str | list[str]] = []
    for element in evaluator.all_elements(context):
        content = None
        if attribute is not None:
            content = evaluator.get_attribute(element, attribute)
        if content is None:
            content = evaluator.text_content(element)
        if not content:
            continue

        for match in compiled.finditer(content):
            if compiled.groups:
                results.append([group for group in match.groups() if group])
            else:
                results.append(match.group(0))
    return results


def extract_with_location(
    evaluator: TreeEvaluator,
    pattern: str,
    location_map: dict[str, int],
    context: Any = None,
    attribute: str | None = None,
) -> list[dict[str, str]]:
    """Build one record per match, mapping field names to capture groups.

    The text searched is the text content of ``context`` (or of the whole
    document). With ``attribute`` set it is instead the newline-joined values
    of that attribute on every element whose value matches.

    Args:
        evaluator: Tree to search
        pattern: Delimited or bare pattern
        location_map: Output field name to capture index, 0 being the whole match
        context: Node to take text from, the document root when None
        attribute: Attribute to read values from

    Returns:
        List of records; fields whose group did not take part in a match are ''.

    """
    compiled = compile_pattern(pattern)
    if attribute is not None:
        elements = find_by_regex(evaluator, pattern, context, attribute)
        values = (evaluator.get_attribute(element, attribute) for element in elements)
        source = ''.join(f'{value}\n' for value in values if value is not None)
    else:
        source = evaluator.text_content(context if context is not None else evaluator.root())

    records = []
    for match in compiled.finditer(source):
        record = {}
        for field, index in location_map.items():
            value = match.group(index) if 0 <= index <= compiled.groups else None
            record[field] = value or ''
        if record:
            records.append(record)
    return records
