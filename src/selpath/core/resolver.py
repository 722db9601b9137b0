"""Ordered fallback resolution over a list of selector descriptors.

Descriptors are tried in order. Any problem with one descriptor (bad input, a
selector that will not compile, an evaluator error) is logged and recorded, and
resolution moves on to the next one; ``resolve`` itself never raises.
"""

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from selpath.core.compiler import SelectorCompiler, get_default_compiler, split_pseudo_element
from selpath.core.regex import extract_with_location, find_by_regex, regex_match
from selpath.models import DescriptorAttempt, ExtractMode, FallbackDescriptor, ResolutionReport, SelectorType
from selpath.tree import TreeEvaluator

logger = logging.getLogger(__name__)

DescriptorInput = FallbackDescriptor | dict[str, Any]


def _pick_group(matches: list[Any], group: int | None) -> list[Any]:
    """Keep one capture from list-shaped matches; other matches pass through."""
    if group is None:
        return matches
    return [match[group] if isinstance(match, list) and 0 <= group < len(match) else match for match in matches]


class FallbackResolver:
    """Resolves fallback descriptor lists against one document.

    Attributes:
        evaluator: Tree the selectors are evaluated against
        compiler: Compiler used for CSS and XPath descriptors

    """

    def __init__(self, evaluator: TreeEvaluator, compiler: SelectorCompiler | None = None):
        """Initialize the resolver.

        Args:
            evaluator: Tree evaluator for the document
            compiler: Compiler to use. Defaults to the process-wide default compiler.

        """
        self.evaluator = evaluator
        self.compiler = compiler if compiler is not None else get_default_compiler()

    def resolve(
        self,
        descriptors: Iterable[DescriptorInput],
        context: Any = None,
        stop_on_first: bool = True,
    ) -> list[Any]:
        """Evaluate descriptors in order and return their results.

        Args:
            descriptors: Descriptor models or raw dictionaries
            context: Node to evaluate under, the document when None
            stop_on_first: Return the first non-empty result. When False, results
                of every non-empty descriptor are concatenated in order.

        Returns:
            Matched nodes, strings or records; empty when nothing matched.

        """
        return self.report(descriptors, context, stop_on_first).matches

    def report(
        self,
        descriptors: Iterable[DescriptorInput],
        context: Any = None,
        stop_on_first: bool = True,
    ) -> ResolutionReport:
        """Same walk as ``resolve``, recording what happened to each descriptor."""
        report = ResolutionReport()
        for index, raw in enumerate(descriptors):
            attempt, results = self._attempt(index, raw, context)
            report.attempts.append(attempt)
            if not results:
                continue
            if report.winning_index is None:
                report.winning_index = index
            report.matches.extend(results)
            if stop_on_first:
                break

        logger.debug(
            'Resolved %d descriptors: %d results, winner %s',
            len(report.attempts),
            len(report.matches),
            report.winning_index,
        )
        return report

    def first(self, descriptors: Iterable[DescriptorInput], context: Any = None) -> Any | None:
        """Return the first element node produced by the winning descriptor."""
        for result in self.resolve(descriptors, context):
            if self.evaluator.is_element(result):
                return result
        return None

    def query(self, descriptors: Iterable[DescriptorInput], context: Any = None) -> list[Any]:
        """Return the results of every descriptor, without short-circuiting."""
        return self.resolve(descriptors, context, stop_on_first=False)

    def _attempt(self, index: int, raw: DescriptorInput, context: Any) -> tuple[DescriptorAttempt, list[Any]]:
        try:
            descriptor = raw if isinstance(raw, FallbackDescriptor) else FallbackDescriptor.model_validate(raw)
        except ValidationError as e:
            logger.warning('Descriptor %d is invalid: %s', index, e)
            return DescriptorAttempt(index=index, status='failed', reason=f'invalid descriptor: {e}'), []

        selector = descriptor.selector_text.strip()
        if not selector:
            return DescriptorAttempt(index=index, status='skipped', reason='selector is empty'), []

        kind = descriptor.type or SelectorType.CSS
        try:
            results = self._evaluate(descriptor, selector, kind, context)
        except Exception as e:
            logger.warning('Descriptor %d (%s "%s") failed: %s', index, kind.value, selector, e)
            attempt = DescriptorAttempt(index=index, selector=selector, type=kind, status='failed', reason=str(e))
            return attempt, []

        if not results:
            attempt = DescriptorAttempt(index=index, selector=selector, type=kind, status='empty', reason='no matches')
            return attempt, []

        attempt = DescriptorAttempt(
            index=index,
            selector=selector,
            type=kind,
            status='matched',
            reason=f'{len(results)} results',
            count=len(results),
        )
        return attempt, results

    def _evaluate(self, descriptor: FallbackDescriptor, selector: str, kind: SelectorType, context: Any) -> list[Any]:
        if kind is SelectorType.REGEX:
            self.compiler.compile(selector, kind)
            return self._evaluate_regex(descriptor, selector, context)

        pseudo_element = None
        if kind is SelectorType.CSS and not selector.startswith('/'):
            selector, pseudo_element = split_pseudo_element(selector)

        nodes = self.evaluator.evaluate(self.compiler.compile(selector, kind), context)
        if pseudo_element is None:
            return nodes
        if pseudo_element.name == 'text':
            return [self.evaluator.text_content(node) for node in nodes]

        values = [self.evaluator.get_attribute(node, pseudo_element.arg) for node in nodes]
        return [value for value in values if value is not None]

    def _evaluate_regex(self, descriptor: FallbackDescriptor, pattern: str, context: Any) -> list[Any]:
        attribute = descriptor.attribute
        if descriptor.location_map:
            return extract_with_location(self.evaluator, pattern, descriptor.location_map, context, attribute)

        mode = descriptor.extract_mode or ExtractMode.ELEMENTS
        if mode is ExtractMode.ATTR and attribute is None:
            mode = ExtractMode.ELEMENTS
        if mode is ExtractMode.ELEMENTS:
            return find_by_regex(self.evaluator, pattern, context, attribute)

        return _pick_group(regex_match(self.evaluator, pattern, context, attribute), descriptor.group)


def resolve_fallback(
    evaluator: TreeEvaluator,
    descriptors: Iterable[DescriptorInput],
    context: Any = None,
    stop_on_first: bool = True,
    compiler: SelectorCompiler | None = None,
) -> list[Any]:
    """Resolve ``descriptors`` against ``evaluator`` with a one-off resolver."""
    return FallbackResolver(evaluator, compiler).resolve(descriptors, context, stop_on_first)
