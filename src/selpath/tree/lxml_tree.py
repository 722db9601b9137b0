"""Tree evaluator backed by ``lxml.html``."""

import logging
from collections.abc import Iterator
from typing import Any

from lxml import etree, html

from selpath.exceptions import EvaluationError

logger = logging.getLogger(__name__)


class LxmlTreeEvaluator:
    """Runs XPath 1.0 queries over an lxml HTML document.

    Attributes:
        document: Root element of the parsed document

    """

    def __init__(self, source: str | bytes | etree._Element | etree._ElementTree):
        """Parse markup or wrap an existing tree.

        Args:
            source: HTML markup, an lxml element, or an lxml element tree

        Raises:
            EvaluationError: If the markup is empty or cannot be parsed.

        """
        if isinstance(source, (str, bytes)):
            if not source.strip():
                raise EvaluationError('', 'document is empty')
            try:
                self.document = html.document_fromstring(source)
            except etree.ParserError as e:
                raise EvaluationError('', f'could not parse document: {e}') from e
        elif isinstance(source, etree._ElementTree):
            self.document = source.getroot()
        else:
            self.document = source

    @classmethod
    def from_file(cls, path: str) -> 'LxmlTreeEvaluator':
        with open(path, 'rb') as f:
            return cls(f.read())

    def evaluate(self, xpath: str, context: Any = None) -> list[Any]:
        """Evaluate ``xpath`` against the document or under ``context``.

        An expression that does not start with ``.`` is absolute, and lxml
        evaluates it from the document root even when a context is given. Its
        results are then narrowed to nodes inside the context.

        Args:
            xpath: XPath 1.0 expression
            context: Element to evaluate under, the document when None

        Returns:
            Node-set results as a list.

        Raises:
            EvaluationError: If lxml rejects the expression or it yields a number, string or boolean.

        """
        target = self.document if context is None else context
        try:
            result = target.xpath(xpath)
        except etree.XPathError as e:
            raise EvaluationError(xpath, str(e)) from e

        if not isinstance(result, list):
            raise EvaluationError(xpath, f'expected a node-set, got {type(result).__name__} {result!r}')
        if context is None or xpath.lstrip().startswith('.'):
            return result
        return [item for item in result if self._inside(item, context)]

    def text_content(self, node: Any) -> str:
        if node is None:
            return ''
        if isinstance(node, str):
            return str(node)
        return ''.join(node.itertext())

    def get_attribute(self, node: Any, name: str) -> str | None:
        if not self.is_element(node):
            return None
        return node.get(name)

    def all_elements(self, context: Any = None) -> Iterator[Any]:
        if context is None:
            nodes = self.document.iter()
        else:
            nodes = context.iterdescendants()
        return (node for node in nodes if isinstance(node.tag, str))

    def root(self) -> Any:
        return self.document

    def is_element(self, node: Any) -> bool:
        return isinstance(node, etree._Element) and isinstance(node.tag, str)

    @staticmethod
    def _inside(item: Any, context: Any) -> bool:
        """Whether a result lies strictly below ``context``.

        Text and attribute results are placed by the element that owns them.
        Results lxml cannot place are kept.
        """
        if isinstance(item, etree._Element):
            node = item
        elif hasattr(item, 'getparent'):
            node = item.getparent()
            if node is context:
                return True
        else:
            return True
        if node is None:
            return False
        return any(ancestor is context for ancestor in node.iterancestors())
