"""Interface the engine needs from a document tree."""

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class TreeEvaluator(Protocol):
    """Evaluates XPath against a parsed document and reads node data.

    Nodes are opaque to the engine; it only hands them back to the evaluator.
    """

    def evaluate(self, xpath: str, context: Any = None) -> list[Any]:
        """Run ``xpath`` and return its results as a list.

        Raises:
            EvaluationError: If the expression is rejected by the XPath engine.

        """
        ...

    def text_content(self, node: Any) -> str: ...

    def get_attribute(self, node: Any, name: str) -> str | None: ...

    def all_elements(self, context: Any = None) -> Iterable[Any]:
        """Every element of the document, or every descendant element of ``context``."""
        ...

    def root(self) -> Any: ...

    def is_element(self, node: Any) -> bool: ...
