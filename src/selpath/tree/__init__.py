"""Document tree adapters."""

from selpath.tree.base import TreeEvaluator
from selpath.tree.lxml_tree import LxmlTreeEvaluator

__all__ = ['LxmlTreeEvaluator', 'TreeEvaluator']
