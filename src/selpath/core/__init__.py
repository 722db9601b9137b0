"""Selector parsing, compilation and fallback resolution."""

from selpath.core.assembler import assemble
from selpath.core.cache import CompiledCache
from selpath.core.compiler import (
    SelectorCompiler,
    cache_key,
    clear_compiled,
    compile_selector,
    detect_selector_type,
    get_compiled,
    get_default_compiler,
    is_initialized,
    parse_selector,
    reset,
    set_compiled,
    split_pseudo_element,
)
from selpath.core.pseudo import compile_pseudo
from selpath.core.resolver import FallbackResolver, resolve_fallback

__all__ = [
    'CompiledCache',
    'FallbackResolver',
    'SelectorCompiler',
    'assemble',
    'cache_key',
    'clear_compiled',
    'compile_pseudo',
    'compile_selector',
    'detect_selector_type',
    'get_compiled',
    'get_default_compiler',
    'is_initialized',
    'parse_selector',
    'reset',
    'resolve_fallback',
    'set_compiled',
    'split_pseudo_element',
]
