"""Utility helpers for selpath."""

from selpath.utils.files import get_cache_path, get_logs_path, get_project_root, init_selpath, is_initialized
from selpath.utils.logging import add_console_logging, setup_local_logging

__all__ = [
    'add_console_logging',
    'get_cache_path',
    'get_logs_path',
    'get_project_root',
    'init_selpath',
    'is_initialized',
    'setup_local_logging',
]
