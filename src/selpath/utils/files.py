"""Utility functions for file and directory management in selpath."""

from pathlib import Path

CACHE_FILE_NAME = 'compiled_cache.json'


def get_project_root() -> Path:
    """Find the project root by searching upwards from the Current Working Directory.

    Stops at the first directory containing a marker file.
    """
    current_path = Path.cwd()

    markers = {'.git', 'pyproject.toml', '.selpath', 'requirements.txt'}

    for parent in [current_path] + list(current_path.parents):
        if any((parent / marker).exists() for marker in markers):
            return parent

    # No markers (e.g. running in /tmp)
    return current_path


def get_logs_path() -> Path:
    """Return the path to the logs directory in .selpath."""
    return get_project_root() / '.selpath' / 'logs'


def get_cache_path() -> Path:
    """Return the path to the persisted compile cache in .selpath."""
    return get_project_root() / '.selpath' / CACHE_FILE_NAME


def is_initialized() -> bool:
    """Check if the .selpath directory exists in the project root."""
    return (get_project_root() / '.selpath').is_dir()


def init_selpath() -> Path:
    """Create the .selpath directory structure and return its path."""
    selpath_dir = get_project_root() / '.selpath'
    (selpath_dir / 'logs').mkdir(parents=True, exist_ok=True)

    # Keep generated files out of source control
    gitignore = selpath_dir / '.gitignore'
    if not gitignore.exists():
        gitignore.write_text('# Automatically created by selpath\n*\n')

    return selpath_dir
