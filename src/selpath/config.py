"""
config.py
=========
Engine configuration, read from the environment (and a ``.env`` file).
"""

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

LOG_LEVELS = {'ALL', 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}


@dataclass
class EngineConfig:
    """Settings shared by the compiler, the resolver and the CLI.

    Attributes:
        max_nesting_depth: Deepest ``:not`` / ``:has`` nesting accepted. Defaults to 16.
        log_level: Level for the run log file. Defaults to 'INFO'.
        cache_file: JSON file the CLI persists compiled selectors to. Defaults to None,
            meaning ``.selpath/compiled_cache.json`` under the project root.

    """

    max_nesting_depth: int = 16
    log_level: str = 'INFO'
    cache_file: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises:
            ValueError: If the nesting depth is below 1 or the log level is unknown.

        """
        if self.max_nesting_depth < 1:
            raise ValueError(f'max_nesting_depth must be at least 1, got {self.max_nesting_depth}')
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f'Unknown log level "{self.log_level}", expected one of {sorted(LOG_LEVELS)}')

    @classmethod
    def from_env(cls) -> 'EngineConfig':
        """Build a config from ``SELPATH_*`` environment variables.

        A ``.env`` file in the working directory is loaded first; variables
        already set in the environment take precedence over it.

        Raises:
            ValueError: If a variable holds an invalid value.

        """
        load_dotenv(find_dotenv(usecwd=True))

        depth = os.getenv('SELPATH_MAX_NESTING_DEPTH')
        try:
            max_nesting_depth = int(depth) if depth else 16
        except ValueError:
            raise ValueError(f'SELPATH_MAX_NESTING_DEPTH must be an integer, got "{depth}"') from None

        return cls(
            max_nesting_depth=max_nesting_depth,
            log_level=os.getenv('SELPATH_LOG_LEVEL') or 'INFO',
            cache_file=os.getenv('SELPATH_CACHE_FILE') or None,
        )
