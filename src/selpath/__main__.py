"""Module entry point.

Invokes the CLI main function when the package is executed
with ``python -m selpath``.
"""

from selpath.cli import main

if __name__ == '__main__':
    main()
