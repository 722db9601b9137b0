"""
cli.py
======
Command line interface for compiling selectors and resolving them against HTML files.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

import logfire
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from selpath.config import EngineConfig
from selpath.core.cache import CompiledCache
from selpath.core.compiler import SelectorCompiler, detect_selector_type
from selpath.core.resolver import FallbackResolver
from selpath.exceptions import SelpathError
from selpath.models import Chain, PseudoClass, ResolutionReport, SelectorType
from selpath.tree import LxmlTreeEvaluator
from selpath.utils.files import get_cache_path, init_selpath
from selpath.utils.logging import add_console_logging, setup_local_logging

logger = logging.getLogger(__name__)

THEME = Theme(
    {
        'info': 'dim cyan',
        'warning': 'magenta',
        'danger': 'bold red',
        'success': 'bold green',
        'step': 'bold blue',
    }
)

STATUS_STYLES = {
    'matched': 'success',
    'empty': 'info',
    'skipped': 'warning',
    'failed': 'danger',
}

PREVIEW_LENGTH = 60


def _format_pseudo(pseudo: PseudoClass | None) -> str:
    if pseudo is None:
        return ''
    return f'{pseudo.name}({pseudo.arg})' if pseudo.arg else pseudo.name


class SelpathCLI:
    """Runs CLI commands against one compiler and its cache.

    Attributes:
        console: Rich console for all output
        compiler: Compiler shared by every command
        cache_file: Where the cache is persisted, None when persistence is off

    """

    def __init__(self, config: EngineConfig, console: Console | None = None, persist_cache: bool = False):
        """Initialize the CLI.

        Args:
            config: Engine configuration
            console: Console to print to. Defaults to a themed stdout console.
            persist_cache: Load the compile cache from disk now and save it after each command

        """
        self.console = console or Console(theme=THEME)
        self.compiler = SelectorCompiler.from_config(config, cache=CompiledCache())
        self.cache_file: Path | None = None

        if persist_cache:
            self.cache_file = Path(config.cache_file) if config.cache_file else get_cache_path()
            if self.compiler.cache.load(str(self.cache_file)):
                logger.info('Loaded compile cache from %s', self.cache_file)

    def save_cache(self) -> None:
        if self.cache_file is not None:
            self.compiler.cache.save(str(self.cache_file))

    def compile(self, selector: str, selector_type: str) -> None:
        with logfire.span('compile', selector=selector, selector_type=selector_type):
            xpath = self.compiler.compile(selector, selector_type)
        self._print_plain(xpath)

    def parse(self, selector: str) -> None:
        with logfire.span('parse', selector=selector):
            chains = self.compiler.parse(selector)
        for number, chain in enumerate(chains, start=1):
            self.console.print(self._chain_table(number, chain))

    def detect(self, expression: str) -> None:
        self._print_plain(detect_selector_type(expression).value)

    def query(self, html_file: str, selector: str, selector_type: str | None) -> None:
        """Evaluate one selector against an HTML file and print the results.

        Raises:
            SelpathError: If the selector is rejected or fails to evaluate.

        """
        evaluator = LxmlTreeEvaluator.from_file(html_file)
        descriptor: dict[str, Any] = {'selector': selector, 'type': selector_type}
        with logfire.span('query', file=html_file, selector=selector):
            report = FallbackResolver(evaluator, self.compiler).report([descriptor])

        if report.failures:
            raise SelpathError(report.failures[0].reason)
        self._print_matches(evaluator, report)

    def resolve(self, html_file: str, descriptors_file: str, query_all: bool = False) -> bool:
        """Resolve a JSON list of descriptors against an HTML file.

        Returns:
            True if any descriptor matched.

        """
        with open(descriptors_file, encoding='utf-8') as f:
            descriptors = json.load(f)
        if not isinstance(descriptors, list):
            raise SelpathError(f'{descriptors_file} must contain a JSON list of descriptors')

        evaluator = LxmlTreeEvaluator.from_file(html_file)
        with logfire.span('resolve', file=html_file, descriptors=len(descriptors), query_all=query_all):
            report = FallbackResolver(evaluator, self.compiler).report(descriptors, stop_on_first=not query_all)

        self.console.print(self._attempts_table(report))
        if report.success:
            self._print_matches(evaluator, report)
        else:
            self.console.print('[warning]No descriptor matched[/warning]')
        return report.success

    def show_cache(self) -> None:
        stats = self.compiler.cache.stats
        source = str(self.cache_file) if self.cache_file else 'in-memory'
        self.console.print(Panel(f'{stats["size"]} compiled selectors ({source})', style='bold blue'))

        table = Table(show_header=True, header_style='bold magenta')
        table.add_column('Key', style='dim')
        table.add_column('XPath')
        for key, xpath in self.compiler.cache.get_all().items():
            table.add_row(escape(key), escape(xpath))
        self.console.print(table)

    def clear_cache(self) -> None:
        self.compiler.cache.reset()
        self.console.print('[success]Compile cache cleared[/success]')

    def _print_plain(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def _print_matches(self, evaluator: LxmlTreeEvaluator, report: ResolutionReport) -> None:
        table = Table(show_header=True, header_style='bold magenta')
        table.add_column('#', style='dim', justify='right')
        table.add_column('Result')
        for number, match in enumerate(report.matches, start=1):
            table.add_row(str(number), escape(self._describe(evaluator, match)))
        self.console.print(table)
        self.console.print(f'[success]{len(report.matches)} results[/success]')

    @staticmethod
    def _describe(evaluator: LxmlTreeEvaluator, match: Any) -> str:
        if evaluator.is_element(match):
            text = ' '.join(evaluator.text_content(match).split())
            if len(text) > PREVIEW_LENGTH:
                text = text[:PREVIEW_LENGTH] + '...'
            return f'<{match.tag}> {text}'
        if isinstance(match, dict):
            return json.dumps(match, ensure_ascii=False)
        return str(match)

    @staticmethod
    def _chain_table(number: int, chain: Chain) -> Table:
        table = Table(title=f'Chain {number}', show_header=True, header_style='bold magenta')
        for column in ('Combinator', 'Tag', 'Id', 'Classes', 'Attributes', 'Pseudo', 'Pseudo-element'):
            table.add_column(column)
        for segment in chain:
            attributes = ' '.join(
                f'{test.name}{test.operator.value}{test.value if test.value is not None else ""}'
                for test in segment.attributes
            )
            table.add_row(
                segment.combinator.name.lower(),
                escape(segment.tag),
                escape(segment.id or ''),
                escape(' '.join(segment.classes)),
                escape(attributes),
                escape(_format_pseudo(segment.pseudo)),
                escape(_format_pseudo(segment.pseudo_element)),
            )
        return table

    @staticmethod
    def _attempts_table(report: ResolutionReport) -> Table:
        table = Table(title='Descriptor attempts', show_header=True, header_style='bold magenta')
        table.add_column('#', justify='right')
        table.add_column('Type')
        table.add_column('Selector')
        table.add_column('Status')
        table.add_column('Reason')
        for attempt in report.attempts:
            style = STATUS_STYLES[attempt.status]
            table.add_row(
                str(attempt.index),
                attempt.type.value if attempt.type else '',
                escape(attempt.selector),
                f'[{style}]{attempt.status}[/{style}]',
                escape(attempt.reason),
            )
        return table


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one sub-command per operation."""
    parser = argparse.ArgumentParser(prog='selpath', description='Compile CSS selectors to XPath and resolve them')
    parser.add_argument('--persist-cache', action='store_true', help='Load and save the compile cache on disk')
    parser.add_argument('--log-level', type=str, help='Level for log output (default: SELPATH_LOG_LEVEL or INFO)')
    parser.add_argument('--log-file', action='store_true', help='Write a run log to .selpath/logs/')
    parser.add_argument('-v', '--verbose', action='store_true', help='Mirror log output to stderr')

    commands = parser.add_subparsers(dest='command', required=True)

    compile_cmd = commands.add_parser('compile', help='Compile a selector to XPath')
    compile_cmd.add_argument('selector', help='Selector text')
    compile_cmd.add_argument('--type', choices=[t.value for t in SelectorType], default='css', dest='selector_type')

    parse_cmd = commands.add_parser('parse', help='Show the parsed chains of a CSS selector')
    parse_cmd.add_argument('selector', help='CSS selector text')

    detect_cmd = commands.add_parser('detect', help='Guess whether an expression is CSS, XPath or regex')
    detect_cmd.add_argument('expression', help='Selector text')

    query_cmd = commands.add_parser('query', help='Evaluate a selector against an HTML file')
    query_cmd.add_argument('file', help='HTML file')
    query_cmd.add_argument('selector', help='Selector text')
    query_cmd.add_argument('--type', choices=[t.value for t in SelectorType], dest='selector_type')

    resolve_cmd = commands.add_parser('resolve', help='Resolve a JSON list of fallback descriptors')
    resolve_cmd.add_argument('file', help='HTML file')
    resolve_cmd.add_argument('descriptors', help='JSON file holding a list of descriptors')
    resolve_cmd.add_argument('--all', action='store_true', dest='query_all', help='Collect results of every descriptor')

    cache_cmd = commands.add_parser('cache', help='Inspect or clear the persisted compile cache')
    cache_cmd.add_argument('action', choices=['show', 'clear'])

    return parser


def _configure_logging(args: argparse.Namespace, config: EngineConfig) -> None:
    level = (args.log_level or config.log_level).upper()
    if args.log_file:
        init_selpath()
        setup_local_logging(level)
    if args.verbose:
        add_console_logging(level)

    logfire_token = os.getenv('LOGFIRE_TOKEN')
    if logfire_token:
        logfire.configure(token=logfire_token, service_name='selpath')


def main(argv: list[str] | None = None) -> None:  # noqa: C901
    """Main entry point."""
    args = build_parser().parse_args(argv)
    console = Console(theme=THEME)

    try:
        config = EngineConfig.from_env()
    except ValueError as e:
        console.print(f'[danger]Configuration error: {escape(str(e))}[/danger]')
        sys.exit(2)

    _configure_logging(args, config)

    # The cache command always works on the persisted cache
    persist = args.persist_cache or args.command == 'cache'
    cli = SelpathCLI(config, console=console, persist_cache=persist)

    try:
        if args.command == 'compile':
            cli.compile(args.selector, args.selector_type)
        elif args.command == 'parse':
            cli.parse(args.selector)
        elif args.command == 'detect':
            cli.detect(args.expression)
        elif args.command == 'query':
            cli.query(args.file, args.selector, args.selector_type)
        elif args.command == 'resolve':
            if not cli.resolve(args.file, args.descriptors, args.query_all):
                cli.save_cache()
                sys.exit(1)
        elif args.command == 'cache':
            if args.action == 'show':
                cli.show_cache()
            else:
                cli.clear_cache()
    except SelpathError as e:
        console.print(f'[danger]Error: {escape(e.message)}[/danger]')
        logger.error('Command %s failed: %s', args.command, e.message)
        sys.exit(1)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f'[danger]Error: {escape(str(e))}[/danger]')
        sys.exit(1)

    cli.save_cache()


if __name__ == '__main__':
    main()
