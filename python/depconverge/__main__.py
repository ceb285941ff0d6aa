"""Main CLI entry point for depconverge."""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from . import __version__
from .analyzer import ConvergenceAnalyzer
from .api_client import DepsDevGraphProvider
from .errors import CollectionError, ConvergenceError
from .formatters import OutputFormatter
from .models import ArtifactCoordinate, ModuleRef
from .parsers import parse_pom_module, read_content
from .providers import load_sbom_provider
from .result import AnalysisResult

logger = logging.getLogger(__name__)

LOG_LEVEL_ALIASES = {'TRACE': 'DEBUG', 'WARN': 'WARNING'}


def setup_logging(verbose: bool = False, log_level: Optional[str] = None):
    """Configure logging based on verbosity flags."""
    if log_level:
        name = log_level.upper()
        level = getattr(logging, LOG_LEVEL_ALIASES.get(name, name), logging.WARNING)
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def _load_pom_modules(paths: List[str]) -> Dict[ModuleRef, List[ArtifactCoordinate]]:
    modules: Dict[ModuleRef, List[ArtifactCoordinate]] = {}
    for path in paths:
        try:
            module, dependencies = parse_pom_module(read_content(path))
        except (OSError, ValueError) as e:
            raise CollectionError(path, str(e), e) from e
        modules[module] = dependencies
    return modules


def run_analysis(args) -> AnalysisResult:
    """Collect the module trees from the selected source and analyze them."""
    if args.source == 'depsdev':
        pom_modules = _load_pom_modules(args.inputs)
        with DepsDevGraphProvider(pom_modules) as provider:
            return ConvergenceAnalyzer(provider, list(pom_modules), args.includes).analyze()

    provider, modules = load_sbom_provider(args.inputs)
    return ConvergenceAnalyzer(provider, modules, args.includes).analyze()


def handle_report(args):
    """Handle the 'report' subcommand."""
    setup_logging(args.verbose, args.loglevel)

    logger.info(f"Inputs: {len(args.inputs)} {args.source} files")
    result = run_analysis(args)

    if args.output_format == 'json':
        output = OutputFormatter.format_as_json(result)
    else:
        output = OutputFormatter.format_as_text(result)

    if args.output == '-':
        print(output, end='')
    else:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(output)
        logger.info(f"Output written to: {args.output}")

    if args.fail_on_divergence and not result.is_release_ready:
        return 2
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='depconverge',
        description='Dependency version convergence report for multi-module builds'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Subcommands')

    report_parser = subparsers.add_parser('report', help='Analyze dependency convergence')
    report_parser.add_argument('inputs', nargs='+',
                               help='One input per module: CycloneDX JSON SBOM (sbom) or pom.xml (depsdev)')
    report_parser.add_argument('--source', default='sbom', choices=['sbom', 'depsdev'],
                               help='Where resolved trees come from (sbom, depsdev). Default: sbom')
    report_parser.add_argument('--includes',
                               help='Comma-separated artifact patterns (group:artifact:version:classifier)')
    report_parser.add_argument('--format', dest='output_format', default='text',
                               choices=['text', 'json'],
                               help='Output format (text, json). Default: text')
    report_parser.add_argument('-o', '--output', default='-',
                               help='Output file (default: stdout, use - for stdout)')
    report_parser.add_argument('--fail-on-divergence', action='store_true',
                               help='Exit with code 2 if the build is not ready for release')
    report_parser.add_argument('-v', '--verbose', action='store_true',
                               help='Verbose output')
    report_parser.add_argument('--loglevel',
                               choices=['TRACE', 'DEBUG', 'INFO', 'WARN', 'ERROR'],
                               help='Set log level')
    report_parser.set_defaults(func=handle_report)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except ConvergenceError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
