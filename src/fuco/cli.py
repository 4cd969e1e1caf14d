from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

import yaml

from fuco.config import ConfigResolver, ConfigurationBuilder
from fuco.infrastructure.exceptions import ConfigurationError
from fuco.observability.logging_setup import resolve_level

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PRODUCTION_ISSUES = 1
EXIT_CONFIG_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fuco-config", description="FUCO configuration diagnostics")
    parser.add_argument(
        "--base-dir",
        default=None,
        help="Project directory holding .env and config files (default: working directory)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level for resolution messages on stderr (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    # Command: report
    subparsers.add_parser("report", help="Print the configuration report and production issues")

    # Command: validate
    subparsers.add_parser("validate", help="Check production readiness, exit 1 on issues")

    # Command: export
    export_parser = subparsers.add_parser("export", help="Print the redacted configuration snapshot")
    export_parser.add_argument(
        "--format",
        choices=("json", "yaml"),
        default="json",
        help="Output format (default: json)",
    )

    return parser


def _load_resolver(args: argparse.Namespace) -> ConfigResolver:
    builder = ConfigurationBuilder()
    if args.base_dir:
        builder.with_base_dir(args.base_dir)
    return builder.build()


def _print_production_issues(resolver: ConfigResolver) -> int:
    result = resolver.validate_production_config()
    if result.valid:
        print("\nProduction configuration check passed")
        return EXIT_OK

    print("\nProduction configuration issues:")
    for issue in result.issues:
        print(f"   - {issue}")
    return EXIT_PRODUCTION_ISSUES


def _report(resolver: ConfigResolver) -> int:
    print(resolver.generate_report())
    if resolver.is_production():
        _print_production_issues(resolver)
    return EXIT_OK


def _validate(resolver: ConfigResolver) -> int:
    if not resolver.is_production():
        print(f"Environment '{resolver.environment}' is not production, nothing to check")
        return EXIT_OK
    return _print_production_issues(resolver)


def _export(resolver: ConfigResolver, output_format: str) -> int:
    snapshot = resolver.export_config()
    if output_format == "yaml":
        print(yaml.safe_dump(snapshot, sort_keys=False, default_flow_style=False), end="")
    else:
        print(json.dumps(snapshot, indent=2, ensure_ascii=False))
    return EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        level = resolve_level(args.log_level)
    except ValueError as e:
        parser.error(str(e))
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")

    try:
        resolver = _load_resolver(args)
        if args.command == "report":
            return _report(resolver)
        if args.command == "validate":
            return _validate(resolver)
        return _export(resolver, args.format)
    except ConfigurationError as e:
        logger.debug("Configuration error details: %s", e.to_dict())
        print(f"Configuration error: {e.message}", file=sys.stderr)
        return EXIT_CONFIG_ERROR


if __name__ == "__main__":
    sys.exit(main())
