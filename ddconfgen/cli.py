"""ddconfgen command line interface."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ddconfgen import __version__
from ddconfgen.checks.redisdb import run_redisdb_check
from ddconfgen.config import get_settings
from ddconfgen.constants import DEFAULT_LOG_FORMAT, DEFAULT_LOG_LEVEL, LOG_LEVEL_CHOICES
from ddconfgen.errors import ConfGenError
from ddconfgen.output import write_output
from ddconfgen.pipeline import run_generation
from ddconfgen.resources.registry import ProviderRegistry, default_registry

logger = logging.getLogger("ddconfgen")


def configure_logging(level: str, fmt: Optional[str] = None) -> None:
    """Configure root logging to stderr."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt or get_settings().log_format,
        stream=sys.stderr,
        force=True,
    )


def build_registry() -> ProviderRegistry:
    """Create the provider registry used by the commands."""
    settings = get_settings()
    return default_registry(
        profile=settings.aws_profile,
        load_entry_points=True,
        group=settings.provider_entry_point_group,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ddconfgen",
        description="Generate Datadog Agent check configuration from AWS resource discovery",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    log_level_parent = argparse.ArgumentParser(add_help=False)
    log_level_parent.add_argument(
        "--log-level",
        choices=LOG_LEVEL_CHOICES,
        default=None,
        help="log level (default: DDCONFGEN_LOG_LEVEL or info)",
    )

    gen = subparsers.add_parser(
        "generate",
        parents=[log_level_parent],
        help="discover resources and render the outputs of a generation config",
    )
    gen.add_argument("--config", "-c", required=True, help="path to the generation config file")

    redisdb = subparsers.add_parser(
        "redisdb",
        parents=[log_level_parent],
        help="generate a redisdb check config without a template",
    )
    redisdb.add_argument("--config", "-c", default=None, help="path to the check config file")
    redisdb.add_argument("--output", "-o", default=None, help="output file (default: stdout)")

    subparsers.add_parser("providers", help="list registered provider types")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def cmd_generate(args: argparse.Namespace, registry: Optional[ProviderRegistry] = None) -> int:
    if registry is None:
        registry = build_registry()
    try:
        run_generation(args.config, registry)
    except ConfGenError as e:
        logger.error(f"Application failed: {e.message}")
        return 1
    return 0


def cmd_redisdb(args: argparse.Namespace, registry: Optional[ProviderRegistry] = None) -> int:
    if registry is None:
        registry = build_registry()
    try:
        data = run_redisdb_check(args.config, registry)
        if args.output:
            write_output(Path(args.output), data)
        else:
            sys.stdout.buffer.write(data)
            sys.stdout.flush()
    except ConfGenError as e:
        logger.error(f"Application failed: {e.message}")
        return 1
    return 0


def cmd_providers(args: argparse.Namespace, registry: Optional[ProviderRegistry] = None) -> int:
    if registry is None:
        registry = build_registry()
    for resource_type in registry.types():
        print(resource_type)
    return 0


COMMANDS = {
    "generate": cmd_generate,
    "redisdb": cmd_redisdb,
    "providers": cmd_providers,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_usage(sys.stderr)
        return 1

    try:
        settings = get_settings()
    except ConfGenError as e:
        configure_logging(DEFAULT_LOG_LEVEL, DEFAULT_LOG_FORMAT)
        logger.error(f"Application failed: {e.message}")
        return 1

    configure_logging(getattr(args, "log_level", None) or settings.log_level, settings.log_format)

    try:
        return COMMANDS[args.command](args)
    except ConfGenError as e:
        logger.error(f"Application failed: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
