#!/usr/bin/env python3
"""Manage the memcached cluster from the command line: statistics and flush.

Usage:
    # Basic statistics, one table per server:
    memcached-admin command:memcached

    # Verbose statistics (max size, items, connections, gets/sets):
    memcached-admin command:memcached -v

    # Flush every server:
    memcached-admin command:memcached --flush

    # Clear the terminal first, then display stats:
    memcached-admin command:memcached --clear

Servers come from MEMCACHED_SERVERS (comma-separated host:port list).
Exit status is 0 on success, 1 on any failure.
"""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Callable, Sequence

import structlog
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from memcached_admin.client import ResultCode
from memcached_admin.config import Settings, get_settings
from memcached_admin.logging_config import configure_logging
from memcached_admin.schemas import MetricRecord, UnitCode
from memcached_admin.services.admin import MemcachedAdminService, create_admin_service

logger = structlog.get_logger(__name__)

COMMAND_NAME = "command:memcached"

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def format_value(metric: MetricRecord) -> str:
    """Value rounded to 4 places, unit symbol appended unless dimensionless."""
    value = round(metric.value or 0, 4)
    if metric.unit_code != UnitCode.unit:
        return f"{value} {metric.unit_symbol}"
    return str(value)


def _fail(console: Console, message: str) -> int:
    console.print(f"[bold red][!] The command failed, {escape(message)}[/]", highlight=False)
    return EXIT_FAILURE


def describe_error(exc: Exception) -> str:
    """One line for the terminal; pydantic errors become "field: reason; ..."."""
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
    return str(exc)


def flush(service: MemcachedAdminService, console: Console) -> int:
    """Flush the cache; success banner or a single error line."""
    console.rule("Flush the cache")
    try:
        code, message = service.flush_with_message()
        if code == ResultCode.SUCCESS:
            console.print("[bold green][✓] Flush operation succeeded[/]", highlight=False)
            return EXIT_SUCCESS
    except Exception as exc:
        logger.debug("memcached_flush_failed", error=str(exc))
        message = str(exc)
    return _fail(console, message)


def stats(service: MemcachedAdminService, console: Console, verbose: bool = False) -> int:
    """Render one Name/Value table per server."""
    try:
        report = service.stats(verbose=verbose)
    except Exception as exc:
        logger.debug("memcached_stats_failed", error=str(exc))
        return _fail(console, str(exc))

    for server in report:
        console.rule(server.name or "unknown")
        table = Table()
        table.add_column("Name", style="green")
        table.add_column("Value", style="bold", justify="right")
        for metric in server.metrics:
            table.add_row(metric.name or "unknown", format_value(metric))
        console.print(table)

    return EXIT_SUCCESS


def run_memcached_command(
    args: argparse.Namespace,
    service: MemcachedAdminService,
    console: Console,
) -> int:
    """Dispatch `command:memcached` flags onto the admin service."""
    if args.clear:
        console.clear()

    start = time.perf_counter()
    if args.flush:
        status = flush(service, console)
    else:
        status = stats(service, console, verbose=args.verbose)

    console.print()
    elapsed = time.perf_counter() - start
    console.print(f"[dim]{COMMAND_NAME} finished in {elapsed:.3f}s[/]", highlight=False)
    return status


COMMANDS: dict[str, Callable[[argparse.Namespace, MemcachedAdminService, Console], int]] = {
    COMMAND_NAME: run_memcached_command,
}


def build_parser(settings: Settings | None = None) -> argparse.ArgumentParser:
    clear_default = settings.command_clear if settings is not None else False

    parser = argparse.ArgumentParser(
        prog="memcached-admin",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    command = subparsers.add_parser(
        COMMAND_NAME,
        help="List and flush memcached.",
        description="This command allows manage the memcached tool.",
    )
    command.add_argument(
        "-f", "--flush", action="store_true", help="Flush the memcached memory."
    )
    command.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Add max size, items, connections and get/set counters to the stats.",
    )
    command.add_argument(
        "--clear",
        action=argparse.BooleanOptionalAction,
        default=clear_default,
        help="Clear the terminal before running.",
    )
    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    service: MemcachedAdminService | None = None,
    console: Console | None = None,
) -> int:
    configure_logging(log_level="WARNING", json_output=False, stream=sys.stderr)
    console = console or Console()

    try:
        settings = get_settings()
    except ValidationError as exc:
        logger.debug("settings_invalid", error=str(exc))
        return _fail(console, f"invalid configuration, {describe_error(exc)}")

    args = build_parser(settings).parse_args(argv)
    if service is None:
        service = create_admin_service(settings)

    return COMMANDS[args.command](args, service, console)


if __name__ == "__main__":
    sys.exit(main())
