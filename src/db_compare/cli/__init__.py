"""CLI module for schema drift detection.

Provides commands for comparing database schemas across profiles, listing
profiles and testing connections.

Usage:
    db-compare profiles
    db-compare test-connection staging
    db-compare compare --source prod --targets staging,qa
    db-compare compare --source prod --targets staging --json --output diff.json

Commands:
    compare          - Compare target profiles against a source profile
    profiles         - List available profiles
    test-connection  - Check that a profile can be reached
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from db_compare.config.loader import get_profile, load_db_config
from db_compare.config.models import CompareConfig
from db_compare.engine import ComparisonEngine
from db_compare.errors import (
    ConnectivityError,
    InvalidRequestError,
    ProfileNotFoundError,
)
from db_compare.schema.introspector import DEFAULT_EXCLUDED_TABLES, PostgresSchemaReader
from db_compare.schema.models import ComparisonResult

console = Console()


def _load_config(args: argparse.Namespace) -> CompareConfig | None:
    """Load db.toml, printing the error and returning None on failure."""
    config_path = Path(args.config) if args.config else None
    try:
        return load_db_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return None


def _make_reader(config: CompareConfig) -> PostgresSchemaReader:
    return PostgresSchemaReader(
        excluded_tables=DEFAULT_EXCLUDED_TABLES | config.excluded_tables
    )


# ============================================================================
# Result rendering
# ============================================================================


def _render_result(result: ComparisonResult) -> None:
    """Print summary and difference tables."""
    summary = result.summary
    summary_table = Table(title="Summary", show_header=False)
    summary_table.add_column("Key", style="dim")
    summary_table.add_column("Value", justify="right")
    summary_table.add_row("Source tables", str(summary.total_tables))
    summary_table.add_row("Tables with differences", str(summary.tables_with_diffs))
    summary_table.add_row("Tables only in source", str(summary.tables_only_in_source))
    summary_table.add_row("Tables only in targets", str(summary.tables_only_in_targets))
    summary_table.add_row("Column differences", str(summary.columns_with_diffs))
    summary_table.add_row("Index differences", str(summary.indexes_with_diffs))
    console.print(summary_table)

    if result.table_diffs:
        console.print()
        table = Table(title="Table Differences", show_header=True, header_style="bold")
        table.add_column("Target", style="dim")
        table.add_column("Table")
        table.add_column("Status")
        for diff in result.table_diffs:
            status = (
                "[yellow]only in source[/yellow]"
                if diff.source_only
                else "[cyan]only in target[/cyan]"
            )
            table.add_row(diff.target_label, diff.table, status)
        console.print(table)

    if result.column_diffs:
        console.print()
        table = Table(title="Column Differences", show_header=True, header_style="bold")
        table.add_column("Target", style="dim")
        table.add_column("Table")
        table.add_column("Column")
        table.add_column("Issue")
        for diff in result.column_diffs:
            table.add_row(diff.target_label, diff.table, diff.column, diff.issue)
        console.print(table)

    if result.index_diffs:
        console.print()
        table = Table(title="Index Differences", show_header=True, header_style="bold")
        table.add_column("Target", style="dim")
        table.add_column("Table")
        table.add_column("Index")
        table.add_column("Issue")
        for diff in result.index_diffs:
            table.add_row(diff.target_label, diff.table, diff.index_name, diff.issue)
        console.print(table)


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_compare(args: argparse.Namespace) -> int:
    """Async implementation for compare command.

    Args:
        args: Parsed arguments with source, targets, json and output.

    Returns:
        0 when no drift is found, 1 on drift or failure.
    """
    config = _load_config(args)
    if config is None:
        return 1

    target_names = [t.strip() for t in args.targets.split(",") if t.strip()]
    try:
        source = get_profile(config, args.source)
        targets = [get_profile(config, name) for name in target_names]
    except ProfileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    if not args.json:
        console.print("Comparing schemas...", style="dim")
        console.print(f"  Source: [bold]{source.label}[/bold]")
        console.print(
            f"  Targets: [bold cyan]{', '.join(t.label for t in targets)}[/bold cyan]"
        )

    try:
        async with _make_reader(config) as reader:
            result = await ComparisonEngine(reader).compare(source, targets)
    except (ConnectivityError, InvalidRequestError) as e:
        console.print(f"\n[bold red]x[/bold red] {e}")
        return 1

    payload = result.model_dump_json(by_alias=True, indent=2)
    if args.output:
        Path(args.output).write_text(payload)

    if args.json:
        console.print_json(payload)
    else:
        console.print()
        _render_result(result)
        console.print()
        if result.has_differences:
            console.print("[bold red]x[/bold red] Schema drift detected")
        else:
            console.print("[bold green]v[/bold green] No differences found")
        if args.output:
            console.print(f"[dim]Result written to[/dim] {args.output}")

    return 1 if result.has_differences else 0


async def _async_test_connection(args: argparse.Namespace) -> int:
    """Async implementation for test-connection command.

    Returns:
        0 on success, 1 on failure.
    """
    config = _load_config(args)
    if config is None:
        return 1

    try:
        profile = get_profile(config, args.profile)
    except ProfileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    console.print(f"Testing connection to [bold cyan]{profile.label}[/bold cyan]...")
    try:
        async with _make_reader(config) as reader:
            await reader.test_connection(profile)
    except ConnectivityError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1

    console.print("[bold green]v[/bold green] Connection successful")
    return 0


# ============================================================================
# Sync command wrappers (cmd_profiles reads local files only)
# ============================================================================


def cmd_compare(args: argparse.Namespace) -> int:
    """Compare target profiles against a source profile.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_compare(args))


def cmd_test_connection(args: argparse.Namespace) -> int:
    """Check that a profile can be reached.

    Wraps the async implementation with ``asyncio.run()``.
    """
    return asyncio.run(_async_test_connection(args))


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from db.toml.

    Reads only local TOML config -- no database calls.

    Returns:
        0 on success, 1 if db.toml not found or invalid.
    """
    config = _load_config(args)
    if config is None:
        return 1

    table = Table(title="Database Profiles", show_header=True, header_style="bold")
    table.add_column("Profile")
    table.add_column("Host")
    table.add_column("Database")
    table.add_column("Schema")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        table.add_row(
            name,
            f"{profile.host}:{profile.port}",
            profile.database,
            profile.db_schema,
            profile.description or "",
        )

    console.print(table)
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="db-compare",
        description="Detect schema drift between a source database and its targets",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to db.toml (default: $DB_COMPARE_CONFIG or ./db.toml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # compare command
    p_compare = subparsers.add_parser(
        "compare",
        help="Compare target profiles against a source profile",
    )
    p_compare.add_argument(
        "--source",
        "-s",
        required=True,
        help="Source profile (the reference schema)",
    )
    p_compare.add_argument(
        "--targets",
        "-t",
        required=True,
        help="Comma-separated list of target profiles (e.g., staging,qa)",
    )
    p_compare.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON instead of tables",
    )
    p_compare.add_argument(
        "--output",
        "-o",
        default=None,
        help="Also write the JSON result to this file",
    )
    p_compare.set_defaults(func=cmd_compare)

    # profiles command
    p_profiles = subparsers.add_parser(
        "profiles",
        help="List available profiles",
    )
    p_profiles.set_defaults(func=cmd_profiles)

    # test-connection command
    p_test = subparsers.add_parser(
        "test-connection",
        help="Check that a profile can be reached",
    )
    p_test.add_argument("profile", help="Profile name from db.toml")
    p_test.set_defaults(func=cmd_test_connection)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors or drift).
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
