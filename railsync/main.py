"""
railsync - TestRail case synchronization for Gherkin feature files
Main entry point for the command line driver.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from railsync import __version__
from railsync.config.settings import ConfigManager, Settings, get_config
from railsync.core.tags import extract_case_id
from railsync.corpus.scanner import ScenarioCorpusScanner
from railsync.error_handling.exceptions import ConfigurationError, FatalError
from railsync.monitoring.logger import get_logger, setup_logging
from railsync.sync.batch import SyncTarget, run_sync

console = Console()
logger = get_logger("railsync.main")

DEFAULT_SUITE_DESCRIPTION = "Automated scenarios synchronized from feature files"

CONFIG_ROWS = [
    ("Enabled", "testrail_enabled"),
    ("URL", "testrail_url"),
    ("Username", "testrail_username"),
    ("API key", "testrail_api_key"),
    ("Project ID", "testrail_project_id"),
    ("Features", "features_dir"),
]


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="railsync",
        description=f"railsync - TestRail case synchronization v{__version__}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List scenarios and their case ids, no remote calls
  python -m railsync.main --scan --features src/test/resources/features/api

  # Create missing cases in the "API Test Automation" suite
  python -m railsync.main --sync --features src/test/resources/features/api \\
      --suite "API Test Automation"

  # Same, and write the new @C<id> tags into the feature files
  python -m railsync.main --sync --write-tags --suite "UI Test Automation" \\
      --features src/test/resources/features/ui

  # Validate TESTRAIL_* settings
  python -m railsync.main --check-config
""",
    )

    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument(
        "--sync",
        action="store_true",
        help="Create TestRail cases for scenarios without a @C<id> tag",
    )
    action.add_argument(
        "--scan",
        action="store_true",
        help="List scenarios and their case ids without contacting TestRail",
    )
    action.add_argument(
        "--check-config",
        action="store_true",
        help="Validate the TestRail configuration and exit",
    )
    action.add_argument(
        "--version",
        action="store_true",
        help="Show version information",
    )

    parser.add_argument(
        "--features",
        type=Path,
        help="Feature file directory (defaults to FEATURES_DIR)",
    )
    parser.add_argument(
        "--suite",
        type=str,
        help="TestRail suite name to sync into (required with --sync)",
    )
    parser.add_argument(
        "--description",
        type=str,
        default=DEFAULT_SUITE_DESCRIPTION,
        help="Description used if the suite has to be created",
    )
    parser.add_argument(
        "--write-tags",
        action="store_true",
        help="Write the new @C<id> tags back into the feature files",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override LOG_LEVEL",
    )

    return parser


def show_version() -> None:
    """Show version information."""
    console.print(f"[bold cyan]railsync[/bold cyan] v{__version__}")


def check_config(settings: Settings) -> int:
    """Validate settings and print a summary."""
    table = Table(title="TestRail configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    values = ConfigManager(settings).get_all()
    for label, key in CONFIG_ROWS:
        value = values.get(key)
        table.add_row(label, str(value) if value not in (None, "") else "[dim]-[/dim]")
    console.print(table)

    if not settings.testrail_enabled:
        console.print("[yellow]TestRail integration is disabled (TESTRAIL_ENABLED=false)[/yellow]")
        return 0

    try:
        settings.validate_integration()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e.message}[/red]")
        return 1

    console.print("[green]TestRail configuration is valid[/green]")
    return 0


def scan_corpus(features_dir: Path) -> int:
    """Print every scenario with its tags and case id."""
    table = Table(title=f"Scenarios in {features_dir}")
    table.add_column("Case", style="cyan")
    table.add_column("Scenario")
    table.add_column("Tags", style="dim")
    table.add_column("Source", style="dim")

    total = 0
    unmapped = 0
    for scenario in ScenarioCorpusScanner(features_dir):
        total += 1
        case_id = extract_case_id(scenario.tags)
        if case_id is None:
            unmapped += 1
        table.add_row(
            f"C{case_id}" if case_id is not None else "[yellow]none[/yellow]",
            scenario.title,
            " ".join(scenario.tags),
            f"{scenario.source}:{scenario.line}" if scenario.source else "",
        )

    console.print(table)
    console.print(f"Scenarios: [cyan]{total}[/cyan]  Without case id: [yellow]{unmapped}[/yellow]")
    return 0


def sync_corpus(
    settings: Settings,
    features_dir: Path,
    suite: str,
    description: str,
    write_tags: bool = False,
) -> int:
    """Run one synchronization pass and print the tags to add."""
    try:
        reports = run_sync(
            settings,
            [SyncTarget(name=suite, description=description, features_dir=features_dir)],
            write_tags=write_tags,
        )
    except FatalError as e:
        console.print(f"[red]TestRail sync failed: {e.message}[/red]")
        return 1

    report = reports[suite]
    if report.actions:
        table = Table(title="New cases")
        table.add_column("Tag", style="green")
        table.add_column("Scenario")
        table.add_column("Source", style="dim")
        for action in report.actions:
            source = action.scenario.source
            table.add_row(
                action.tag,
                action.scenario.title,
                f"{source}:{action.scenario.line}" if source else "",
            )
        console.print(table)

    console.print("\n[bold]Sync Summary:[/bold]")
    console.print(f"Scanned: [cyan]{report.scanned}[/cyan]")
    console.print(f"Created: [green]{report.created}[/green]")
    console.print(f"Already mapped: [dim]{report.skipped}[/dim]")
    console.print(f"Failed: [red]{report.failed}[/red]")

    if report.actions and not write_tags:
        console.print(
            "\n[yellow]Add the tags above to your scenarios "
            "(or rerun with --write-tags), then run tests with TESTRAIL_ENABLED=true[/yellow]"
        )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and dispatch."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.version:
        show_version()
        return 0

    settings = get_config().settings
    setup_logging(log_level=args.log_level, settings=settings)

    features_dir = args.features or settings.features_dir

    if args.check_config:
        return check_config(settings)

    if args.scan:
        return scan_corpus(features_dir)

    if not args.suite:
        parser.error("--suite is required with --sync")

    return sync_corpus(
        settings,
        features_dir,
        args.suite,
        args.description,
        write_tags=args.write_tags,
    )


if __name__ == "__main__":
    sys.exit(main())
