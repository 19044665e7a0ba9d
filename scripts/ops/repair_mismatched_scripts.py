#!/usr/bin/env python3
"""Repair tracking scripts whose stored size disagrees with their placement.

Dry run by default: lists what would change. Pass --execute to soft-delete the
mismatched scripts and regenerate their campaign/publication pairs.
"""

import argparse
import sys

from rich.console import Console
from rich.table import Table

from tracking_tags.core.config import get_config
from tracking_tags.core.database.database_session import get_db_session
from tracking_tags.core.logging_config import setup_structured_logging
from tracking_tags.services.script_repair_service import ScriptRepairService

console = Console()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--execute", action="store_true", help="Apply changes (default is a dry run)")
    args = parser.parse_args(argv)

    setup_structured_logging()

    if args.execute:
        console.print("[bold red]=== EXECUTING REPAIRS ===[/bold red]")
    else:
        console.print("[yellow]=== DRY RUN MODE (pass --execute to apply changes) ===[/yellow]")

    with get_db_session() as db_session:
        report = ScriptRepairService(db_session, get_config().tracking).repair(dry_run=not args.execute)

    if not report.mismatches:
        console.print("[green]No mismatched scripts found.[/green]")
        return 0

    table = Table(title="Dimension mismatches")
    table.add_column("Placement", style="cyan")
    table.add_column("Publication", style="green")
    table.add_column("Stored", style="red")
    table.add_column("Expected", style="yellow")
    table.add_column("Script ID", style="blue")
    for mismatch in report.mismatches:
        table.add_row(
            mismatch.placement, str(mismatch.publication_id), mismatch.stored, mismatch.expected, mismatch.script_id
        )
    console.print(table)
    console.print(f"Campaign/publication pairs to regenerate: {len(report.pairs)}")

    if report.dry_run:
        console.print("\nDRY RUN complete. No changes made. Run with --execute to apply.")
        return 0

    for (campaign_id, publication_id), result in report.regenerated.items():
        status = "[green]ok[/green]" if result.success else "[red]failed[/red]"
        console.print(
            f"  {campaign_id} / pub {publication_id}: generated {result.scripts_generated}, "
            f"skipped {result.scripts_skipped}, failed {result.scripts_failed} {status}"
        )
    for (campaign_id, publication_id), error in report.failed.items():
        console.print(f"  {campaign_id} / pub {publication_id}: [red]not repaired[/red] ({error})")

    if report.failed:
        console.print(f"\n[red]Repair finished with {len(report.failed)} failed pairs.[/red]")
        return 1
    console.print("\n[green]Repair complete.[/green]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
