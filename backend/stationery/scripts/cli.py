"""Administrative CLI.

Usage:
    stationery-admin assign-ids            # dry run, nothing is persisted
    stationery-admin assign-ids --execute  # persist ids and rewritten references
"""

import asyncio

import click

from stationery.logging import setup_logging
from stationery.services.migration.reference_rewriter import CrossReferenceRewriter, RewriteReport


async def _assign_ids(dry_run: bool) -> RewriteReport:
    # Imported here so --help works without a configured database driver
    from stationery.db import async_session_maker, dispose_engine

    try:
        async with async_session_maker() as session:
            return await CrossReferenceRewriter(session, dry_run=dry_run).run()
    finally:
        await dispose_engine()


@click.group()
def cli() -> None:
    """Smart Stationery administration."""
    setup_logging()


@cli.command("assign-ids")
@click.option("--execute", is_flag=True, help="Actually persist the migration (default is dry-run).")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
def assign_ids(execute: bool, yes: bool) -> None:
    """Assign sequential ids to records lacking one and rewrite references.

    Stop all application servers first: the run resets the id counters.
    """
    dry_run = not execute
    if not dry_run and not yes:
        click.confirm(
            "This resets id counters and rewrites references. No other writers may be running. Continue?",
            abort=True,
        )

    report = asyncio.run(_assign_ids(dry_run))

    click.echo(f"{'Dry run' if dry_run else 'Migration'} summary:")
    for label, count in sorted(report.assigned.items()):
        click.echo(f"  ids assigned      {label:<28} {count}")
    for label, count in sorted(report.rewritten.items()):
        click.echo(f"  refs rewritten    {label:<28} {count}")
    for label, count in sorted(report.dangling.items()):
        click.echo(f"  refs dangling     {label:<28} {count}")
    for name, value in sorted(report.next_values.items()):
        click.echo(f"  next value        {name:<28} {value}")
    if not report.changed:
        click.echo("  nothing to change")


if __name__ == "__main__":
    cli()
