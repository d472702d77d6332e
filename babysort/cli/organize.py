"""
CLI command for sorting baby photos.

Sorts photos into groups by age or event and renames them to a consistent
naming pattern.
"""

import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..analysis.events import EventCalendar, parse_date, parse_events_file
from ..core.config import Configuration, settings
from ..core.errors import PhotoSorterError
from ..core.types import SortResult
from ..organization import (
    NamingScheme,
    OrganizationOperation,
    PhotoSorter,
    SortOptions,
    parse_pattern,
)
from ..shared.media_utils import setup_logging

console = Console()


def _confirm_deletion(items: str) -> bool:
    console.print(
        f"\n[red]⚠ WARNING: babysort wants to permanently delete {items}![/red]"
    )
    return click.confirm(f"Allow deletion of {items}?", default=False)


def _parse_date_option(
    ctx: click.Context, param: click.Parameter, value: Optional[str]
):
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


@click.command()
@click.option(
    "-s",
    "--source",
    "sources",
    multiple=True,
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Source directory to sort photos from (repeatable)",
)
@click.option(
    "-t",
    "--target",
    type=click.Path(file_okay=False, path_type=Path),
    help="Target directory, photos are organised in place if omitted",
)
@click.option(
    "--subfolders/--no-subfolders",
    default=True,
    help="Sort photos into a sub-folder per group",
)
@click.option(
    "--naming-scheme",
    type=click.Choice([scheme.value for scheme in NamingScheme]),
    help=f"Built-in naming scheme (default: {settings.naming_scheme})",
)
@click.option(
    "--naming-pattern",
    help="Custom naming pattern, e.g. '%n %g %s'",
)
@click.option(
    "-p",
    "--padding",
    type=int,
    default=settings.sequence_padding,
    show_default=True,
    help="Zero padding width of sequence numbers",
)
@click.option(
    "-w",
    "--weeks",
    type=int,
    default=settings.weeks_threshold,
    show_default=True,
    help="Age in weeks from which photos are grouped by week",
)
@click.option(
    "-m",
    "--months",
    type=int,
    default=settings.months_threshold,
    show_default=True,
    help="Age in months from which photos are grouped by month",
)
@click.option(
    "-y",
    "--years",
    type=int,
    default=settings.years_threshold,
    show_default=True,
    help="Age in years from which photos are grouped by year",
)
@click.option(
    "-d",
    "--dob",
    required=True,
    callback=_parse_date_option,
    help="Date of birth, e.g. 2024-01-01",
)
@click.option(
    "--due-date",
    callback=_parse_date_option,
    help="Due date, defaults to the date of birth",
)
@click.option("-n", "--name", required=True, help="Name of the baby")
@click.option(
    "--events",
    "events_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Events file with one start,end,name line per event",
)
@click.option(
    "-e",
    "--extension",
    "extensions",
    multiple=True,
    help="Photo file extension to sort (repeatable, default: .jpg and .jpeg)",
)
@click.option(
    "--date-format",
    default=settings.date_format,
    show_default=True,
    help="Format of the %d naming pattern element",
)
@click.option(
    "--preserve",
    is_flag=True,
    default=False,
    help="Copy photos instead of moving them, keeping the originals",
)
@click.option(
    "--reorg",
    is_flag=True,
    default=False,
    help="Rescan and reorganise previously sorted photos",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Preview changes without executing (implies --verbose)",
)
@click.option(
    "--ignore",
    multiple=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to skip (repeatable)",
)
@click.option(
    "--de-duplicate",
    "deduplicate",
    is_flag=True,
    default=False,
    help="Detect and delete duplicate photos within each group",
)
@click.option(
    "--keep-duplicates",
    is_flag=True,
    default=False,
    help="Report duplicates without deleting them",
)
@click.option(
    "--allow-deletes",
    is_flag=True,
    default=False,
    help="Delete duplicates and empty directories without asking",
)
@click.option(
    "--clean-empty-dirs",
    is_flag=True,
    default=False,
    help="Delete directories left empty after sorting",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose output")
@click.option("-q", "--quiet", is_flag=True, default=False, help="Only show warnings")
def organize(
    sources: Tuple[Path, ...],
    target: Optional[Path],
    subfolders: bool,
    naming_scheme: Optional[str],
    naming_pattern: Optional[str],
    padding: int,
    weeks: int,
    months: int,
    years: int,
    dob,
    due_date,
    name: str,
    events_file: Optional[Path],
    extensions: Tuple[str, ...],
    date_format: str,
    preserve: bool,
    reorg: bool,
    dry_run: bool,
    ignore: Tuple[Path, ...],
    deduplicate: bool,
    keep_duplicates: bool,
    allow_deletes: bool,
    clean_empty_dirs: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """
    Sort baby photos into groups by age or event.

    Photos are renamed to a naming pattern and, unless --no-subfolders is
    given, sorted into a sub-folder per group.

    \b
    Examples:
        # DRY RUN (preview changes - always do this first!)
        babysort -s ~/Pictures/Baby -n Ada -d 2024-01-01 --dry-run

        # Sort into a separate library, keeping the originals
        babysort -s ~/Downloads -t ~/Pictures/Ada -n Ada -d 2024-01-01 \\
            --preserve

        # Group holiday photos separately and remove duplicates
        babysort -s ~/Pictures/Ada -n Ada -d 2024-01-01 \\
            --events events.txt --de-duplicate

    \b
    Naming Pattern Elements:
        %n  baby name
        %a  age, e.g. 3 Weeks
        %g  event name, or age outside events
        %d  date and time the photo was taken
        %s  sequence number
    """
    if preserve and reorg:
        raise click.UsageError("--preserve and --reorg are mutually exclusive")
    if naming_scheme and naming_pattern:
        raise click.UsageError(
            "--naming-scheme and --naming-pattern are mutually exclusive"
        )

    # Dry run implies verbose
    setup_logging(verbose=verbose or dry_run, quiet=quiet)

    if naming_pattern:
        pattern = parse_pattern(naming_pattern)
    else:
        pattern = NamingScheme(naming_scheme or settings.naming_scheme).pattern

    operation = OrganizationOperation.COPY if preserve else OrganizationOperation.MOVE

    try:
        events = parse_events_file(events_file) if events_file else EventCalendar()

        try:
            config = Configuration(
                name=name,
                birth_date=dob,
                due_date=due_date,
                weeks_threshold=weeks,
                months_threshold=months,
                years_threshold=years,
                sequence_padding=padding,
                extensions=tuple(extensions) or tuple(settings.extensions),
                naming_pattern=pattern,
                events=events,
                date_format=date_format,
            )
            options = SortOptions(
                sources=list(sources),
                target=target,
                subfolders=subfolders,
                operation=operation,
                dry_run=dry_run,
                reorganize=reorg,
                ignore=list(ignore),
                deduplicate=deduplicate,
                keep_duplicates=keep_duplicates,
                allow_deletes=allow_deletes,
                clean_empty_dirs=clean_empty_dirs,
            )
        except ValidationError as e:
            raise click.UsageError(str(e)) from e

        # Show configuration
        console.print("\n[cyan]Sorting Configuration:[/cyan]")
        console.print(f"  Name: {config.name}")
        console.print(f"  Date of birth: {config.birth_date:%Y-%m-%d}")
        console.print(f"  Due date: {config.due_date:%Y-%m-%d}")
        console.print(f"  Sources: {', '.join(str(s) for s in options.sources)}")
        console.print(f"  Target: {options.target or '(in place)'}")
        console.print(f"  Naming pattern: {pattern.pattern_text}")
        console.print(f"  Sub-folders: {'YES' if subfolders else 'NO'}")
        console.print(f"  Operation: {operation.value}")
        console.print(f"  Events: {len(events)}")
        console.print(f"  Dry run: {'YES' if dry_run else 'NO'}")

        if dry_run:
            console.print(
                "\n[yellow]⚠ DRY RUN MODE - No files will be modified[/yellow]"
            )

        console.print()

        sorter = PhotoSorter(
            config,
            options,
            confirm=_confirm_deletion,
            progress=not (verbose or dry_run or quiet),
        )
        result = sorter.run()

        _display_result(result)

    except PhotoSorterError as e:
        console.print(f"\n[red]✗ Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


def _display_result(result: SortResult) -> None:
    """Display sorting result."""
    console.print("\n[green]✓ Sorting complete![/green]\n")

    # Create results table
    table = Table(title="Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="green", justify="right")

    table.add_row("Total photos", str(result.total_photos))
    table.add_row("Groups", str(len(result.groups)))
    table.add_row("Moved", str(sum(g.moved for g in result.groups)))
    table.add_row("Copied", str(sum(g.copied for g in result.groups)))
    table.add_row("Already in place", str(sum(g.no_ops for g in result.groups)))
    table.add_row("Conflicts resolved", str(result.conflicts_resolved))
    table.add_row("Duplicates found", str(result.duplicates_found))
    table.add_row("Duplicates removed", str(result.duplicates_removed))
    table.add_row("Empty directories cleaned", str(result.cleaned_directories))

    console.print(table)

    if result.groups:
        groups = Table(title="Groups")
        groups.add_column("Group", style="cyan")
        groups.add_column("Photos", style="green", justify="right")
        for report in result.groups:
            groups.add_row(report.label, str(len(report.photos)))
        console.print(groups)

    if result.unused_events:
        console.print("\n[yellow]Events that matched no photos:[/yellow]")
        for event in result.unused_events:
            console.print(f"  [yellow]• {event}[/yellow]")

    if result.dry_run:
        console.print("\n[yellow]This was a DRY RUN - no files were modified[/yellow]")
        console.print("Run without --dry-run to sort the photos.")


if __name__ == "__main__":
    organize()
