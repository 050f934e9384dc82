"""BSA Toolkit CLI."""

import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .log import create_logger
from .result import Result
from .service import ArchiveService

DEFAULT_LIST_LIMIT = 100


@click.group(context_settings={"auto_envvar_prefix": "BSA_TOOLKIT"})
@click.version_option(version=__version__)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    envvar="BSA_TOOLKIT_JSON",
    help="Print machine-readable JSON results",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.pass_context
def main(ctx: click.Context, json_output: bool, verbose: bool):
    """BSA Toolkit - Inspect and extract Bethesda game archives.

    \b
    Supported archives:
    - v103: Oblivion
    - v104: Fallout 3, New Vegas, Skyrim LE
    - v105: Skyrim SE/AE

    Every option can also be set from the environment, e.g. BSA_TOOLKIT_JSON=1.
    """
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output
    ctx.obj["service"] = ArchiveService(create_logger(json_output, verbose))


@main.command()
@click.argument("archive", type=click.Path(path_type=Path))
@click.pass_context
def info(ctx: click.Context, archive: Path):
    """Show header information about an archive."""
    result = ctx.obj["service"].get_info(archive)

    if ctx.obj["json"] or not result.success:
        _finish(ctx, result)
        return

    archive_info = result.value
    click.echo(f"Archive:  {archive_info.file_name}")
    click.echo(f"Type:     {archive_info.type}")
    click.echo(f"Version:  {archive_info.version}")
    if archive_info.type != "BSA":
        click.echo(f"Files:    {archive_info.file_count}")
        click.echo(f"Size:     {format_size(archive_info.file_size)}")
        return

    click.echo(f"Folders:  {archive_info.folder_count}")
    click.echo(f"Files:    {archive_info.file_count} ({archive_info.compressed_count} compressed)")
    click.echo(f"Size:     {format_size(archive_info.file_size)}")
    click.echo(f"Unpacked: {format_size(archive_info.total_uncompressed_size)}")
    click.echo(f"Flags:    {_enabled(archive_info.archive_flags)}")
    click.echo(f"Contents: {_enabled(archive_info.file_flags)}")


@main.command("list")
@click.argument("archive", type=click.Path(path_type=Path))
@click.option("-f", "--filter", "pattern", help="Filter files (e.g. *.nif, textures/*)")
@click.option(
    "--limit",
    type=int,
    default=DEFAULT_LIST_LIMIT,
    show_default=True,
    help="Maximum files to list (0 = all)",
)
@click.pass_context
def list_command(ctx: click.Context, archive: Path, pattern: Optional[str], limit: int):
    """List files in an archive."""
    result = ctx.obj["service"].list_entries(archive, filter=pattern)
    if not result.success:
        _finish(ctx, result)
        return

    entries = result.value
    total = len(entries)
    if limit > 0:
        entries = entries[:limit]

    if ctx.obj["json"]:
        _finish(ctx, Result.ok({"files": entries, "count": total, "showing": len(entries)}))
        return

    click.echo(f"Files ({len(entries)} of {total}):")
    for entry in entries:
        if entry.compressed:
            size_info = f"{format_size(entry.packed_size)} -> {format_size(entry.raw_size)}"
        else:
            size_info = format_size(entry.raw_size)
        click.echo(f"  {entry.path} ({size_info})")
    if 0 < limit < total:
        click.echo(f"  ... and {total - limit} more (use --limit 0 to show all)")


@main.command()
@click.argument("archive", type=click.Path(path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory (default: <archive_name>_extracted)",
)
@click.option("-f", "--filter", "pattern", help="Only extract matching files (e.g. *.nif)")
@click.pass_context
def extract(ctx: click.Context, archive: Path, output: Optional[Path], pattern: Optional[str]):
    """Extract files from an archive."""
    if output is None:
        output = archive.parent / f"{archive.stem}_extracted"

    result = ctx.obj["service"].extract(archive, output, filter=pattern)
    if ctx.obj["json"] or not result.success:
        _finish(ctx, result)
        return

    outcome = result.value
    click.echo(f"Extracted {outcome.extracted_count} file(s) to: {outcome.output_directory}")
    if outcome.errors:
        click.echo()
        click.echo("Errors:")
        for error in outcome.errors:
            click.echo(f"  - {error}")
        sys.exit(1)


def _finish(ctx: click.Context, result: Result) -> None:
    """Print a result in the selected mode; failures exit with status 1."""
    if ctx.obj["json"]:
        click.echo(result.to_json(indent=2))
    elif result.success:
        click.echo(result.to_plain())
    else:
        click.echo(result.to_plain(), err=True)

    if not result.success:
        sys.exit(1)


def _enabled(flags: dict) -> str:
    names = [name for name, enabled in flags.items() if enabled]
    return ", ".join(names) if names else "none"


def format_size(size: int) -> str:
    """Format a byte count for display."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    if size < 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    return f"{size / (1024 * 1024 * 1024):.2f} GB"


if __name__ == "__main__":
    main()
