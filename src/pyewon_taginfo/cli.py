#!/usr/bin/env python3
"""Offline CLI for inspecting saved tag-list exports using Typer."""

import json
import logging
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from typing_extensions import Annotated

from . import __version__  # type: ignore
from .errors import ExportStreamError, MalformedRecordError
from .registry import TagRegistry
from .sources import ExportFile
from .types import TagGroup, TagInfo

app = typer.Typer(
    name="pyewon-taginfo",
    help="Parse and query tag-list exports from an Ewon gateway.",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Shared options and helpers
# ============================================================================

ExportArgument = Annotated[
    Path,
    typer.Argument(help="Path to a saved tag-list export (text format)"),
]
TagCountOption = Annotated[
    Optional[int],
    typer.Option(
        "--tag-count",
        "-n",
        help="Device tag count (default: number of records in the export)",
        envvar="PYEWON_TAG_COUNT",
    ),
]
GapThresholdOption = Annotated[
    Optional[int],
    typer.Option(
        "--gap-warning-threshold",
        help="Warn when at least this many tag id gaps are found",
        envvar="PYEWON_GAP_WARNING_THRESHOLD",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable debug logging"),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output as JSON"),
]


class _FixedCount:
    def __init__(self, count: int) -> None:
        self._count = count

    def tag_count(self) -> int:
        return self._count


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbose flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if not verbose else "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def load_registry(path: Path, tag_count: Optional[int], gap_warning_threshold: Optional[int] = None) -> TagRegistry:
    """Build a TagRegistry from an export file; exits with code 2 if the file is missing."""
    if not path.is_file():
        typer.echo(f"Error: Export file not found: {path}", err=True)
        raise typer.Exit(2)
    registry = TagRegistry(gap_warning_threshold=gap_warning_threshold)
    export = ExportFile(path)
    registry.refresh(export, _FixedCount(tag_count) if tag_count is not None else None)
    return registry


def tag_to_dict(tag: TagInfo) -> dict[str, Any]:
    return {
        "id": tag.id,
        "name": tag.name,
        "type": tag.type.name.lower(),
        "historical_logging_enabled": tag.historical_logging_enabled,
        "groups": sorted(group.value for group in tag.groups),
    }


def format_tag(tag: TagInfo) -> str:
    """One-line text rendering of a tag."""
    groups = ",".join(sorted(group.value for group in tag.groups)) or "-"
    logging_flag = "log" if tag.historical_logging_enabled else "-"
    return f"{tag.id:>6}  {tag.name:<32} {tag.type.name.lower():<8} {logging_flag:<4} {groups}"


def _fail(verbose: bool, code: int, message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    if verbose and code == 4:
        import traceback
        traceback.print_exc()
    raise typer.Exit(code)


# ============================================================================
# Commands
# ============================================================================

@app.command(name="list")
def list_tags(
    export: ExportArgument,
    group: Annotated[
        Optional[list[TagGroup]],
        typer.Option("--group", "-g", help="Only tags in this group (repeatable; any group matches)"),
    ] = None,
    tag_count: TagCountOption = None,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    List tags from an export, optionally filtered by group.

    Several --group options select tags belonging to any of them.
    """
    setup_logging(verbose)

    try:
        registry = load_registry(export, tag_count)
        tags = registry.list_filtered(group) if group else registry.list_all()
    except MalformedRecordError as e:
        _fail(verbose, 2, f"Malformed export record: {e}")
    except ExportStreamError as e:
        _fail(verbose, 3, f"Export read error: {e}")
    except typer.Exit:
        raise
    except Exception as e:
        _fail(verbose, 4, f"Unexpected error: {e}")

    if json_output:
        typer.echo(json.dumps([tag_to_dict(t) for t in tags], indent=2))
    else:
        for tag in tags:
            typer.echo(format_tag(tag))


@app.command()
def info(
    export: ExportArgument,
    tag_count: TagCountOption = None,
    gap_warning_threshold: GapThresholdOption = None,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Show tag count, id bounds, and the registry layout chosen for an export.
    """
    setup_logging(verbose)

    try:
        registry = load_registry(export, tag_count, gap_warning_threshold)
        snapshot = registry.snapshot()
    except MalformedRecordError as e:
        _fail(verbose, 2, f"Malformed export record: {e}")
    except ExportStreamError as e:
        _fail(verbose, 3, f"Export read error: {e}")
    except typer.Exit:
        raise
    except Exception as e:
        _fail(verbose, 4, f"Unexpected error: {e}")

    info_data = {
        "version": __version__,
        "tags": snapshot.count,
        "lowest_id": snapshot.lowest_id,
        "highest_id": snapshot.highest_id,
        "layout": "offset" if snapshot.offset_indexed else "compact",
        "slots": len(snapshot.entries),
        "gap_count": max(snapshot.gap_count, 0),
    }

    if json_output:
        typer.echo(json.dumps(info_data, indent=2))
    else:
        typer.echo(f"Tags:        {info_data['tags']}")
        typer.echo(f"Lowest id:   {info_data['lowest_id']}")
        typer.echo(f"Highest id:  {info_data['highest_id']}")
        typer.echo(f"Layout:      {info_data['layout']} ({info_data['slots']} slots)")
        typer.echo(f"Id gaps:     {info_data['gap_count']}")


@app.command()
def show(
    export: ExportArgument,
    tag_id: Annotated[int, typer.Argument(help="Tag id to look up")],
    tag_count: TagCountOption = None,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Show a single tag by id. Exits with code 1 if the id is not in the export.
    """
    setup_logging(verbose)

    try:
        registry = load_registry(export, tag_count)
        tag = registry.get_by_id(tag_id)
    except MalformedRecordError as e:
        _fail(verbose, 2, f"Malformed export record: {e}")
    except ExportStreamError as e:
        _fail(verbose, 3, f"Export read error: {e}")
    except typer.Exit:
        raise
    except Exception as e:
        _fail(verbose, 4, f"Unexpected error: {e}")

    if tag is None:
        typer.echo(f"Error: No tag with id {tag_id}", err=True)
        raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps(tag_to_dict(tag), indent=2))
    else:
        typer.echo(format_tag(tag))


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"pyewon-taginfo {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
) -> None:
    """pyewon-taginfo - Parse and query Ewon tag-list exports."""
    pass


if __name__ == "__main__":
    app()
