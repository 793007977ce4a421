"""CLI entry point for Hemingway."""

import json

import click
import yaml
from pathlib import Path
from typing import Any, List, Optional
from rich.console import Console
from rich.table import Table

from hemingway.config import CONFIG_FILENAME, load_config, render_config_template
from hemingway.models.config import HemingwayConfig
from hemingway.models.edit import EditContext, WriteOutcome
from hemingway.services.edit_session import EditRequest, EditSession, all_succeeded
from hemingway.services.exceptions import ConfigurationError
from hemingway.services.rewrite_engine import RewriteEngine
from hemingway.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)
console = Console()


def context_options(f):
    """Shared --tag/--class/--parent options describing the edited element."""
    f = click.option("--parent", "parent_tag", default="", help="Parent element tag name")(f)
    f = click.option("--class", "class_name", default="", help="Element class list")(f)
    f = click.option("--tag", "tag_name", default="", help="Element tag name (e.g. button)")(f)
    return f


def get_config(ctx: click.Context) -> HemingwayConfig:
    """
    Load configuration for the selected project root.

    Raises:
        click.ClickException: If the config file is invalid
    """
    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        try:
            obj["config"] = load_config(obj["root"], obj.get("config_path"))
        except ValueError as e:
            raise click.ClickException(str(e))
    return obj["config"]


def build_engine(config: HemingwayConfig) -> RewriteEngine:
    return RewriteEngine(config.root_path, protected_segments=config.protected_segments)


def load_edit_requests(path: Path) -> List[EditRequest]:
    """
    Parse a YAML batch file into edit requests.

    Accepts either a top-level list or a mapping with an ``edits`` list.
    Each item needs ``old`` and ``new``. Element hints are given either as
    ``tag``/``class``/``parent`` keys or as a ``context`` mapping in the
    overlay wire shape (``tagName``, ``className``, ``parentTag``).

    Raises:
        ValueError: If the file is malformed
    """
    data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("edits")
    if not isinstance(data, list) or not data:
        raise ValueError(f"{path} must contain a non-empty list of edits")

    requests = []
    for index, item in enumerate(data, 1):
        if not isinstance(item, dict) or not item.get("old") or not item.get("new"):
            raise ValueError(f"Edit #{index} needs non-empty 'old' and 'new' fields")
        if isinstance(item.get("context"), dict):
            context = EditContext.from_dict(item["context"])
        else:
            context = EditContext(
                tag_name=str(item.get("tag") or ""),
                class_name=str(item.get("class") or ""),
                parent_tag=str(item.get("parent") or ""),
            )
        requests.append(EditRequest(index, str(item["old"]), str(item["new"]), context))
    return requests


def _describe(outcome: WriteOutcome) -> str:
    if outcome.success:
        return f"[green]✓[/green] {outcome.file}:{outcome.line} ({outcome.match_count} match(es))"
    return f"[red]✗[/red] {outcome.error}"


@click.group()
@click.version_option(version="0.1.0", prog_name="hemingway")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Project root that source patterns are relative to",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to configuration file (default: <root>/{CONFIG_FILENAME})",
)
@click.pass_context
def cli(ctx: click.Context, root: Path, config_path: Optional[Path]):
    """Hemingway: write edited page copy back into its source files."""
    configure_logging()
    ctx.ensure_object(dict)
    ctx.obj["root"] = root
    ctx.obj["config_path"] = config_path


@cli.command()
@click.pass_context
def init(ctx: click.Context):
    """Create a hemingway.yaml scaffold in the project root."""
    target = ctx.obj.get("config_path") or ctx.obj["root"] / CONFIG_FILENAME
    if target.exists():
        console.print(f"[yellow]{target} already exists.[/yellow]")
        return

    target.write_text(render_config_template(), encoding="utf-8")
    logger.info("config_initialized", path=str(target))
    console.print(f"[bold blue]Hemingway initialized![/bold blue] Created [cyan]{target}[/cyan]")
    console.print("Edit source_patterns to match your project structure.")


@cli.command()
@click.argument("text")
@context_options
@click.pass_context
def locate(ctx: click.Context, text: str, tag_name: str, class_name: str, parent_tag: str):
    """
    Show every place TEXT could come from, best match first. Nothing is written.

    Examples:
        hemingway locate "Get Started" --tag button --class cta
    """
    config = get_config(ctx)
    engine = build_engine(config)
    context = EditContext(tag_name=tag_name, class_name=class_name, parent_tag=parent_tag)

    try:
        candidates = engine.locate(text, context, config.source_patterns, config.exclude_patterns)
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    if not candidates:
        console.print(f'[red]Text not found in source files:[/red] "{text[:80]}"')
        ctx.exit(1)

    table = Table(title=f"{len(candidates)} candidate(s)")
    table.add_column("#", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Location")
    table.add_column("Source text")
    for index, candidate in enumerate(candidates, 1):
        location = f"{candidate.file.relative_to(engine.project_root).as_posix()}:{candidate.line}"
        table.add_row(str(index), str(candidate.score), location, candidate.original_span)
    console.print(table)


def json_option(f):
    return click.option(
        "--json",
        "as_json",
        is_flag=True,
        help="Print outcomes as JSON in the overlay wire shape",
    )(f)


@cli.command()
@click.argument("old_text")
@click.argument("new_text")
@context_options
@json_option
@click.pass_context
def write(
    ctx: click.Context,
    old_text: str,
    new_text: str,
    tag_name: str,
    class_name: str,
    parent_tag: str,
    as_json: bool,
):
    """
    Replace OLD_TEXT with NEW_TEXT in the source file it most likely came from.

    Examples:
        hemingway write "Get Started" "Start free trial" --tag button --class cta
        hemingway write "Learn more" "Read the docs" --json
    """
    config = get_config(ctx)
    engine = build_engine(config)
    context = EditContext(tag_name=tag_name, class_name=class_name, parent_tag=parent_tag)

    outcome = engine.rewrite(
        old_text, new_text, context, config.source_patterns, config.exclude_patterns
    )
    if as_json:
        click.echo(json.dumps(outcome.to_dict()))
    else:
        console.print(_describe(outcome))
    if not outcome.success:
        ctx.exit(1)


@cli.command()
@click.argument("edits_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--atomic", is_flag=True, help="Undo the whole batch if any edit fails")
@json_option
@click.pass_context
def apply(ctx: click.Context, edits_file: Path, atomic: bool, as_json: bool):
    """
    Apply a batch of edits from a YAML file as one action.

    Edits are written one after another, in file order.

    \b
    Example file:
        edits:
          - old: Get Started
            new: Start free trial
            tag: button
            class: cta
          - old: Learn more
            new: Read the docs
            context: {tagName: a, parentTag: nav}
    """
    config = get_config(ctx)

    try:
        requests = load_edit_requests(edits_file)
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(str(e))

    session = EditSession(build_engine(config), config.source_patterns, config.exclude_patterns)
    entries = session.apply_batch(requests)
    succeeded = all_succeeded(entries)

    snapshot = None
    if not succeeded and atomic:
        snapshot = session.undo()
        logger.info("batch_rolled_back", fully_reverted=snapshot.fully_reverted)

    if as_json:
        report = {
            "edits": [
                {"element": entry.element, **entry.write_outcome.to_dict()}
                for entry in entries
            ],
            "rolledBack": snapshot is not None,
        }
        if snapshot is not None:
            report["fullyReverted"] = snapshot.fully_reverted
        click.echo(json.dumps(report))
    else:
        for entry in entries:
            console.print(f"#{entry.element} {_describe(entry.write_outcome)}")

        if succeeded:
            console.print(f"[bold green]Applied {len(entries)} edit(s).[/bold green]")
        elif snapshot is not None and snapshot.fully_reverted:
            console.print("[yellow]Batch rolled back: no files changed.[/yellow]")
        elif snapshot is not None:
            failed = ", ".join(f"#{entry.element}" for entry in snapshot.failed_reversals)
            console.print(f"[red]Batch rolled back, but could not restore source for {failed}.[/red]")

    if not succeeded:
        ctx.exit(1)


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()
