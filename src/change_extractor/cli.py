"""Command line interface for Change Extractor."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, NoReturn, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from .config import Config, ConfigManager
from .errors import ChangeExtractorError, NoTargetsMatched
from .services.catalog import create_catalog_probe
from .services.extraction_planner import ExtractionPlanner, PlanResult
from .services.git_backend import GitHistoryBackend
from .services.history_resolver import HistoryResolver
from .services.name_validator import NameValidator
from .utils.exception_logger import ExceptionLogger
from . import __version__

logger = logging.getLogger(__name__)

console = Console()


def _load_config(ctx: click.Context, repo: Optional[str] = None) -> Config:
    """Load configuration, applying a --repo override."""
    config_manager: ConfigManager = ctx.obj["config_manager"]
    try:
        config = config_manager.get_config()
    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)

    if repo:
        config = config.model_copy(update={"repo_dir": Path(repo).resolve()})
    return config


def _create_backend(config: Config) -> GitHistoryBackend:
    backend = GitHistoryBackend(config.repo_dir, config.git)
    if not backend.is_git_available():
        console.print(f"❌ Not a git repository: {config.repo_dir}", style="red")
        sys.exit(1)
    return backend


def _fail(ctx: click.Context, error: Exception, context: Dict[str, Any]) -> NoReturn:
    """Report a failure, record it in the exception log and exit."""
    console.print(f"❌ {error}", style="red")
    exception_logger = ExceptionLogger.get_instance()
    if exception_logger is not None:
        exception_logger.log_exception(error, context=context)
        if ctx.obj.get("verbose"):
            console.print(f"Details logged to {exception_logger.log_file_path}", style="dim")
    sys.exit(1)


def _result_payload(result: PlanResult) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"status": result.status.value}
    if result.commit_range is not None:
        payload["range"] = {
            "newest": result.commit_range.newest.id,
            "oldest": result.commit_range.oldest.id,
            "commits": list(result.commit_range.commit_ids),
        }
    payload.update(result.plan.to_dict())
    return payload


def _print_plan(result: PlanResult) -> None:
    commit_range = result.commit_range
    if commit_range is not None:
        console.print(
            f"📜 Range: {commit_range.newest.id[:12]} ({commit_range.newest.date}) → "
            f"{commit_range.oldest.id[:12]} ({commit_range.oldest.date}), "
            f"{len(commit_range.ordered)} commit(s)"
        )

    plan = result.plan
    if plan.groups:
        table = Table(title="Datasets")
        table.add_column("Dataset", style="cyan")
        table.add_column("Members")
        for group in plan.groups:
            table.add_row(group.name, ", ".join(group.members) or "-")
        console.print(table)

    if plan.files:
        table = Table(title="Files")
        table.add_column("Path", style="green")
        table.add_column("Binary", justify="center")
        binary = set(plan.binary)
        for path in plan.files:
            table.add_row(path, "yes" if path in binary else "")
        console.print(table)

    if plan.is_empty:
        console.print("ℹ️  No datasets or files changed in this range", style="yellow")


@click.group(invoke_without_command=True)
@click.option("--config", "-c", type=click.Path(exists=False), help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.version_option(version=__version__, prog_name="change-extractor")
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool):
    """Plan dataset and file extraction from git commits and tags.

    \b
    EXAMPLES:
      change-extractor init --repo /u/project/repo
      change-extractor plan v1.4 v1.5
      change-extractor plan 3f2a9c1 --format json --output plan.json
      change-extractor range v1.4 v1.5
      change-extractor validate PROJ.SRC.COBOL

    \b
    CONFIGURATION:
      Config file: .change-extractor/config.json (searched upwards from the
      current directory)
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )

    if config:
        config_manager = ConfigManager(Path(config))
    else:
        config_manager = ConfigManager.create_with_backtrack()
    ctx.obj["config_manager"] = config_manager

    exception_logger = ExceptionLogger.initialize(config_manager.project_root)
    exception_logger.install_thread_exception_hook()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.option("--repo", type=click.Path(exists=True, file_okay=False), help="Git repository")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing configuration")
@click.pass_context
def init(ctx, repo: Optional[str], force: bool):
    """Write a default configuration file."""
    config_manager: ConfigManager = ctx.obj["config_manager"]
    if config_manager.config_path.exists() and not force:
        console.print(
            f"⚠️  Configuration already exists at {config_manager.config_path} "
            "(use --force to overwrite)",
            style="yellow",
        )
        sys.exit(1)

    repo_dir = Path(repo).resolve() if repo else Path(".")
    config_manager.create_default_config(repo_dir)
    console.print(f"✅ Configuration written to {config_manager.config_path}", style="green")


@cli.command()
@click.argument("targets", nargs=-1, required=True)
@click.option("--repo", type=click.Path(exists=True, file_okay=False), help="Git repository")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the plan as JSON to a file")
@click.option("--strict", is_flag=True, help="Exit with an error when no target matches")
@click.pass_context
def plan(
    ctx,
    targets: Tuple[str, ...],
    repo: Optional[str],
    output_format: str,
    output: Optional[str],
    strict: bool,
):
    """Build the extraction plan for commits or tags TARGETS."""
    config = _load_config(ctx, repo)
    backend = _create_backend(config)

    try:
        validator = NameValidator(create_catalog_probe(config.catalog))
    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)

    planner = ExtractionPlanner(validator)
    try:
        result = planner.plan_from_backend(backend, list(targets), strict=strict)
    except NoTargetsMatched as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)
    except ChangeExtractorError as e:
        _fail(ctx, e, {"command": "plan", "targets": list(targets)})

    payload = _result_payload(result)
    if output:
        Path(output).write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

    if result.no_targets_matched:
        if output_format == "json":
            click.echo(json.dumps(payload, indent=2))
        else:
            console.print(
                "ℹ️  None of the requested targets were found - nothing to do",
                style="yellow",
            )
        return

    if output_format == "json":
        click.echo(json.dumps(payload, indent=2))
    else:
        _print_plan(result)
        if output:
            console.print(f"✅ Plan saved to: {output}", style="green")


@cli.command(name="range")
@click.argument("targets", nargs=-1, required=True)
@click.option("--repo", type=click.Path(exists=True, file_okay=False), help="Git repository")
@click.pass_context
def range_command(ctx, targets: Tuple[str, ...], repo: Optional[str]):
    """Show the commit range spanning TARGETS."""
    config = _load_config(ctx, repo)
    backend = _create_backend(config)

    try:
        commit_ids = backend.resolve_targets(list(targets))
        log = backend.get_log()
    except ChangeExtractorError as e:
        _fail(ctx, e, {"command": "range", "targets": list(targets)})

    commit_range = HistoryResolver().resolve(log, commit_ids)
    if commit_range is None:
        console.print(
            "ℹ️  None of the requested targets were found - nothing to do",
            style="yellow",
        )
        return

    requested = set(commit_ids)
    table = Table(title=f"Commit range ({len(commit_range.ordered)} commits)")
    table.add_column("Commit", style="cyan")
    table.add_column("Date")
    table.add_column("Requested", justify="center")
    for entry in commit_range.ordered:
        table.add_row(entry.id, entry.date, "✓" if entry.id in requested else "")
    console.print(table)


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def validate(ctx, names: Tuple[str, ...]):
    """Check whether NAMES are usable dataset names."""
    config = _load_config(ctx)
    try:
        validator = NameValidator(create_catalog_probe(config.catalog))
    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)

    table = Table()
    table.add_column("Name")
    table.add_column("Status")
    all_valid = True
    for name in names:
        if validator.is_valid(name):
            table.add_row(name, "[green]VALID[/green]")
        else:
            all_valid = False
            table.add_row(name, "[red]INVALID[/red]")
    console.print(table)

    if not all_valid:
        sys.exit(1)


def main():
    """Entry point for the change-extractor console script."""
    cli(obj={})


if __name__ == "__main__":
    main()
