from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import click
import typer
from rich.console import Console

from stylepipe import __version__
from stylepipe.config import PRESETS, ConfigError
from stylepipe.engine.autofix import unified_diff
from stylepipe.files import CheckedFile, FileReadError, discover_files, iter_source_files
from stylepipe.logging_utils import configure_logging
from stylepipe.pipeline import pipe
from stylepipe.processor import check as check_stage
from stylepipe.reporters.dispatch import ReporterConfigError, StyleCheckFailed, reporter
from stylepipe.rules.plugins import PluginLoadError
from stylepipe.utils import normalize_key

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="stylepipe: streaming code-style checks for build pipelines.",
)
console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

# The command always appends its own gate stage.
_GATE_REPORTERS = frozenset({"fail", "fail_immediately"})


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logs (printed to stderr)."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Reduce non-essential output."),
    ] = False,
) -> None:
    """stylepipe CLI."""

    if verbose and quiet:
        raise typer.BadParameter("Choose at most one: --verbose or --quiet.")
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"verbose": verbose, "quiet": quiet}


def _cli_settings() -> dict[str, bool]:
    ctx = click.get_current_context(silent=True)
    if ctx is None or not isinstance(ctx.obj, dict):
        return {"verbose": False, "quiet": False}
    return {"verbose": bool(ctx.obj.get("verbose", False)), "quiet": bool(ctx.obj.get("quiet", False))}


@app.command()
def check(
    paths: Annotated[
        list[Path] | None,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=True,
            resolve_path=True,
            help="Files or directories to check (default: current directory).",
        ),
    ] = None,
    preset: Annotated[
        str | None,
        typer.Option("--preset", help=f"Rule preset: {', '.join(sorted(PRESETS))}."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="Configuration file (JSON rc file, TOML, or pyproject.toml)."),
    ] = None,
    esnext: Annotated[
        bool,
        typer.Option("--esnext", help="Allow ES module syntax (import/export)."),
    ] = False,
    fix: Annotated[
        bool,
        typer.Option("--fix", help="Apply auto-fixes and write the files back."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="With --fix: print a unified diff instead of writing files."),
    ] = False,
    reporter_name: Annotated[
        str,
        typer.Option("--reporter", help="Reporter: console, inline, json, github.", show_default=True),
    ] = "console",
    fail_fast: Annotated[
        bool,
        typer.Option("--fail-fast", help="Stop at the first file with violations."),
    ] = False,
) -> None:
    """
    Check JavaScript files and exit non-zero when any file has violations.
    """

    settings = _cli_settings()
    if dry_run and not fix:
        raise typer.BadParameter("--dry-run only applies together with --fix.")
    if normalize_key(reporter_name) in _GATE_REPORTERS:
        raise typer.BadParameter("--reporter takes a rendering reporter; use --fail-fast to stop early.")

    options: dict[str, Any] = {}
    if preset is not None:
        options["preset"] = preset
    if config_path is not None:
        options["config_path"] = config_path
    if esnext:
        options["esnext"] = True
    if fix:
        options["fix"] = True

    out = Console(quiet=True) if settings["quiet"] and reporter_name == "console" else console
    try:
        processor = check_stage(options)
        report = reporter(reporter_name, console=out)
    except (ConfigError, PluginLoadError, ReporterConfigError) as exc:
        err_console.print(f"Configuration error: {exc}", markup=False, soft_wrap=True)
        raise typer.Exit(code=2) from exc

    files = discover_files(paths or [Path(".").resolve()])
    logger.debug("discovered %d candidate file(s)", len(files))

    gate = reporter("fail_immediately" if fail_fast else "fail")
    last: CheckedFile | None = None
    stream = iter_source_files(files, base=Path.cwd())
    try:
        for checked in pipe(stream, processor, report, gate):
            last = checked
            if fix:
                _write_back(checked, dry_run=dry_run)
    except FileReadError as exc:
        err_console.print(str(exc), markup=False, soft_wrap=True)
        raise typer.Exit(code=2) from exc
    except StyleCheckFailed as exc:
        if fail_fast and last is not None:
            # The report stage never reached the end of the stream.
            for _ in reporter(reporter_name, console=out)([last]):
                pass
        logger.info("%s", exc)
        raise typer.Exit(code=1) from exc

    logger.info("checked %d file(s), no style errors", len(files))


def _write_back(checked: CheckedFile, *, dry_run: bool) -> None:
    contents = checked.file.contents
    if contents is None:
        return
    path = checked.path
    before = path.read_bytes()
    if before == contents:
        return
    if dry_run:
        diff = unified_diff(
            before.decode("utf-8"),
            contents.decode("utf-8"),
            path=checked.file.relative,
        )
        typer.echo(diff, nl=False)
        return
    path.write_bytes(contents)
    logger.info("fixed %s", checked.file.relative)


@app.command()
def rules(
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
) -> None:
    """
    List built-in rules and the presets that enable them.
    """

    from rich.table import Table

    from stylepipe.rules.registry import builtin_rules

    rows = []
    for rule in builtin_rules():
        meta = rule.meta
        rows.append(
            {
                "name": meta.name,
                "title": meta.title,
                "description": meta.description,
                "fixable": meta.fixable,
                "presets": sorted(name for name, table in PRESETS.items() if meta.name in table),
            }
        )

    normalized = output_format.strip().lower()
    if normalized == "json":
        typer.echo(json.dumps(rows, indent=2, sort_keys=True))
        return
    if normalized != "terminal":
        raise typer.BadParameter("Unsupported format. Use: terminal, json.")

    table = Table(title="stylepipe rules")
    table.add_column("Rule", style="bold")
    table.add_column("Fixable", justify="center")
    table.add_column("Presets")
    table.add_column("Description")
    for row in rows:
        table.add_row(
            str(row["name"]),
            "yes" if row["fixable"] else "no",
            ", ".join(row["presets"]) or "-",
            str(row["description"]),
        )
    console.print(table)
