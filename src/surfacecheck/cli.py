"""Command-line interface for surfacecheck."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from surfacecheck import __version__
from surfacecheck.utils.logging import configure_logging, get_logger, level_for

if TYPE_CHECKING:
    from surfacecheck.config import SurfacecheckConfig
    from surfacecheck.core.models import ApiSurface, BreakingChangeReport, ChangeSeverity


app = typer.Typer(
    name="surfacecheck",
    help="Detect breaking API changes between two versions of a TypeScript source file.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    name="config",
    help="Configuration management.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

console = Console()
stderr_console = Console(stderr=True)
logger = get_logger(__name__)

OUTPUT_FORMATS = ("text", "json", "markdown")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"surfacecheck version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """surfacecheck - know which API changes break your callers."""
    configure_logging(level=level_for(verbose, quiet))

    ctx.obj = {"config_path": config}
    if config:
        logger.debug("Using configuration file: %s", config)


def _handle_cli_error(error: Exception) -> None:
    """Handle exceptions and display user-friendly error messages.

    Args:
        error: The exception to handle.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    from surfacecheck.errors import SurfacecheckError

    if isinstance(error, SurfacecheckError):
        console.print(f"[bold red]Error:[/bold red] {escape(error.message)}")
        if error.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(error.hint)}")
    else:
        console.print(f"[red]Error: {escape(str(error))}[/red]")
        logger.exception("Command failed")

    raise typer.Exit(code=1)


def _read_source(path: Path) -> str:
    """Read a source file as UTF-8 text."""
    from surfacecheck.errors import AnalysisError

    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise AnalysisError(
            f"Cannot decode {path} as UTF-8: {e.reason}",
            hint="Only text source files can be analyzed.",
        ) from e


def _load_config(ctx: typer.Context) -> SurfacecheckConfig:
    from surfacecheck.config import load_config

    config_path = (ctx.obj or {}).get("config_path")
    return load_config(config_path)


def _severity_color(severity: ChangeSeverity) -> str:
    """Get color for severity level."""
    from surfacecheck.core.models import ChangeSeverity

    return {
        ChangeSeverity.CRITICAL: "red bold",
        ChangeSeverity.MAJOR: "yellow",
        ChangeSeverity.MINOR: "green",
    }.get(severity, "white")


def _bump_color(report: BreakingChangeReport) -> str:
    """Get color for the suggested version bump."""
    from surfacecheck.core.models import VersionBump

    return {
        VersionBump.MAJOR: "red bold",
        VersionBump.MINOR: "yellow",
        VersionBump.PATCH: "green",
        VersionBump.NONE: "dim",
    }.get(report.suggested_version_bump, "white")


def _print_report_table(report: BreakingChangeReport) -> None:
    """Print a report as rich tables."""
    from surfacecheck.analysis.report_formatter import ANALYSIS_NOTE

    if report.breaking_changes:
        table = Table(title="Breaking Changes")
        table.add_column("Severity", style="bold")
        table.add_column("Type", style="cyan")
        table.add_column("Name", style="magenta")
        table.add_column("Line", justify="right")
        table.add_column("Description")

        for change in report.breaking_changes:
            color = _severity_color(change.severity)
            table.add_row(
                f"[{color}]{change.severity.value.upper()}[/{color}]",
                change.type.value,
                escape(change.name),
                str(change.line_number) if change.line_number else "-",
                escape(change.description),
            )
        console.print(table)

        hints = [c for c in report.breaking_changes if c.migration_hint]
        if hints:
            console.print("\n[bold]Migration hints:[/bold]")
            for change in hints:
                console.print(f"  - {escape(change.name)}: {escape(change.migration_hint)}")
    else:
        console.print("[green]No breaking changes detected.[/green]")

    if report.non_breaking_changes:
        table = Table(title="Non-Breaking Changes")
        table.add_column("Type", style="cyan")
        table.add_column("Name", style="magenta")
        table.add_column("Description")
        for change in report.non_breaking_changes:
            table.add_row(change.type.value, escape(change.name), escape(change.description))
        console.print(table)

    if report.affected_documentation:
        console.print("\n[bold]Affected documentation:[/bold]")
        for path in report.affected_documentation:
            console.print(f"  - {escape(path)}")

    if report.migration_guide:
        console.print("\n[bold]Migration guide:[/bold]")
        console.print(escape(report.migration_guide))

    color = _bump_color(report)
    console.print(
        f"\nSuggested version bump: [{color}]{report.suggested_version_bump.value.upper()}[/{color}]"
    )
    console.print(f"[dim]Note: {ANALYSIS_NOTE}[/dim]")


@app.command()
def analyze(
    ctx: typer.Context,
    old: Annotated[
        Path,
        typer.Argument(
            help="Previous version of the source file.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    new: Annotated[
        Path,
        typer.Argument(
            help="Current version of the source file.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    path: Annotated[
        str | None,
        typer.Option(
            "--path",
            "-p",
            help="File path recorded in the report (defaults to NEW).",
        ),
    ] = None,
    docs: Annotated[
        list[Path] | None,
        typer.Option(
            "--docs",
            "-d",
            help="Documentation file or directory to check for affected pages. Repeatable.",
        ),
    ] = None,
    ai: Annotated[
        str | None,
        typer.Option(
            "--ai",
            help="AI provider for behavioral change analysis (claude, anthropic, none).",
        ),
    ] = None,
    pr_title: Annotated[
        str | None,
        typer.Option(
            "--pr-title",
            help="Pull request title passed to the AI provider.",
        ),
    ] = None,
    pr_body: Annotated[
        str | None,
        typer.Option(
            "--pr-body",
            help="Pull request description passed to the AI provider.",
        ),
    ] = None,
    format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format (text, json, markdown).",
        ),
    ] = "text",
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write report to file (JSON for text format).",
        ),
    ] = None,
    fail_on_breaking: Annotated[
        bool,
        typer.Option(
            "--fail-on-breaking",
            help="Exit with code 1 when breaking changes are found.",
        ),
    ] = False,
) -> None:
    """Compare two versions of a source file for breaking API changes."""
    from surfacecheck.analysis.ai_reviewer import AIProvider, get_completion_client
    from surfacecheck.analysis.doc_impact import load_documents
    from surfacecheck.analysis.report import (
        analyze_breaking_changes,
        analyze_breaking_changes_with_ai,
    )
    from surfacecheck.analysis.report_formatter import format_report_markdown
    from surfacecheck.core.models import AnalysisContext
    from surfacecheck.errors import MissingTokenError

    if format not in OUTPUT_FORMATS:
        console.print(f"[bold red]Error:[/bold red] Unknown format: {escape(format)}")
        console.print(f"Use one of: {', '.join(OUTPUT_FORMATS)}")
        raise typer.Exit(code=1)

    # Keep stdout clean for machine-readable formats
    status_console = stderr_console if format != "text" else console

    try:
        config = _load_config(ctx)
        file_path = path or new.as_posix()

        old_code = _read_source(old)
        new_code = _read_source(new)

        doc_paths = docs or [Path(p) for p in config.docs.paths]
        corpus = None
        if doc_paths:
            corpus = load_documents(
                doc_paths, config.docs.extensions, config.docs.exclude_patterns
            )
            status_console.print(f"Loaded {len(corpus)} documentation files")

        provider_name = ai or config.analysis.ai_provider
        try:
            provider = AIProvider(provider_name.lower())
        except ValueError:
            status_console.print(
                f"[yellow]Unknown AI provider: {escape(provider_name)}, using none[/yellow]"
            )
            provider = AIProvider.NONE

        status_console.print(f"Analyzing {escape(file_path)}...")

        if provider == AIProvider.NONE:
            report = analyze_breaking_changes(old_code, new_code, file_path, docs=corpus)
        else:
            if provider == AIProvider.ANTHROPIC and not config.analysis.api_key:
                raise MissingTokenError("ANTHROPIC_API_KEY")

            client = get_completion_client(
                provider,
                model=config.analysis.model,
                api_key=config.analysis.api_key,
                max_tokens=config.analysis.max_tokens,
            )
            context = AnalysisContext(pr_title=pr_title, pr_body=pr_body)
            report = asyncio.run(
                analyze_breaking_changes_with_ai(
                    old_code,
                    new_code,
                    file_path,
                    context=context,
                    client=client,
                    docs=corpus,
                    timeout=config.analysis.timeout_seconds,
                    max_code_chars=config.analysis.max_code_chars,
                )
            )

        report_json = report.model_dump_json(by_alias=True, indent=2)

        if format == "json":
            rendered = report_json
        elif format == "markdown":
            rendered = format_report_markdown(report)
        else:
            rendered = None

        if output:
            output.write_text(rendered if rendered is not None else report_json)
            status_console.print(f"Report written to: {output}")
        elif rendered is not None:
            # Print directly for clean piping
            print(rendered)

        if format == "text":
            _print_report_table(report)

        if fail_on_breaking and report.has_breaking_changes:
            status_console.print(
                f"\n[red]{len(report.breaking_changes)} breaking change(s) found[/red]"
            )
            raise typer.Exit(code=1)

    except typer.Exit:
        raise
    except Exception as e:
        _handle_cli_error(e)


def _surface_to_table(surface: ApiSurface) -> Table:
    """Build a table listing every declaration in a surface."""
    from surfacecheck.analysis.differ import format_function_signature

    table = Table(title=f"API Surface: {escape(surface.file_path)}")
    table.add_column("Kind", style="cyan")
    table.add_column("Name", style="magenta")
    table.add_column("Line", justify="right")
    table.add_column("Details")

    for func in surface.functions:
        table.add_row(
            "function", escape(func.name), str(func.line_number),
            escape(format_function_signature(func)),
        )
    for iface in surface.interfaces:
        props = ", ".join(f"{p.name}{'?' if p.optional else ''}: {p.type}" for p in iface.properties)
        details = f"{{ {props} }}" if props else "{}"
        if iface.extends:
            details = f"extends {', '.join(iface.extends)} {details}"
        table.add_row("interface", escape(iface.name), str(iface.line_number), escape(details))
    for alias in surface.types:
        table.add_row("type", escape(alias.name), str(alias.line_number), escape(alias.definition))
    for name in surface.exports:
        table.add_row("export", escape(name), "-", "")

    return table


@app.command()
def surface(
    file: Annotated[
        Path,
        typer.Argument(
            help="Source file to extract the exported API from.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    as_json: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the surface as JSON.",
        ),
    ] = False,
) -> None:
    """Show the exported API surface of a source file."""
    from surfacecheck.analysis.extractor import parse_api_surface

    try:
        api = parse_api_surface(_read_source(file), file.as_posix())
    except Exception as e:
        _handle_cli_error(e)

    if as_json:
        print(api.model_dump_json(by_alias=True, indent=2))
        return

    console.print(_surface_to_table(api))
    console.print(
        f"\n{len(api.functions)} functions, {len(api.interfaces)} interfaces, "
        f"{len(api.types)} types, {len(api.exports)} re-exports"
    )


@config_app.command("init")
def config_init(
    path: Annotated[
        Path,
        typer.Argument(
            help="Directory to create configuration file in.",
        ),
    ] = Path(),
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing configuration file.",
        ),
    ] = False,
) -> None:
    """Initialize a new configuration file."""
    from surfacecheck.config import generate_example_config

    config_path = path / ".surfacecheck.yml"

    if config_path.exists() and not force:
        console.print(f"[yellow]Configuration file already exists: {config_path}[/yellow]")
        console.print("Use --force to overwrite.")
        raise typer.Exit(code=1)

    config_path.write_text(generate_example_config())
    console.print(f"Created configuration file: {config_path}")


@config_app.command("validate")
def config_validate(
    config: Annotated[
        Path,
        typer.Argument(
            help="Path to configuration file to validate.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
) -> None:
    """Validate a configuration file."""
    from pydantic import ValidationError

    from surfacecheck.config import SurfacecheckConfig, read_config_data
    from surfacecheck.errors import ConfigurationError

    console.print(f"Validating configuration file: {config}...")

    try:
        data = read_config_data(config)
    except ConfigurationError as e:
        _handle_cli_error(e)

    warnings = []
    if "version" not in data:
        warnings.append("Missing 'version' field")
    elif data["version"] != 1:
        warnings.append(f"Unknown version: {data['version']}")

    known = set(SurfacecheckConfig.model_fields)
    for key in data:
        if key not in known:
            warnings.append(f"Unknown section: {key}")

    try:
        SurfacecheckConfig(**data)
    except ValidationError as e:
        console.print("[red]Validation failed:[/red]")
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            console.print(f"  [red]ERROR:[/red] {location}: {escape(error['msg'])}")
        raise typer.Exit(code=1)

    if warnings:
        console.print("[yellow]Warnings:[/yellow]")
        for warning in warnings:
            console.print(f"  [yellow]WARNING:[/yellow] {warning}")

    console.print("[green]Configuration is valid.[/green]")


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration."""
    from surfacecheck.config import find_config_file

    config_path = (ctx.obj or {}).get("config_path") or find_config_file()

    try:
        config = _load_config(ctx)
    except Exception as e:
        _handle_cli_error(e)

    if config_path:
        console.print(f"Configuration file: {config_path}\n")
    else:
        console.print("[yellow]No configuration file found, showing defaults.[/yellow]")
        console.print("Run 'surfacecheck config init' to create one.\n")

    data = config.model_dump(mode="json")
    if data["analysis"].get("api_key"):
        data["analysis"]["api_key"] = "********"

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    def flatten_dict(d: dict, prefix: str = "") -> list:
        items = []
        for key, value in d.items():
            full_key = f"{prefix}.{key}" if prefix else key
            if isinstance(value, dict):
                items.extend(flatten_dict(value, full_key))
            elif isinstance(value, list):
                items.append((full_key, ", ".join(str(v) for v in value) or "(empty)"))
            else:
                items.append((full_key, str(value)))
        return items

    for key, value in flatten_dict(data):
        table.add_row(key, escape(value))

    console.print(table)


if __name__ == "__main__":
    app()
