"""CLI entry point for codekontext."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

import typer
from rich import print as rprint
from rich.markup import escape

from codekontext.activity import log_tool_call, read_activity_log
from codekontext.config import Config
from codekontext.context.builder import build_context, context_result_summary
from codekontext.context.scoring import extract_file_references
from codekontext.diff.engine import compute_diff, format_diff_summary, get_incremental_update
from codekontext.diff.schema_changes import detect_schema_changes, get_affected_files
from codekontext.loader import dump_json, load_file_set, load_messages, load_schema
from codekontext.schema.defaults import PLATFORMS
from codekontext.schema.versioning import (
    create_versioned_schema,
    export_schema,
    get_version_diff,
    get_version_info,
    migrate as migrate_schema,
    validate_compatibility,
)

app = typer.Typer(help="Pack project context, diff file sets, and migrate app schemas for AI code generation.")

INPUT_ERRORS = (FileNotFoundError, json.JSONDecodeError, ValueError, KeyError)


@app.callback()
def main() -> None:
    config = Config.load()
    logging.basicConfig(level=getattr(logging, config.log_level, logging.WARNING))


def _fail(message: str) -> None:
    rprint(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


def _record(command: str, arguments: dict, output: str, started: float, error: str | None = None) -> None:
    duration_ms = int((time.time() - started) * 1000)
    log_tool_call(command, arguments, output, error, duration_ms)


def _write_or_print(data: dict, output: str | None) -> str:
    text = json.dumps(data, indent=2, default=str)
    if output:
        path = dump_json(data, Path(output))
        rprint(f"[green]Wrote {path}[/green]")
    else:
        typer.echo(text)
    return text


@app.command()
def context(
    project: str = typer.Argument(help="Project directory or JSON file of {path, content, language}"),
    messages: str = typer.Option(None, "--messages", "-m", help="JSON file with chat messages"),
    active: str = typer.Option(None, "--active", "-a", help="Path of the file open in the editor"),
    max_tokens: int = typer.Option(None, help="Total context budget in tokens"),
    reserve: int = typer.Option(None, help="Tokens reserved for the model's response"),
    max_files: int = typer.Option(None, help="Maximum files considered for the prompt"),
    no_contents: bool = typer.Option(False, "--no-contents", help="List files without their contents"),
    format: str = typer.Option("text", "--format", "-f", help="Output format: text, json, or summary"),
) -> None:
    """Build a token-bounded system prompt from a project's files."""
    started = time.time()
    config = Config.load()
    if max_tokens is not None:
        config.max_context_tokens = max_tokens
    if reserve is not None:
        config.reserve_tokens = reserve
    if max_files is not None:
        config.max_files = max_files
    if no_contents:
        config.include_contents = False

    issues = config.validate()
    if issues:
        for issue in issues:
            rprint(f"[red]Config error: {escape(issue)}[/red]")
        raise typer.Exit(1)

    try:
        files = load_file_set(Path(project))
        history = load_messages(Path(messages)) if messages else []
    except INPUT_ERRORS as e:
        _fail(f"Could not load input: {e}")

    result = build_context(files, history, active, config.context_config())

    if format == "json":
        output = result.to_json()
        typer.echo(output)
    elif format == "summary":
        output = json.dumps(context_result_summary(result), indent=2)
        typer.echo(output)
    else:
        output = result.system_prompt
        typer.echo(output)
        references = extract_file_references(history)
        if references:
            rprint(f"\n[bold]Referenced in chat:[/bold] {escape(', '.join(references))}")
        rprint(
            f"\n[bold]{len(result.files)}[/bold] of {len(files)} files, "
            f"[bold]{result.total_tokens}[/bold] tokens"
            + (" [yellow](truncated)[/yellow]" if result.truncated else ""),
        )

    _record("context", {"project": project, "active": active, "format": format}, output, started)


@app.command()
def diff(
    old: str = typer.Argument(help="Old project directory or JSON file set"),
    new: str = typer.Argument(help="New project directory or JSON file set"),
    format: str = typer.Option("text", "--format", "-f", help="Output format: text or json"),
) -> None:
    """Compare two file sets."""
    started = time.time()
    try:
        report = compute_diff(load_file_set(Path(old)), load_file_set(Path(new)))
    except INPUT_ERRORS as e:
        _fail(f"Could not load input: {e}")

    if format == "json":
        output = report.to_json()
        typer.echo(output)
    else:
        output = format_diff_summary(report)
        rprint(escape(output))

    _record("diff", {"old": old, "new": new, "format": format}, output, started)


@app.command()
def plan(
    old: str = typer.Argument(help="Old project directory or JSON file set"),
    new: str = typer.Argument(help="New project directory or JSON file set"),
    output: str = typer.Option(None, "--output", "-o", help="Write the plan to this file"),
) -> None:
    """Show the incremental update (writes and deletes) from OLD to NEW."""
    started = time.time()
    try:
        update = get_incremental_update(load_file_set(Path(old)), load_file_set(Path(new)))
    except INPUT_ERRORS as e:
        _fail(f"Could not load input: {e}")

    text = _write_or_print(update.to_dict(), output)
    _record("plan", {"old": old, "new": new}, text, started)


@app.command("schema-diff")
def schema_diff(
    old: str = typer.Argument(help="Old schema JSON"),
    new: str = typer.Argument(help="New schema JSON"),
) -> None:
    """List changed schema sections and the files they affect."""
    started = time.time()
    try:
        changed = detect_schema_changes(load_schema(Path(old)), load_schema(Path(new)))
    except INPUT_ERRORS as e:
        _fail(f"Could not load schema: {e}")

    result = {"changedFields": changed, "affectedFiles": get_affected_files(changed)}
    text = json.dumps(result, indent=2)
    if not changed:
        rprint("[green]Schemas are identical.[/green]")
    else:
        rprint("[bold]Changed fields:[/bold]")
        for name in changed:
            rprint(f"  {name}")
        rprint("[bold]Affected files:[/bold]")
        for pattern in result["affectedFiles"]:
            rprint(f"  {escape(pattern)}")

    _record("schema-diff", {"old": old, "new": new}, text, started)


@app.command("schema-info")
def schema_info(
    schema_path: str = typer.Argument(help="Schema JSON"),
) -> None:
    """Show version information and pending migrations for a schema."""
    started = time.time()
    try:
        schema = load_schema(Path(schema_path))
    except INPUT_ERRORS as e:
        _fail(f"Could not load schema: {e}")

    info = get_version_info(schema)
    rprint(f"[bold]Schema version:[/bold] {info.current} (minimum {info.minimum})")
    rprint(f"  Supported:       {'yes' if info.is_valid else '[red]no[/red]'}")
    rprint(f"  Needs migration: {'yes' if info.needs_migration else 'no'}")
    if info.migration_path:
        rprint(f"  Migration path:  {' → '.join([info.current, *info.migration_path])}")
        for entry in get_version_diff(info.current, info.migration_path[-1]).changes:
            rprint(f"\n  [bold]{entry.version}[/bold]")
            for change in entry.changes:
                rprint(f"    - {change}")

    _record("schema-info", {"schema": schema_path}, json.dumps(info.to_dict()), started)


@app.command()
def migrate(
    schema_path: str = typer.Argument(help="Schema JSON"),
    output: str = typer.Option(None, "--output", "-o", help="Write the migrated schema here"),
) -> None:
    """Migrate a schema to the current version."""
    started = time.time()
    try:
        schema = load_schema(Path(schema_path))
    except INPUT_ERRORS as e:
        _fail(f"Could not load schema: {e}")

    result = migrate_schema(schema)
    for warning in result.warnings:
        rprint(f"[yellow]Warning: {escape(warning)}[/yellow]")
    if not result.success:
        _record("migrate", {"schema": schema_path}, result.to_json(), started, "; ".join(result.warnings))
        raise typer.Exit(1)

    rprint(f"[bold]{result.from_version} → {result.to_version}[/bold]")
    for change in result.changes:
        rprint(f"  {escape(change)}")

    if output:
        rprint(f"[green]Wrote {dump_json(result.schema, Path(output))}[/green]")

    _record("migrate", {"schema": schema_path, "output": output}, result.to_json(), started)


@app.command()
def validate(
    schema_path: str = typer.Argument(help="Schema JSON"),
) -> None:
    """Check a schema for required sections and a well-formed version."""
    started = time.time()
    try:
        schema = load_schema(Path(schema_path))
    except INPUT_ERRORS as e:
        _fail(f"Could not load schema: {e}")

    result = validate_compatibility(schema)
    _record(
        "validate",
        {"schema": schema_path},
        json.dumps(result.to_dict()),
        started,
        None if result.compatible else "; ".join(result.issues),
    )

    if result.compatible:
        rprint("[green]Schema is compatible.[/green]")
        return
    for issue in result.issues:
        rprint(f"[red]{escape(issue)}[/red]")
    raise typer.Exit(1)


@app.command()
def create(
    platform: str = typer.Argument(help=f"Target platform: {', '.join(PLATFORMS)}"),
    from_path: str = typer.Option(None, "--from", help="Partial schema JSON to start from"),
    output: str = typer.Option(None, "--output", "-o", help="Write the schema here"),
) -> None:
    """Create a new versioned schema with platform defaults."""
    started = time.time()
    try:
        partial = load_schema(Path(from_path)) if from_path else {}
        schema = create_versioned_schema(partial, platform)
    except INPUT_ERRORS as e:
        _fail(str(e))

    text = _write_or_print(schema, output)
    _record("create", {"platform": platform, "from": from_path}, text, started)


@app.command()
def export(
    schema_path: str = typer.Argument(help="Schema JSON"),
    output: str = typer.Option(None, "--output", "-o", help="Write the exported schema here"),
) -> None:
    """Strip $-prefixed version bookkeeping for external use."""
    started = time.time()
    try:
        schema = load_schema(Path(schema_path))
    except INPUT_ERRORS as e:
        _fail(f"Could not load schema: {e}")

    text = _write_or_print(export_schema(schema), output)
    _record("export", {"schema": schema_path}, text, started)


@app.command()
def activity(
    limit: int = typer.Option(20, help="Number of entries to show"),
    tool: str = typer.Option(None, "--tool", help="Only show this command/tool"),
    errors: bool = typer.Option(False, "--errors", help="Only show failed calls"),
) -> None:
    """Show recent CLI and MCP activity."""
    entries = read_activity_log(limit=limit, tool_name=tool, errors_only=errors)
    if not entries:
        rprint("No activity recorded yet.")
        return
    for entry in entries:
        status = "[red]error[/red]" if entry.get("error") else "[green]ok[/green]"
        rprint(
            f"{entry.get('timestamp', '')}  [bold]{entry.get('tool_name', '')}[/bold]  "
            f"{status}  {entry.get('duration_ms', 0)}ms"
        )


@app.command()
def serve() -> None:
    """Start the MCP stdio server (launched by the agent's MCP client)."""
    import asyncio
    from codekontext.mcp_server import main as mcp_main
    asyncio.run(mcp_main())


if __name__ == "__main__":
    app()
