"""MCP server for codekontext.

Exposes the context builder, diff engine and schema version manager to AI
coding agents via the Model Context Protocol. Every tool takes plain JSON
(file records, messages, schema documents) and returns JSON text.

Usage:
    uv run python -m codekontext.mcp_server

Configure in an MCP client:
    {
      "mcpServers": {
        "codekontext": {
          "command": "uv",
          "args": ["run", "--directory", "/path/to/codekontext", "codekontext", "serve"]
        }
      }
    }
"""

from __future__ import annotations

import json
import time

import mcp.server.stdio
import mcp.types as types
from mcp.server import Server

from codekontext.activity import log_tool_call
from codekontext.config import Config
from codekontext.context.builder import build_context
from codekontext.diff.engine import compute_diff, get_incremental_update
from codekontext.diff.schema_changes import detect_schema_changes, get_affected_files
from codekontext.models import FileRecord, Message
from codekontext.schema.versioning import (
    export_schema,
    get_version_info,
    migrate,
    validate_compatibility,
)

server = Server("codekontext")

_FILES_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "path": {"type": "string"},
            "content": {"type": "string"},
            "language": {"type": "string"},
        },
        "required": ["path"],
    },
}

_SCHEMA_DOC = {"type": "object", "description": "Application schema document"}


@server.list_tools()
async def list_tools() -> list[types.Tool]:
    return [
        types.Tool(
            name="build_context",
            description=(
                "Select the most relevant project files and render a system prompt that fits "
                "the token budget. Files mentioned in recent messages, the active file, and "
                "entry points are ranked first."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "files": _FILES_SCHEMA,
                    "messages": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "role": {"type": "string", "enum": ["user", "assistant", "system"]},
                                "content": {"type": "string"},
                            },
                            "required": ["role", "content"],
                        },
                    },
                    "active_file_path": {"type": "string"},
                    "max_context_tokens": {"type": "integer"},
                },
                "required": ["files"],
            },
        ),
        types.Tool(
            name="diff_files",
            description="Classify every file as added, modified, deleted or unchanged between two file sets.",
            inputSchema={
                "type": "object",
                "properties": {"old_files": _FILES_SCHEMA, "new_files": _FILES_SCHEMA},
                "required": ["old_files", "new_files"],
            },
        ),
        types.Tool(
            name="plan_update",
            description=(
                "Compute the incremental update between two file sets: which files to write, "
                "which to delete, and which are untouched."
            ),
            inputSchema={
                "type": "object",
                "properties": {"old_files": _FILES_SCHEMA, "new_files": _FILES_SCHEMA},
                "required": ["old_files", "new_files"],
            },
        ),
        types.Tool(
            name="detect_schema_changes",
            description="List changed schema sections and the project files they affect.",
            inputSchema={
                "type": "object",
                "properties": {"old_schema": _SCHEMA_DOC, "new_schema": _SCHEMA_DOC},
                "required": ["old_schema", "new_schema"],
            },
        ),
        types.Tool(
            name="schema_version_info",
            description="Report a schema's version, whether it is supported, and its migration path.",
            inputSchema={
                "type": "object",
                "properties": {"schema": _SCHEMA_DOC},
                "required": ["schema"],
            },
        ),
        types.Tool(
            name="migrate_schema",
            description="Migrate a schema document to the current version. Never fails hard; check 'success'.",
            inputSchema={
                "type": "object",
                "properties": {"schema": _SCHEMA_DOC},
                "required": ["schema"],
            },
        ),
        types.Tool(
            name="validate_schema",
            description="Check a schema for required sections and a well-formed version string.",
            inputSchema={
                "type": "object",
                "properties": {"schema": _SCHEMA_DOC},
                "required": ["schema"],
            },
        ),
        types.Tool(
            name="export_schema",
            description="Return the schema without its $-prefixed version bookkeeping fields.",
            inputSchema={
                "type": "object",
                "properties": {"schema": _SCHEMA_DOC},
                "required": ["schema"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
    start = time.time()
    result: list[types.TextContent] = []
    error: str | None = None
    try:
        result = _dispatch_tool(name, arguments)
        return result
    except (KeyError, ValueError, TypeError) as e:
        error = str(e)
        result = [types.TextContent(type="text", text=f"Invalid arguments: {e}")]
        return result
    except Exception as e:
        error = str(e)
        result = [types.TextContent(type="text", text=f"Error: {e}")]
        return result
    finally:
        duration_ms = int((time.time() - start) * 1000)
        result_text = result[0].text if result else ""
        log_tool_call(name, _loggable(arguments), result_text, error, duration_ms)


def _loggable(arguments: dict) -> dict:
    """Arguments with file contents and schema bodies collapsed to sizes."""
    summary: dict = {}
    for key, value in arguments.items():
        if isinstance(value, list):
            summary[key] = f"<{len(value)} items>"
        elif isinstance(value, dict):
            summary[key] = f"<object with {len(value)} keys>"
        else:
            summary[key] = value
    return summary


def _text(data: object) -> list[types.TextContent]:
    return [types.TextContent(type="text", text=json.dumps(data, indent=2, default=str))]


def _files(raw: list) -> list[FileRecord]:
    return [FileRecord.from_dict(item) for item in raw]


def _dispatch_tool(name: str, arguments: dict) -> list[types.TextContent]:
    """Route a tool call to the appropriate handler."""
    if name == "build_context":
        return _handle_build_context(arguments)
    elif name == "diff_files":
        report = compute_diff(_files(arguments["old_files"]), _files(arguments["new_files"]))
        return _text(report.to_dict())
    elif name == "plan_update":
        update = get_incremental_update(_files(arguments["old_files"]), _files(arguments["new_files"]))
        return _text(update.to_dict())
    elif name == "detect_schema_changes":
        changed = detect_schema_changes(arguments["old_schema"], arguments["new_schema"])
        return _text({"changedFields": changed, "affectedFiles": get_affected_files(changed)})
    elif name == "schema_version_info":
        return _text(get_version_info(arguments["schema"]).to_dict())
    elif name == "migrate_schema":
        return _text(migrate(arguments["schema"]).to_dict())
    elif name == "validate_schema":
        return _text(validate_compatibility(arguments["schema"]).to_dict())
    elif name == "export_schema":
        return _text(export_schema(arguments["schema"]))
    else:
        return [types.TextContent(type="text", text=f"Unknown tool: {name}")]


def _handle_build_context(arguments: dict) -> list[types.TextContent]:
    config = Config.load()
    if arguments.get("max_context_tokens"):
        config.max_context_tokens = int(arguments["max_context_tokens"])

    issues = config.validate()
    if issues:
        return _text({"error": "Invalid context configuration", "issues": issues})

    messages = [Message.from_dict(m) for m in arguments.get("messages", [])]
    result = build_context(
        _files(arguments["files"]),
        messages,
        arguments.get("active_file_path"),
        config.context_config(),
    )
    return _text(result.to_dict())


async def main() -> None:
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


if __name__ == "__main__":
    import asyncio
    asyncio.run(main())
