"""Catalog of the tools advertised to every backend."""

from __future__ import annotations

from llm_gateway.types import ToolDefinition, ToolParameter

TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="Read",
        description="Read a file from the filesystem",
        parameters=(
            ToolParameter(
                name="file_path", type="string", description="Absolute path to the file", required=True
            ),
            ToolParameter(name="offset", type="number", description="Line offset to start reading from"),
            ToolParameter(name="limit", type="number", description="Number of lines to read"),
        ),
    ),
    ToolDefinition(
        name="Write",
        description="Write content to a file",
        parameters=(
            ToolParameter(
                name="file_path", type="string", description="Absolute path to the file", required=True
            ),
            ToolParameter(
                name="content", type="string", description="Content to write to the file", required=True
            ),
        ),
    ),
    ToolDefinition(
        name="Edit",
        description="Edit a file by replacing strings",
        parameters=(
            ToolParameter(
                name="file_path", type="string", description="Absolute path to the file", required=True
            ),
            ToolParameter(
                name="old_string", type="string", description="String to replace in the file", required=True
            ),
            ToolParameter(name="new_string", type="string", description="Replacement string", required=True),
            ToolParameter(name="replace_all", type="boolean", description="Replace all occurrences"),
        ),
    ),
    ToolDefinition(
        name="Bash",
        description="Execute a bash command",
        parameters=(
            ToolParameter(name="command", type="string", description="Command to execute", required=True),
            ToolParameter(name="timeout", type="number", description="Timeout in milliseconds"),
            ToolParameter(
                name="working_directory",
                type="string",
                description="Working directory for command execution",
            ),
        ),
    ),
    ToolDefinition(
        name="Glob",
        description="Search for files matching a pattern",
        parameters=(
            ToolParameter(
                name="pattern", type="string", description="Glob pattern to match files", required=True
            ),
            ToolParameter(name="path", type="string", description="Directory to search in"),
        ),
    ),
    ToolDefinition(
        name="Grep",
        description="Search file contents with pattern",
        parameters=(
            ToolParameter(name="pattern", type="string", description="Search pattern (regex)", required=True),
            ToolParameter(name="path", type="string", description="Path to search in"),
            ToolParameter(
                name="output_mode",
                type="string",
                description="Output format for search results",
                enum=("content", "files_with_matches", "count"),
            ),
        ),
    ),
)

_BY_NAME = {tool.name: tool for tool in TOOL_DEFINITIONS}


def get_tool_definitions() -> tuple[ToolDefinition, ...]:
    """Return every registered tool, in declaration order."""
    return TOOL_DEFINITIONS


def get_tool_definition(name: str) -> ToolDefinition:
    """Return a tool by its exact name; raises ``KeyError`` if unknown."""
    return _BY_NAME[name]


def tool_names() -> list[str]:
    return [tool.name for tool in TOOL_DEFINITIONS]
