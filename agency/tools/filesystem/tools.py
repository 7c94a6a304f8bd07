"""
Ledgerline - File Tools
read_file / write_file / edit_file for the model, sandboxed to the workspace root.
"""

from typing import Any, Dict, Optional

import config
from agency.tools.errors import ToolError, ToolErrorType, ToolFailure
from agency.tools.filesystem.sandbox import assert_sandbox_path, workspace_root
from core.logger import log_info


# =============================================================================
# TOOL DEFINITIONS (for the Anthropic API)
# =============================================================================

READ_FILE_DESCRIPTION = """
Read files from the local workspace.

## When to Use

- Inspecting a file before editing it
- Reading notes, data files, or generated output

## Usage Notes

- Accepts `path`, and optional `offset` (1-based start line) and `limit` (line count)
- Long files are truncated; page through them with offset/limit
""".strip()

WRITE_FILE_DESCRIPTION = """
Create or overwrite files in the local workspace.

## When to Use

- Creating a new file with full contents
- Replacing an existing file entirely
- Writing generated output to disk

## When NOT to Use

- Small surgical updates in an existing file (use `edit_file`)
- Reading file contents (use `read_file`)

## Usage Notes

- Accepts `path` and full `content`
- Creates parent directories when they do not exist
- Overwrites existing file content completely
""".strip()

EDIT_FILE_DESCRIPTION = """
Make exact text replacements in an existing workspace file.

## Usage Notes

- `old_string` must match the file exactly (including whitespace)
- `old_string` must be unique in the file unless `replace_all` is true
- Read the file first so the match is exact
""".strip()

READ_FILE_TOOL: Dict[str, Any] = {
    "name": "read_file",
    "description": "Read a text file inside the workspace, optionally a window of lines.",
    "input_schema": {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": "Path to the file to read (relative or absolute)."},
            "offset": {"type": "integer", "description": "1-based line to start reading from."},
            "limit": {"type": "integer", "description": "Maximum number of lines to return."}
        },
        "required": ["path"]
    }
}

WRITE_FILE_TOOL: Dict[str, Any] = {
    "name": "write_file",
    "description": (
        "Create or overwrite a file inside the workspace. "
        "Automatically creates parent directories when needed."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": "Path to the file to write (relative or absolute)."},
            "content": {"type": "string", "description": "Content to write to the file."}
        },
        "required": ["path", "content"]
    }
}

EDIT_FILE_TOOL: Dict[str, Any] = {
    "name": "edit_file",
    "description": "Replace exact text in an existing file inside the workspace.",
    "input_schema": {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": "Path to the file to edit (relative or absolute)."},
            "old_string": {"type": "string", "description": "Exact text to replace."},
            "new_string": {"type": "string", "description": "Replacement text."},
            "replace_all": {"type": "boolean", "description": "Replace every occurrence (default false)."}
        },
        "required": ["path", "old_string", "new_string"]
    }
}


# =============================================================================
# TOOL HANDLERS
# =============================================================================

def _require(tool_input: Dict[str, Any], field: str) -> Any:
    value = tool_input.get(field)
    if value is None:
        raise ToolFailure.missing(f"{field} is required")
    return value


def read_file(tool_input: Dict[str, Any]) -> Dict[str, Any]:
    """Read a file, optionally a 1-based line window."""
    path = _require(tool_input, "path")
    target = assert_sandbox_path(path, root=workspace_root())

    if not target.resolved.is_file():
        raise ToolFailure(ToolError(ToolErrorType.NOT_FOUND, f"File not found: {path}"))

    with open(target.resolved, "r", encoding="utf-8", errors="replace") as f:
        lines = f.read().splitlines(keepends=True)

    offset: Optional[int] = tool_input.get("offset")
    limit: Optional[int] = tool_input.get("limit")
    start = max(int(offset) - 1, 0) if offset else 0
    end = start + int(limit) if limit else len(lines)
    content = "".join(lines[start:end])

    truncated = False
    max_chars = config.FILE_READ_MAX_CHARS
    if max_chars and len(content) > max_chars:
        content = content[:max_chars]
        truncated = True

    return {
        "path": path,
        "content": content,
        "totalLines": len(lines),
        "startLine": start + 1,
        "linesReturned": len(lines[start:end]),
        "truncated": truncated,
    }


def write_file(tool_input: Dict[str, Any]) -> Dict[str, Any]:
    """Create or overwrite a file, creating parent directories."""
    path = _require(tool_input, "path")
    content = _require(tool_input, "content")
    target = assert_sandbox_path(path, root=workspace_root())

    target.resolved.parent.mkdir(parents=True, exist_ok=True)
    with open(target.resolved, "w", encoding="utf-8") as f:
        f.write(content)

    log_info(f"Wrote {len(content)} chars to {target.relative}", prefix="📝")
    return {
        "path": path,
        "bytesWritten": len(content.encode("utf-8")),
        "message": f"Successfully wrote {len(content)} characters to {path}",
    }


def edit_file(tool_input: Dict[str, Any]) -> Dict[str, Any]:
    """Replace exact text in an existing file."""
    path = _require(tool_input, "path")
    old_string = _require(tool_input, "old_string")
    new_string = _require(tool_input, "new_string")
    replace_all = bool(tool_input.get("replace_all", False))
    target = assert_sandbox_path(path, root=workspace_root())

    if not target.resolved.is_file():
        raise ToolFailure(ToolError(ToolErrorType.NOT_FOUND, f"File not found: {path}"))
    if not old_string:
        raise ToolFailure.invalid("old_string cannot be empty")
    if old_string == new_string:
        raise ToolFailure.invalid("old_string and new_string are identical")

    with open(target.resolved, "r", encoding="utf-8") as f:
        original = f.read()

    occurrences = original.count(old_string)
    if occurrences == 0:
        raise ToolFailure(ToolError(ToolErrorType.NOT_FOUND, f"old_string not found in {path}"))
    if occurrences > 1 and not replace_all:
        raise ToolFailure.invalid(
            f"old_string matches {occurrences} times in {path}; "
            f"add surrounding context or set replace_all"
        )

    if replace_all:
        updated = original.replace(old_string, new_string)
    else:
        updated = original.replace(old_string, new_string, 1)

    with open(target.resolved, "w", encoding="utf-8") as f:
        f.write(updated)

    replacements = occurrences if replace_all else 1
    log_info(f"Edited {target.relative} ({replacements} replacement(s))", prefix="📝")
    return {
        "path": path,
        "replacements": replacements,
        "message": f"Successfully edited {path}",
    }
