"""
Ledgerline - Filesystem Sandbox
Path validation for the file tools.

Security: every path is resolved (symlinks included) and must stay inside
the workspace root.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import config
from agency.tools.errors import ToolError, ToolErrorType, ToolFailure


class SandboxError(ToolFailure):
    """Raised when a path violates the workspace sandbox."""

    def __init__(self, message: str):
        super().__init__(ToolError(ToolErrorType.SANDBOX, message))


@dataclass
class SandboxPath:
    """A validated path inside the sandbox."""
    resolved: Path
    relative: Path


def workspace_root() -> Path:
    """The configured workspace root, or the current directory."""
    if config.FILE_WORKSPACE_ROOT:
        return Path(config.FILE_WORKSPACE_ROOT)
    return Path(os.getcwd())


def assert_sandbox_path(
    file_path: Union[str, Path],
    cwd: Optional[Path] = None,
    root: Optional[Path] = None
) -> SandboxPath:
    """
    Resolve a path and make sure it stays within the sandbox root.

    Args:
        file_path: Relative or absolute path from the model
        cwd: Base for relative paths (defaults to the root)
        root: Sandbox root (defaults to the workspace root)

    Returns:
        SandboxPath with the resolved absolute path and its path relative to root

    Raises:
        SandboxError: If the path is empty, contains null bytes, or escapes the root
    """
    raw = str(file_path).strip()
    if not raw:
        raise SandboxError("Path cannot be empty")
    if "\x00" in raw:
        raise SandboxError("Null bytes not allowed in path")

    root_resolved = (root or workspace_root()).resolve()
    base = (cwd or root_resolved).resolve()

    candidate = Path(os.path.expanduser(raw))
    if not candidate.is_absolute():
        candidate = base / candidate

    # strict=False: the target of write_file may not exist yet
    resolved = candidate.resolve()

    try:
        relative = resolved.relative_to(root_resolved)
    except ValueError:
        raise SandboxError(f"Path escapes the workspace: {raw}")

    return SandboxPath(resolved=resolved, relative=relative)
