"""
Ledgerline - Tool Error Types
Structured error handling for AI tool feedback
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class ToolErrorType(Enum):
    """
    Categories of tool use errors for AI feedback.

    These types help the AI understand what went wrong and how to correct it.
    """
    MISSING_PARAMETER = "missing_parameter"  # Required field absent
    VALIDATION = "validation"                # Invalid values provided
    UNKNOWN_ACTION = "unknown_action"        # Unrecognized action or act kind
    INTERACTION = "interaction"              # Driver call failed or timed out
    NOT_FOUND = "not_found"                  # Resource doesn't exist
    SANDBOX = "sandbox"                      # Path escapes the workspace
    UPSTREAM = "upstream"                    # Remote API failure
    SYSTEM_ERROR = "system"                  # Internal failure


@dataclass
class ToolError:
    """
    Structured error with context for AI feedback.

    Attributes:
        error_type: Category of the error
        message: Human-readable error description
        expected_format: The correct syntax (optional)
        example: A working example (optional)
    """
    error_type: ToolErrorType
    message: str
    expected_format: Optional[str] = None
    example: Optional[str] = None

    def format_for_ai(self) -> str:
        """
        Format error message for the AI continuation prompt.

        Returns:
            Multi-line formatted error with context
        """
        lines = [f"Error ({self.error_type.value}): {self.message}"]
        if self.expected_format:
            lines.append(f"  Expected format: {self.expected_format}")
        if self.example:
            lines.append(f"  Example: {self.example}")
        return "\n".join(lines)

    def __str__(self) -> str:
        """String representation falls back to formatted message."""
        return self.format_for_ai()


class ToolFailure(Exception):
    """Raised by tool handlers to report a structured ToolError."""

    def __init__(self, error: ToolError):
        super().__init__(error.message)
        self.error = error

    @classmethod
    def missing(cls, message: str, example: Optional[str] = None) -> "ToolFailure":
        """Shortcut for a MISSING_PARAMETER failure."""
        return cls(ToolError(ToolErrorType.MISSING_PARAMETER, message, example=example))

    @classmethod
    def invalid(cls, message: str, expected_format: Optional[str] = None) -> "ToolFailure":
        """Shortcut for a VALIDATION failure."""
        return cls(ToolError(ToolErrorType.VALIDATION, message, expected_format=expected_format))
