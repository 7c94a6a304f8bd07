"""
Ledgerline - Tool Executor
Routes native tool calls to their handlers.

Every handler result is wrapped in the JSON envelope from results.py.
Failures never propagate: they become ToolResults with is_error set.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from agency.skills.tool import run_skill
from agency.tools.browser.tools import BrowserToolExecutor
from agency.tools.errors import ToolError, ToolFailure
from agency.tools.filesystem.tools import edit_file, read_file, write_file
from agency.tools.finance.tools import get_company_news, get_segmented_revenues
from agency.tools.results import format_tool_result
from core.logger import log_info, log_warning, log_error


@dataclass
class ToolResult:
    """Result from executing a tool."""
    tool_use_id: str
    tool_name: str
    content: str  # JSON envelope text
    is_error: bool = False

    def to_api_block(self) -> Dict[str, Any]:
        """Shape as a tool_result content block for the Anthropic API."""
        block: Dict[str, Any] = {
            "type": "tool_result",
            "tool_use_id": self.tool_use_id,
            "content": self.content,
        }
        if self.is_error:
            block["is_error"] = True
        return block


def build_tool_result_message(results: List[ToolResult]) -> Dict[str, Any]:
    """User message carrying tool results back to the model."""
    return {
        "role": "user",
        "content": [result.to_api_block() for result in results],
    }


class ToolExecutor:
    """
    Executes tool calls by routing to handlers.

    Handlers return either a payload dict or a (payload, source_urls) tuple.
    """

    def __init__(self, browser_executor: Optional[BrowserToolExecutor] = None):
        """Initialize the executor with tool-to-handler mappings."""
        self._browser_executor = browser_executor
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {
            "browser": self._exec_browser,
            "get_company_news": get_company_news,
            "get_segmented_revenues": get_segmented_revenues,
            "read_file": read_file,
            "write_file": write_file,
            "edit_file": edit_file,
            "skill": run_skill,
        }

    @property
    def tool_names(self) -> List[str]:
        return list(self._handlers.keys())

    def execute(
        self,
        tool_name: str,
        tool_input: Dict[str, Any],
        tool_use_id: str = ""
    ) -> ToolResult:
        """
        Execute a tool call and return the result.

        Args:
            tool_name: Name of the tool to execute
            tool_input: Structured input arguments from the model
            tool_use_id: Unique ID for this tool use (for result correlation)

        Returns:
            ToolResult with execution outcome
        """
        handler_fn = self._handlers.get(tool_name)
        if not handler_fn:
            log_warning(f"Unknown tool: {tool_name}")
            return self._error(
                tool_use_id,
                tool_name,
                f"Unknown tool: {tool_name}. Available tools: {self.tool_names}",
            )

        if tool_input is None:
            tool_input = {}

        try:
            log_info(f"Executing tool: {tool_name}", prefix="🔧")
            payload, source_urls = self._split_result(handler_fn(tool_input))
        except ToolFailure as e:
            log_warning(f"Tool {tool_name} failed: {e.error.format_for_ai()}")
            return self._failure(tool_use_id, tool_name, e.error)
        except Exception as e:
            log_error(f"Tool execution error ({tool_name}): {e}")
            return self._error(tool_use_id, tool_name, f"Tool execution error: {e}")

        # Browser failures come back as payloads rather than exceptions
        is_error = isinstance(payload, dict) and "error" in payload
        return ToolResult(
            tool_use_id=tool_use_id,
            tool_name=tool_name,
            content=format_tool_result(payload, source_urls),
            is_error=is_error,
        )

    @staticmethod
    def _split_result(result: Any) -> Tuple[Any, Optional[List[str]]]:
        if isinstance(result, tuple):
            return result[0], result[1]
        return result, None

    @classmethod
    def _failure(cls, tool_use_id: str, tool_name: str, error: ToolError) -> ToolResult:
        """Error result carrying the structured error's type and hints."""
        extra: Dict[str, Any] = {"errorType": error.error_type.value}
        if error.expected_format:
            extra["expected"] = error.expected_format
        if error.example:
            extra["example"] = error.example
        return cls._error(tool_use_id, tool_name, error.message, extra)

    @staticmethod
    def _error(
        tool_use_id: str,
        tool_name: str,
        message: str,
        extra: Optional[Dict[str, Any]] = None
    ) -> ToolResult:
        payload: Dict[str, Any] = {"error": message}
        if extra:
            payload.update(extra)
        return ToolResult(
            tool_use_id=tool_use_id,
            tool_name=tool_name,
            content=format_tool_result(payload),
            is_error=True,
        )

    # =========================================================================
    # BROWSER
    # =========================================================================

    def _exec_browser(self, tool_input: Dict[str, Any]) -> Dict[str, Any]:
        """Run a browser action (the browser executor is created on first use)."""
        if self._browser_executor is None:
            self._browser_executor = BrowserToolExecutor()
        return self._browser_executor.execute(tool_input)

    def close(self) -> None:
        """Release the browser, if one was started."""
        if self._browser_executor is not None:
            self._browser_executor.close()
            self._browser_executor = None


# Global instance
_executor: Optional[ToolExecutor] = None


def get_tool_executor() -> ToolExecutor:
    """Get the global tool executor instance."""
    global _executor
    if _executor is None:
        _executor = ToolExecutor()
    return _executor
