#!/usr/bin/env python3
"""
Ledgerline - Main Entry Point
Agent tool surface: browser automation, financial data and sandboxed files

Usage:
    python main.py                  # Read tool calls from stdin
    python main.py --list-tools     # Print the tool registry and exit
    python main.py --log-level DEBUG

Each stdin line is one tool call:
    <tool_name> <json input>
    browser {"action": "navigate", "url": "https://example.com"}

The JSON result envelope for each call is printed to stdout.
"""

import sys
import json
import signal
import argparse
from pathlib import Path

# Ensure we can import from project root
sys.path.insert(0, str(Path(__file__).parent))

import config
from core.logger import (
    setup_logging,
    log_startup_banner,
    log_header,
    log_section,
    log_success,
    log_warning,
    log_error,
    log_config
)
from agency.skills import discover_skills
from agency.tools.definitions import build_tool_descriptions, get_tool_registry
from agency.tools.executor import get_tool_executor


def signal_handler(signum, frame):
    """Treat SIGTERM like Ctrl+C so the browser is released."""
    raise KeyboardInterrupt


def initialize_system(level: str) -> None:
    """Set up directories and logging, then log the startup configuration."""
    config.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    config.DATA_DIR.mkdir(parents=True, exist_ok=True)
    setup_logging(
        log_file_path=config.DIAGNOSTIC_LOG_PATH,
        level=level,
        log_to_file=config.LOG_TO_FILE
    )

    log_startup_banner(config.VERSION, config.PROJECT_NAME)

    log_section("Configuration", "⚙")
    log_config("Headless browser", str(config.BROWSER_HEADLESS))
    log_config("Financial API", config.FINANCIAL_API_BASE_URL)
    log_config("Workspace root", config.FILE_WORKSPACE_ROOT or str(Path.cwd()))
    log_config("Skills", str(len(discover_skills())))


def parse_tool_call(line: str):
    """
    Split a stdin line into a tool name and its input.

    Args:
        line: "<tool_name> <json>" (the JSON part may be omitted)

    Returns:
        Tuple of (tool_name, tool_input)

    Raises:
        ValueError: If the JSON part is malformed or not an object
    """
    tool_name, _, raw_input = line.strip().partition(" ")
    raw_input = raw_input.strip()
    if not raw_input:
        return tool_name, {}

    tool_input = json.loads(raw_input)
    if not isinstance(tool_input, dict):
        raise ValueError("tool input must be a JSON object")
    return tool_name, tool_input


def run_stdin_loop() -> int:
    """Execute tool calls read from stdin until EOF."""
    executor = get_tool_executor()
    call_count = 0

    try:
        for line in sys.stdin:
            if not line.strip() or line.lstrip().startswith("#"):
                continue

            try:
                tool_name, tool_input = parse_tool_call(line)
            except ValueError as e:
                log_warning(f"Skipping malformed line: {e}")
                continue

            call_count += 1
            result = executor.execute(tool_name, tool_input, tool_use_id=f"call_{call_count}")
            print(result.content, flush=True)

        log_success(f"Processed {call_count} tool call(s)")
        return 0

    except KeyboardInterrupt:
        log_warning("Interrupted")
        return 130

    finally:
        executor.close()


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        description="Ledgerline - Agent Tool Surface",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--list-tools", "-l",
        action="store_true",
        help="Print the registered tools with their descriptions and exit"
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default from LOG_LEVEL env var)"
    )
    args = parser.parse_args()

    signal.signal(signal.SIGTERM, signal_handler)

    try:
        initialize_system(args.log_level)

        if args.list_tools:
            log_header("Registered Tools")
            names = ", ".join(tool.name for tool in get_tool_registry())
            log_success(f"Registered tools: {names}")
            print(build_tool_descriptions())
            return 0

        return run_stdin_loop()

    except Exception as e:
        log_error(f"Fatal error: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
