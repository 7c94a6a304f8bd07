"""
Ledgerline - Native Tool Use System
Tools the model calls by name with structured arguments.

Components:
    - definitions: Tool schemas and rich descriptions (the registry)
    - executor: Routes tool calls to handlers and wraps results
    - browser: Browser automation control core
    - finance: Financial data API client and tools
    - filesystem: Sandboxed file tools

Usage:
    from agency.tools.definitions import get_tool_definitions
    from agency.tools.executor import get_tool_executor

    # Get tool schemas for API call
    tools = get_tool_definitions()

    # Execute a tool call from the model
    executor = get_tool_executor()
    result = executor.execute("browser", {"action": "navigate", "url": url}, tool_use_id)
"""
