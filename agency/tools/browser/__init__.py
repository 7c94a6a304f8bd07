"""
Ledgerline - Browser Automation Control Core

Provides the Playwright-based "browser" tool: navigate, snapshot the
accessibility tree with element refs, act on refs, read page text, close.

The browser is lazy-initialized (only started on first tool use) and
lives until the close action. Nothing is persisted across restarts.
"""
