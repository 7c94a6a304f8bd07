"""
Ledgerline - File Tools

Read, write and edit files inside the workspace root. All paths go
through the sandbox check in sandbox.py.
"""
