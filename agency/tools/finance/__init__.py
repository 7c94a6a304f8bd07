"""
Ledgerline - Financial Data Tools

REST client for the financial data API (with a local response cache)
and the tools built on it.
"""
