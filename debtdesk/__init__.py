"""
DebtDesk - Account Import Service

FastAPI service that ingests debt-account spreadsheets, maps their headers
onto the canonical account fields, and reports clean records plus per-row
diagnostics for the caller to bulk-insert.
"""

__version__ = "0.1.0"
