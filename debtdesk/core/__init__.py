"""
DebtDesk - Core

Service plumbing shared by the API and the CLI: settings, structured
logging, request-ID middleware and error responses.
"""
