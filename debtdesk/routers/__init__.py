"""DebtDesk API routers."""
