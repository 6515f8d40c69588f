"""
product_tracker.reporting: dashboard summary and terminal formatting.

It does NOT fetch data; callers pass already-loaded store contents.

Modules:
  dashboard : DashboardSummary + build_dashboard_summary().
  formatters: ASCII terminal formatters for Typer CLI commands.
"""
