"""Core (UI-agnostic) dashboard logic.

This package contains:
- domain records and sheet row parsing (Apps Script JSON -> dataclasses)
- the backend endpoint registry and the HTTP client built from it
- dashboard aggregation (totals, first-seen ordered chart series)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
