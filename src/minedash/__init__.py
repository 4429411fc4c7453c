"""minedash: analytics engine for the mining game dashboard.

This package contains the data normalization and time-series aggregation
core used by the dashboard: coercion of loosely-typed webhook payloads into
canonical records, hash-rate level classification, and re-bucketing of
daily event counts for comparison charts.
"""
