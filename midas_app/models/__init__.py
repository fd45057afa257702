"""
Data models and contracts module.

Immutable data structures for screened candidates, trade templates,
simulation requests and results, batch runs and summary statistics.
Follows functional programming principles with frozen dataclasses.
"""
