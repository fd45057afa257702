"""
Utility functions module.

Shared helpers for date handling across the batch simulator.

Date Semantics:
- Reference dates identify the ranking snapshot a batch was built from
- Trades enter on the day after the reference date (the ranking is only
  known after that day's close)
- All dates cross the wire as ISO-8601 calendar dates (YYYY-MM-DD)
"""
