"""
Configuration module.

Default parameters, YAML overrides and validation for trade templates,
the remote service connection, batch execution and session storage.
"""
