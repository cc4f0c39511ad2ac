"""
Core Package

Contains the provider-agnostic core of the aggregation layer:
- Config / Logging: ambient settings and the shared logger
- Schemas: Pydantic models for snapshots, fee estimates and messages
- Exceptions: the fetch / validation / aggregation error taxonomy
- Utils: pure formatting, validation, conversion and time helpers
"""
