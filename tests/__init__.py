"""
Test Suite

Contains unit tests for the price & fee aggregation backend.

Structure:
- tests/unit/: Tests for individual components (providers, cache, aggregator,
  orchestrator, formatters, API endpoints). No test touches the network.

Uses pytest with pytest-asyncio for testing async functionality.
"""
