"""
Test Suite

Contains unit tests for the price relay.

Structure:
- tests/unit/: Tests for individual components (config, schemas, price table,
  subscribers, upstream supervisor) and the HTTP surface

Uses pytest with pytest-asyncio for testing async functionality.
"""
