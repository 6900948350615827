"""
Core Package

Contains the transport-agnostic building blocks of the price relay:
- Configuration and logging
- Token registry and upstream symbol mapping
- Schemas: Pydantic models for ticker records, price snapshots and wire payloads

Nothing in this layer performs I/O.
"""
