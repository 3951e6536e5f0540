"""
Core Package

Contains the exchange-agnostic core of the connector:
- SpotExchangeInterface: Abstract base class every spot connector implements
- Schemas: Pydantic models for the canonical trading data model
- Errors: Canonical exception taxonomy
- Config / Logging: Settings and logger shared by all modules

Connectors translate their exchange's wire format into these types, so
callers never depend on one exchange's quirks.
"""
