"""
Test Suite

Contains unit tests for the connector.

Structure:
- tests/unit/: Tests for individual components (signer, parsers, error
  classifier, market directory, transport, connector). No test touches
  the network; transports are monkeypatched or faked.

Uses pytest with pytest-asyncio for testing async functionality.
"""
