"""
Exchange Connectors Package

This package contains individual exchange connector modules.
Each exchange has its own subfolder with:
- __init__.py: Main exchange class implementing SpotExchangeInterface
- api_client.py: REST transport
- signer.py / parsers.py / markets.py / error_classifier.py: the
  exchange-specific wire details

Currently available:
- indodax: Indodax (Indonesia, IDR spot markets)
"""
