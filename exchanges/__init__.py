"""
Upstream Connectors Package

Each upstream market-data source has its own subfolder with its transport
client. The relay currently reads from a single source: Binance.
"""
