"""
Data Providers Package

Each external data source has its own module:
- http_client.py: TimedFetchClient, the single timed GET used by all providers
- coingecko.py: spot price request and payload validation (both assets)
- bitcoin_fees.py: ordered Bitcoin fee provider chain
- ethereum_gas.py: Blocknative gas estimator with static fallback

Adding a Bitcoin fee source means adding one ProviderSpec with a pure parser;
nothing else changes.
"""
