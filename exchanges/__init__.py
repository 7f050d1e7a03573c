"""
Venue Connectors Package

One subpackage per venue:
- woox/:    WooxExchange, WooxAPIClient, HMAC request signing
- paradex/: ParadexExchange, ParadexAPIClient (JWT bearer auth)

rest_client.py holds the shared aiohttp transport.
"""
