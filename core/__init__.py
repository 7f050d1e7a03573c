"""
Core Package

Contains the venue-agnostic core of the volume pipeline:
- ExchangeInterface / VolumeTier: connector contract and the shared tier driver
- PaginatedFetcher: bounded page walker for trade/fill listings
- VolumeAggregator: concurrent fan-out over venues, history merge, persistence
- Schemas: Pydantic models (VolumeQuery, Trade, VolumeResult, VolumeSnapshot)
"""
