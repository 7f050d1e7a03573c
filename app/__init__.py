"""
FastAPI Application Package

HTTP entry point for the volume backend: exposes the aggregated
WOO X / Paradex volume overview and per-venue volume lookups.
"""
