"""
Seed data for the dashboard's entity stores.

Provides the JSON seed loader and the bundled default dataset.
"""

from __future__ import annotations

from .loader import SeedData, SeedDataLoader, load_default_seed, validate_seed_data

__all__ = [
    "SeedData",
    "SeedDataLoader",
    "load_default_seed",
    "validate_seed_data",
]
