"""
PatientFlow runtime: entity stores, query semantics, registry and session.
"""

from patientflow.runtime.query import Page, Pagination, SortField, matches
from patientflow.runtime.registry import (
    ENTITY_NAMES,
    AsyncStoreRegistry,
    StoreRegistry,
    build_default_registry,
)
from patientflow.runtime.session import LoginResult, LogoutResult, Session, UserDirectory
from patientflow.runtime.store import AsyncEntityStore, EntityStore

__all__ = [
    "EntityStore",
    "AsyncEntityStore",
    "StoreRegistry",
    "AsyncStoreRegistry",
    "build_default_registry",
    "ENTITY_NAMES",
    "Page",
    "Pagination",
    "SortField",
    "matches",
    "Session",
    "UserDirectory",
    "LoginResult",
    "LogoutResult",
]
