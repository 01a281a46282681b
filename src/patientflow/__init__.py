"""
PatientFlow - in-memory entity store for the healthcare operations dashboard.

This package provides:
- EntityStore / AsyncEntityStore: CRUD, predicate queries, sorting, pagination
- StoreRegistry: one store per entity type, seeded at startup
- Session: the current dashboard user
"""

__version__ = "0.3.0"

from patientflow.core.errors import PatientFlowError
from patientflow.runtime.registry import StoreRegistry, build_default_registry
from patientflow.runtime.session import Session
from patientflow.runtime.store import AsyncEntityStore, EntityStore

__all__ = [
    "__version__",
    "EntityStore",
    "AsyncEntityStore",
    "StoreRegistry",
    "build_default_registry",
    "Session",
    "PatientFlowError",
]
