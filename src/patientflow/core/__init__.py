"""
PatientFlow core: error types and configuration.
"""

from patientflow.core.config import PatientFlowConfig, load_config
from patientflow.core.errors import (
    ConfigError,
    DuplicateRecordError,
    InvalidCredentialsError,
    InvalidQueryError,
    PatientFlowError,
    SeedDataError,
    UnknownEntityError,
)

__all__ = [
    "PatientFlowConfig",
    "load_config",
    "PatientFlowError",
    "ConfigError",
    "SeedDataError",
    "UnknownEntityError",
    "DuplicateRecordError",
    "InvalidQueryError",
    "InvalidCredentialsError",
]
