"""
Error types for the PatientFlow entity store.

Not-found conditions on reads, updates and deletes are never errors: the
store returns ``None`` or ``False`` for those. The exceptions below cover
misuse (bad configuration, malformed seed data, invalid paging arguments)
and the one validation path in the user session.
"""


class PatientFlowError(Exception):
    """Base exception for all PatientFlow errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(PatientFlowError):
    """
    Raised when the configuration file cannot be used.

    Examples:
    - Malformed TOML
    - A setting with the wrong type
    """

    pass


class SeedDataError(PatientFlowError):
    """
    Raised when a seed dataset is structurally invalid.

    Examples:
    - Document is not an object of entity lists
    - Record is not an object
    - Record has no id
    """

    pass


class UnknownEntityError(PatientFlowError, KeyError):
    """Raised when a registry lookup names an entity with no store."""

    def __init__(self, entity_name: str):
        self.entity_name = entity_name
        super().__init__(f"No store registered for entity: {entity_name}")

    def __str__(self) -> str:
        return self.message


class DuplicateRecordError(PatientFlowError):
    """Raised by ``insert`` when the record id is already taken."""

    def __init__(self, entity_name: str, record_id: str):
        self.entity_name = entity_name
        self.record_id = record_id
        super().__init__(f"{entity_name} record already exists: {record_id}")


class InvalidQueryError(PatientFlowError, ValueError):
    """Raised for paging arguments outside their domain (page or limit < 1)."""

    pass


class InvalidCredentialsError(PatientFlowError):
    """Raised by ``Session.login`` when email or password is missing."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)
