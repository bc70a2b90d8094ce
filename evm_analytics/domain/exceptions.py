"""
Domain Exceptions for Program Performance Analytics.

Typed failures surfaced to the immediate caller:
- Invalid inputs rejected before computation
- Report-level data minimums
- Missing baseline snapshots
- Cycles in activity networks
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# =============================================================================
# Input Exceptions
# =============================================================================

class InvalidInputError(DomainError):
    """Raised when an input value is outside its valid range."""

    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid value for '{field}': {message}", code="INVALID_INPUT")
        self.field = field


class InsufficientDataError(DomainError):
    """Raised when a report requires more snapshots than are available."""

    def __init__(self, required: int, available: int, context: str = "analysis"):
        message = (
            f"{context} requires at least {required} snapshots, "
            f"but only {available} available"
        )
        super().__init__(message, code="INSUFFICIENT_DATA")
        self.required = required
        self.available = available
        self.context = context


# =============================================================================
# Snapshot Exceptions
# =============================================================================

class SnapshotNotFoundError(DomainError):
    """Raised when a referenced snapshot cannot be found."""

    def __init__(self, snapshot_id: str):
        message = f"Snapshot with id '{snapshot_id}' not found"
        super().__init__(message, code="SNAPSHOT_NOT_FOUND")
        self.snapshot_id = snapshot_id


# =============================================================================
# Schedule Exceptions
# =============================================================================

class CyclicDependencyError(DomainError):
    """Raised when the activity dependency graph contains a cycle."""

    def __init__(self, activity_ids):
        self.activity_ids = sorted(activity_ids)
        message = (
            "Activity dependencies contain a cycle involving: "
            f"{', '.join(self.activity_ids)}"
        )
        super().__init__(message, code="CYCLIC_DEPENDENCY")


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigurationError(DomainError):
    """Raised when configuration loading or validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="CONFIGURATION_ERROR")
