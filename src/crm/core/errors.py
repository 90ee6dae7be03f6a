"""Error hierarchy shared by the deal store, list controller and hosted services.

- RecordValidationError: a create/update payload is missing or has malformed fields
- RecordNotFoundError: an operation referenced an identifier that does not exist
- ExternalServiceError: the hosted backend reported a failure or partial failure

Callers propagate these; the API layer translates them into HTTP status codes.
"""

from __future__ import annotations

from typing import Any


class CRMError(Exception):
    """Base class for all CRM domain errors."""


class RecordValidationError(CRMError, ValueError):
    """Raised when record data fails validation.

    Attributes:
        errors: Mapping of field name to a human-readable problem.
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in self.errors.items()))


class RecordNotFoundError(CRMError, LookupError):
    """Raised when no record exists for the given identifier."""

    def __init__(self, entity: str, record_id: Any) -> None:
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity.capitalize()} with ID {record_id} not found")


class ExternalServiceError(CRMError):
    """Raised when the hosted backend rejects a call.

    Attributes:
        failed_records: Per-record outcomes that reported failure, if any.
    """

    def __init__(self, message: str, failed_records: list[Any] | None = None) -> None:
        self.failed_records = list(failed_records or [])
        super().__init__(message)
