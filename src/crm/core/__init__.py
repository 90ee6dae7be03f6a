"""Core cross-cutting pieces: the CRM error hierarchy."""

from src.crm.core.errors import (
    CRMError,
    ExternalServiceError,
    RecordNotFoundError,
    RecordValidationError,
)

__all__ = [
    "CRMError",
    "RecordValidationError",
    "RecordNotFoundError",
    "ExternalServiceError",
]
