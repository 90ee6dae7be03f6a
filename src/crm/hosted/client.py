"""Async HTTP client for the hosted record backend that stores tasks and discounts.

Provides HostedBackendClient, a thin httpx wrapper authenticated with a
project id and public key. Every call returns an Envelope that has already
been checked by raise_for_envelope(): a false success flag, or any failed
per-record result, becomes an ExternalServiceError. Transport and decoding
failures are wrapped the same way. Calls are never retried.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from src.crm.core.errors import ExternalServiceError
from src.crm.hosted.schemas import Envelope

logger = structlog.get_logger(__name__)


def raise_for_envelope(envelope: Envelope, default_message: str) -> Envelope:
    """Raise ExternalServiceError unless the envelope and all its results succeeded.

    Args:
        envelope: Parsed backend response.
        default_message: Used when the backend gives no message of its own.

    Returns:
        The same envelope, for chaining.
    """
    if not envelope.success:
        message = envelope.message or default_message
        logger.error("hosted.call_failed", message=message)
        raise ExternalServiceError(message)

    if envelope.results:
        failed = [result for result in envelope.results if not result.success]
        if failed:
            logger.error(
                "hosted.records_failed",
                failed_count=len(failed),
                failed=[result.model_dump() for result in failed],
            )
            raise ExternalServiceError(
                failed[0].message or default_message,
                failed_records=failed,
            )

    return envelope


class HostedBackendClient:
    """Async client for the hosted record backend.

    Args:
        base_url: Root URL of the backend API.
        project_id: Project identifier sent with every request.
        public_key: Public API key sent with every request.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        project_id: str,
        public_key: str,
        timeout: float = 15.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {
            "X-Project-Id": project_id,
            "X-Public-Key": public_key,
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        """Create a new httpx client with the configured headers and timeout."""
        return httpx.AsyncClient(headers=self._headers, timeout=self._timeout)

    async def _call(
        self,
        method: str,
        path: str,
        payload: dict[str, Any],
        default_message: str,
    ) -> Envelope:
        url = f"{self._base_url}{path}"
        try:
            async with self._client() as client:
                response = await client.request(method, url, json=payload)
                response.raise_for_status()
                envelope = Envelope.model_validate(response.json())
        except httpx.HTTPError as exc:
            logger.error("hosted.transport_error", method=method, path=path, error=str(exc))
            raise ExternalServiceError(f"{default_message}: {exc}") from exc
        except ValueError as exc:  # JSON decoding or envelope validation
            logger.error("hosted.malformed_response", method=method, path=path, error=str(exc))
            raise ExternalServiceError(f"{default_message}: malformed response") from exc

        return raise_for_envelope(envelope, default_message)

    async def fetch_records(self, table: str, params: dict[str, Any]) -> Envelope:
        """Query records of ``table`` (``fields`` selector, optional ``where``)."""
        return await self._call(
            "POST", f"/tables/{table}/query", params, f"Failed to fetch {table} records"
        )

    async def get_record_by_id(
        self, table: str, record_id: int, params: dict[str, Any]
    ) -> Envelope:
        return await self._call(
            "POST",
            f"/tables/{table}/records/{record_id}/query",
            params,
            f"Failed to fetch {table} record {record_id}",
        )

    async def create_record(self, table: str, params: dict[str, Any]) -> Envelope:
        """Create the records listed under ``params["records"]``."""
        return await self._call(
            "POST", f"/tables/{table}/records", params, f"Failed to create {table} record"
        )

    async def update_record(self, table: str, params: dict[str, Any]) -> Envelope:
        """Update the records listed under ``params["records"]`` (each carries ``Id``)."""
        return await self._call(
            "PATCH", f"/tables/{table}/records", params, f"Failed to update {table} record"
        )

    async def delete_record(self, table: str, params: dict[str, Any]) -> Envelope:
        """Delete the records whose ids are listed under ``params["RecordIds"]``."""
        return await self._call(
            "DELETE", f"/tables/{table}/records", params, f"Failed to delete {table} record"
        )


def first_result_data(envelope: Envelope, operation: str) -> dict[str, Any]:
    """Data of the first per-record result of a mutation.

    Raises:
        ExternalServiceError: If the backend returned no per-record results.
    """
    if not envelope.results:
        raise ExternalServiceError(f"No result returned from {operation} operation")
    return envelope.results[0].data or {}
