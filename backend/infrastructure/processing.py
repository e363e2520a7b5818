"""Data processing collaborators for the generic visualization route.

By default record arrays are aggregated in-process.  Deployments that run
the aggregation as a separate service set ``DATA_PROCESSOR_URL`` and the
application installs an :class:`HttpDataProcessor` during start-up.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from backend.core.process_data import InvalidDataError, process_data

log = logging.getLogger(__name__)


class DataProcessorError(RuntimeError):
    """Raised when the remote processing service rejects or fails a request."""


class DataProcessor(Protocol):
    """Contract for record aggregation backends."""

    async def process(self, data: Any, data_type: str) -> dict[str, Any]:
        """Aggregate ``data`` into chart ready structures."""


class LocalDataProcessor:
    """Runs :func:`backend.core.process_data.process_data` in-process."""

    async def process(self, data: Any, data_type: str) -> dict[str, Any]:
        return process_data(data, data_type)


class HttpDataProcessor:
    """POSTs ``{data, type}`` to a process-data service."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    async def process(self, data: Any, data_type: str) -> dict[str, Any]:
        try:
            response = await self._client.post(self._url, json={"data": data, "type": data_type})
        except httpx.HTTPError as exc:
            raise DataProcessorError(f"process-data service unreachable: {exc}") from exc

        if response.is_error:
            log.warning("process-data service at %s answered %s", self._url, response.status_code)
        if response.status_code == 400:
            raise InvalidDataError(_error_message(response) or "Invalid data format. Expected an array of records.")
        if response.is_error:
            raise DataProcessorError(_error_message(response) or f"process-data returned {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise DataProcessorError("process-data service returned a non-JSON body") from exc

    async def aclose(self) -> None:  # pragma: no cover - best effort cleanup
        if self._owns_client:
            await self._client.aclose()


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None


_processor: DataProcessor = LocalDataProcessor()


def configure_data_processor(processor: DataProcessor) -> None:
    """Install the processor used by the generic visualization route."""

    global _processor
    _processor = processor


def get_data_processor() -> DataProcessor:
    """Return the currently configured data processor."""

    return _processor


__all__ = [
    "DataProcessor",
    "DataProcessorError",
    "HttpDataProcessor",
    "LocalDataProcessor",
    "configure_data_processor",
    "get_data_processor",
]
