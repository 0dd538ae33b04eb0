"""HTTP client for the external benchmark service."""

from typing import Any, Optional

import httpx
import structlog

from benchforge.config import BenchmarkServiceSettings
from benchforge.models.registry import Attachment

logger = structlog.get_logger(__name__)


class BenchmarkError(Exception):
    """Base exception for benchmark run failures."""

    pass


class ConnectivityError(BenchmarkError):
    """Benchmark service did not answer the health probe."""

    pass


class SubmissionError(BenchmarkError):
    """Benchmark submission was rejected or could not be sent."""

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.detail = detail
        self.status_code = status_code


def _error_detail(response: httpx.Response) -> Optional[str]:
    """Extract the service-supplied ``detail`` message, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("detail"):
        detail = body["detail"]
        return detail if isinstance(detail, str) else str(detail)
    return None


class BenchmarkServiceClient:
    """Client for the benchmark service ``/health`` and ``/benchmark`` endpoints."""

    def __init__(
        self,
        settings: Optional[BenchmarkServiceSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize client."""
        self._settings = settings or BenchmarkServiceSettings()
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._settings.url

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self._settings.url,
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def probe(self) -> None:
        """Check that the service is reachable.

        Raises:
            ConnectivityError: on a transport error or any status but 200.
        """
        client = await self._get_client()
        try:
            response = await client.get("/health", headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.warning("Health check failed", url=self.base_url, error=str(e))
            raise ConnectivityError(f"Benchmark service unreachable: {e}") from e

        if response.status_code != httpx.codes.OK:
            logger.warning("Health check failed", url=self.base_url, status=response.status_code)
            raise ConnectivityError(
                f"Benchmark service unhealthy: HTTP {response.status_code}"
            )

    async def submit(self, attachment: Attachment, model_format: str) -> dict[str, Any]:
        """Upload a model file and return the raw metrics payload.

        Raises:
            SubmissionError: on a transport error, a non-200 status or a
                body that is not a JSON object.
        """
        client = await self._get_client()
        files = {"file": (attachment.filename, attachment.content, attachment.content_type)}
        data = {"model_format": model_format}

        try:
            response = await client.post("/benchmark", files=files, data=data)
        except httpx.HTTPError as e:
            raise SubmissionError(f"Benchmark request failed: {e}") from e

        if response.status_code != httpx.codes.OK:
            detail = _error_detail(response)
            logger.warning(
                "Benchmark rejected",
                status=response.status_code,
                detail=detail,
            )
            raise SubmissionError(
                detail or "Benchmark failed",
                detail=detail,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise SubmissionError("Malformed benchmark response") from e
        if not isinstance(payload, dict):
            raise SubmissionError("Malformed benchmark response")

        logger.debug("Benchmark response received", fields=sorted(payload))
        return payload

    async def __aenter__(self) -> "BenchmarkServiceClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
