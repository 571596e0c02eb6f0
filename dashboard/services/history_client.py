from abc import ABC, abstractmethod

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from dashboard.core.exceptions import FetchFailureError
from dashboard.schemas.status import Sample, SampleSet, ViewWindow

logger = structlog.get_logger()

_samples_adapter = TypeAdapter(list[Sample])


class HistorySource(ABC):
    @abstractmethod
    async def fetch_samples(self, window: ViewWindow) -> SampleSet:
        """Return the samples recorded inside ``window``, oldest first."""
        ...


class HistoryClient(HistorySource):
    """Fetches probe history for a window from the status backend over HTTP."""

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        history_path: str = "/api/status/history",
    ):
        self.base_url = base_url.rstrip("/")
        self._history_path = history_path
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(connect=5.0, read=30.0, write=5.0, pool=5.0)
        )

    async def fetch_samples(self, window: ViewWindow) -> SampleSet:
        """GET the samples between ``window.start`` and ``window.end``.

        Any transport error, non-2xx status or malformed payload raises
        FetchFailureError.
        """
        url = f"{self.base_url}{self._history_path}"
        params = {
            "start": window.start.isoformat().replace("+00:00", "Z"),
            "end": window.end.isoformat().replace("+00:00", "Z"),
        }

        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.ConnectError as e:
            logger.warning("history_fetch_failed", reason="connect", url=url)
            raise FetchFailureError(f"Cannot connect to history backend at {self.base_url}: {e}")
        except httpx.TimeoutException:
            logger.warning("history_fetch_failed", reason="timeout", url=url)
            raise FetchFailureError("History backend request timed out.")
        except httpx.HTTPStatusError as e:
            logger.warning("history_fetch_failed", reason="status", status=e.response.status_code)
            raise FetchFailureError(f"History backend returned error: {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning("history_fetch_failed", reason="transport", error=str(e))
            raise FetchFailureError(f"History request failed: {e}")
        except ValueError:
            logger.warning("history_fetch_failed", reason="invalid_json")
            raise FetchFailureError("History backend returned invalid JSON.")

        # The backend encodes an empty history as null
        if payload is None:
            payload = []
        try:
            samples = _samples_adapter.validate_python(payload)
        except ValidationError as e:
            logger.warning("history_fetch_failed", reason="invalid_payload", errors=e.error_count())
            raise FetchFailureError("History backend returned malformed samples.")

        return SampleSet(window=window, samples=tuple(samples))

    async def close(self):
        """Close the underlying HTTP client."""
        await self._client.aclose()
