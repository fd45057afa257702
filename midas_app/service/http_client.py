"""HTTP client for the Midas market-data/backtest service."""

import socket
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

import orjson

from ..config.defaults import ServiceParams
from ..errors import SimulationError, SourceError
from ..models.candidate import Candidate
from ..models.trade import SimulateRequest, SimulationResult
from .base import CandidateSource, SimulationService


class HttpBacktestClient(SimulationService, CandidateSource):
    """Simulates trades and fetches historical rankings over HTTP."""

    def __init__(self, config: Optional[ServiceParams] = None,
                 headers: Optional[dict[str, str]] = None, name: str = "http"):
        super().__init__(name)
        self.config = config or ServiceParams()
        self.headers = headers or {}
        self.last_session_id: Optional[str] = None

        parsed = urlparse(self.config.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid base URL: {self.config.base_url}")

    def simulate(self, request: SimulateRequest) -> SimulationResult:
        """Simulate one trade on the remote engine."""
        self._call_count += 1
        try:
            body = self._post(self.config.simulate_path, request.to_payload())
        except _RequestFailed as e:
            self._error_count += 1
            raise SimulationError(str(e), ticker=request.ticker, status_code=e.status_code)

        try:
            return SimulationResult.from_payload(body, ticker=request.ticker)
        except (ValueError, AttributeError) as e:
            self._error_count += 1
            self.logger.warning(
                "Malformed simulation response",
                service=self.name,
                ticker=request.ticker,
                error=str(e)
            )
            raise SimulationError(f"Malformed simulation response: {e}", ticker=request.ticker)

    def list_candidates(self, filter_criteria: Optional[dict[str, Any]] = None) -> list[Candidate]:
        """
        Fetch historical rankings as candidates.

        The service answers either with a bare list of rows or with
        ``{"rankings": [...], "session_id": ...}``.
        """
        try:
            body = self._post(self.config.rankings_path, dict(filter_criteria or {}))
        except _RequestFailed as e:
            raise SourceError(str(e), status_code=e.status_code)

        if isinstance(body, list):
            rows = body
            self.last_session_id = None
        elif isinstance(body, dict) and isinstance(body.get("rankings"), list):
            rows = body["rankings"]
            self.last_session_id = body.get("session_id")
        else:
            raise SourceError("Unexpected rankings response shape")

        try:
            candidates = [Candidate.from_payload(row) for row in rows]
        except (ValueError, TypeError, AttributeError) as e:
            raise SourceError(f"Malformed ranking row: {e}")

        self.logger.info(
            "Fetched candidate pool",
            service=self.name,
            count=len(candidates),
            reference_date=(filter_criteria or {}).get("reference_date")
        )
        return candidates

    def _post(self, path: str, payload: dict[str, Any]) -> Any:
        """POST a JSON payload and decode the JSON response."""
        url = self.config.base_url.rstrip("/") + path
        data = orjson.dumps(payload)
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'User-Agent': 'midas-app/1.0'
        }
        headers.update(self.headers)

        req = Request(url, data=data, headers=headers, method="POST")

        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as response:
                raw = response.read()

        except HTTPError as e:
            detail = _error_detail(e)
            self.logger.warning(
                "Service HTTP error",
                service=self.name,
                url=url,
                error_code=e.code,
                detail=detail
            )
            raise _RequestFailed(f"HTTP {e.code}: {detail or e.reason}", status_code=e.code)

        except (OSError, URLError, socket.timeout) as e:
            self.logger.warning(
                "Service network error",
                service=self.name,
                url=url,
                error=str(e)
            )
            raise _RequestFailed(f"Network error: {e}")

        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise _RequestFailed(f"Invalid JSON response: {e}")

    def health_check(self) -> bool:
        """Check if the service host is reachable."""
        try:
            parsed = urlparse(self.config.base_url)
            health_url = f"{parsed.scheme}://{parsed.netloc}"

            req = Request(health_url, method='HEAD')
            with urlopen(req, timeout=5) as response:
                return 200 <= response.getcode() < 400

        except (OSError, URLError) as e:
            self.logger.warning(
                "Health check failed",
                service=self.name,
                error=str(e)
            )
            return False


class _RequestFailed(Exception):
    """Transport-level failure, mapped to the caller's error type."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _error_detail(error: HTTPError) -> Optional[str]:
    """Extract FastAPI-style ``detail`` from an error body, if any."""
    try:
        body = orjson.loads(error.read())
    except (OSError, ValueError):
        return None
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return None
