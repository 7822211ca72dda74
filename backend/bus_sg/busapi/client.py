"""
Bus API client: resolves stops, the services calling at them and each service's
ordered route from a remote JSON API. Includes timeouts, retry with exponential
backoff, and clear error handling. Responses are not cached.

Endpoints:
    GET {base}/bus_stops/{stop_id}       -> {"stop_id", "name", "services": [service_id, ...]}
    GET {base}/bus_services/{service_id} -> {"service_id", "stops": [{"stop_id", "name"} | stop_id, ...]}
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from bus_sg.data.models import BusService, BusStop

logger = logging.getLogger(__name__)

BUS_API_REQUEST_TIMEOUT_SECONDS = 10.0
BUS_API_RETRY_ATTEMPTS = 3
BUS_API_RETRY_BASE_DELAY_SECONDS = 0.5
BUS_API_RETRY_MAX_DELAY_SECONDS = 4.0


def _normalize_stop(raw: dict[str, Any] | str) -> BusStop:
    """Accept either a bare stop id or a {stop_id, name} object."""
    if isinstance(raw, str):
        return BusStop(stop_id=raw)
    stop_id = raw.get("stop_id")
    if stop_id is None:
        stop_id = raw.get("id")
    name = raw.get("name") or raw.get("stop_name") or ""
    return BusStop(stop_id="" if stop_id is None else str(stop_id), name=str(name))


def _normalize_stop_response(raw: dict[str, Any]) -> tuple[BusStop, list[str]]:
    """Normalize a bus_stops response to (stop, service ids)."""
    stop = _normalize_stop(raw)
    services = raw.get("services") or []
    if not isinstance(services, list):
        services = []
    service_ids = [str(s.get("service_id", "")) if isinstance(s, dict) else str(s) for s in services]
    return stop, [s for s in service_ids if s]


def _normalize_route_response(raw: dict[str, Any]) -> tuple[BusStop, ...]:
    stops = raw.get("stops") or []
    if not isinstance(stops, list):
        stops = []
    route = [_normalize_stop(s) for s in stops if isinstance(s, (dict, str))]
    return tuple(s for s in route if s.stop_id)


@dataclass(frozen=True)
class RemoteBusService(BusService):
    """A service whose route is fetched from the bus API when first searched."""

    client: "BusApiClient | None" = field(default=None, compare=False, repr=False)

    def bus_stops(self) -> tuple[BusStop, ...]:
        if self.client is None:
            return self.route
        return self.client.get_service_route(self.service_id)


class BusApiClient:
    """Stop catalog backed by the bus API. Safe to share across lookup threads."""

    def __init__(self, base_url: str, timeout_seconds: float = BUS_API_REQUEST_TIMEOUT_SECONDS):
        self._base = base_url.rstrip("/")
        self._timeout = timeout_seconds

    def _get_json(self, path: str) -> dict[str, Any] | None:
        """GET {base}/{path}. None on 404; RuntimeError once retries are exhausted."""
        url = f"{self._base}/{path}"
        last_error: Exception | None = None
        for attempt in range(BUS_API_RETRY_ATTEMPTS):
            try:
                with httpx.Client(timeout=self._timeout) as client:
                    resp = client.get(url)
                    if resp.status_code == 404:
                        return None
                    resp.raise_for_status()
                    data = resp.json()
                return data if isinstance(data, dict) else {}
            except httpx.TimeoutException as e:
                last_error = e
                logger.warning(
                    "telemetry bus_api_timeout attempt=%s path=%s",
                    attempt + 1,
                    path,
                    extra={"attempt": attempt + 1, "path": path},
                )
            except (httpx.HTTPError, ValueError) as e:
                last_error = e
                logger.warning(
                    "telemetry bus_api_error attempt=%s path=%s error=%s",
                    attempt + 1,
                    path,
                    str(e),
                    extra={"attempt": attempt + 1, "path": path, "error": str(e)},
                )
            if attempt < BUS_API_RETRY_ATTEMPTS - 1:
                delay = min(
                    BUS_API_RETRY_BASE_DELAY_SECONDS * (2**attempt),
                    BUS_API_RETRY_MAX_DELAY_SECONDS,
                )
                time.sleep(delay)
        msg = f"Bus API unavailable for {path} (timeout or error after retries)."
        if last_error:
            raise RuntimeError(msg) from last_error
        raise RuntimeError(msg)

    def get_stop(self, stop_id: str) -> BusStop | None:
        data = self._get_json(f"bus_stops/{stop_id}")
        if data is None:
            return None
        stop, _ = _normalize_stop_response(data)
        return stop if stop.stop_id else BusStop(stop_id=stop_id, name=stop.name)

    def get_service_route(self, service_id: str) -> tuple[BusStop, ...]:
        data = self._get_json(f"bus_services/{service_id}")
        if data is None:
            return ()
        route = _normalize_route_response(data)
        logger.info("telemetry bus_api_route_fetched service_id=%s stops=%s", service_id, len(route))
        return route

    def services_at(self, stop: BusStop) -> set[BusService]:
        data = self._get_json(f"bus_stops/{stop.stop_id}")
        if data is None:
            return set()
        _, service_ids = _normalize_stop_response(data)
        return {RemoteBusService(service_id=sid, client=self) for sid in service_ids}
