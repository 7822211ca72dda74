"""
In-memory stop catalog: stops, services and their ordered routes.
Built from plain mappings or a JSON file of the same shape:
    {"stops": {"<stop_id>": "<name>", ...}, "services": {"<service_id>": ["<stop_id>", ...], ...}}
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol

from bus_sg.data.models import BusService, BusStop

logger = logging.getLogger(__name__)


class StopCatalog(Protocol):
    def services_at(self, stop: BusStop) -> set[BusService]: ...

    def get_stop(self, stop_id: str) -> BusStop | None: ...


class InMemoryCatalog:
    def __init__(self, services: Iterable[BusService] = (), stops: Iterable[BusStop] = ()):
        self._services: dict[str, BusService] = {s.service_id: s for s in services}
        self._stops: dict[str, BusStop] = {s.stop_id: s for s in stops}
        self._by_stop: dict[str, set[BusService]] = {}
        for svc in self._services.values():
            for stop in svc.bus_stops():
                self._stops.setdefault(stop.stop_id, stop)
                self._by_stop.setdefault(stop.stop_id, set()).add(svc)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> InMemoryCatalog:
        stop_names = data.get("stops") or {}
        stops = {str(sid): BusStop(stop_id=str(sid), name=str(name or "")) for sid, name in stop_names.items()}
        services = []
        for service_id, stop_ids in (data.get("services") or {}).items():
            route = []
            for sid in stop_ids:
                stop = stops.get(str(sid))
                if stop is None:
                    raise ValueError(f"Service {service_id} references unknown stop {sid}")
                route.append(stop)
            services.append(BusService(service_id=str(service_id), route=tuple(route)))
        return cls(services=services, stops=stops.values())

    def services_at(self, stop: BusStop) -> set[BusService]:
        return set(self._by_stop.get(stop.stop_id, ()))

    def get_stop(self, stop_id: str) -> BusStop | None:
        return self._stops.get(stop_id)

    def get_service(self, service_id: str) -> BusService | None:
        return self._services.get(service_id)

    def __len__(self) -> int:
        return len(self._services)


def load_catalog(path: str | Path) -> InMemoryCatalog:
    """Read a catalog JSON file. Missing file returns an empty catalog."""
    path = Path(path)
    if not path.exists():
        logger.warning("telemetry catalog_missing path=%s", path)
        return InMemoryCatalog()
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    catalog = InMemoryCatalog.from_mapping(data)
    logger.info("telemetry catalog_loaded path=%s services=%s", path, len(catalog))
    return catalog
