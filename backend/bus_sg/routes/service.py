"""
Bus services between a stop and any stop with a matching (partial) name.
One lookup task per service at the origin stop runs on a thread pool; the
calling thread joins them all. Any task or join error turns the whole result
into an empty mapping with failed=True (fail-closed) and is reported, never raised.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from bus_sg.data.catalog import StopCatalog
from bus_sg.data.models import BusRoutes, BusService, BusStop
from bus_sg.monitoring.metrics import record_lookup

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def _log_failure(message: str) -> None:
    logger.error("telemetry lookup_failed message=%s", message)


def _join_lookups(
    services: Iterable[BusService],
    name: str,
    executor: Executor,
) -> dict[BusService, frozenset[BusStop]]:
    futures: dict[BusService, Future[frozenset[BusStop]]] = {
        svc: executor.submit(svc.find_stops_with, name) for svc in services
    }
    matches: dict[BusService, frozenset[BusStop]] = {}
    for svc, fut in futures.items():
        stops = fut.result()
        if stops:
            matches[svc] = frozenset(stops)
    return matches


def find_bus_services_between(
    stop: BusStop | None,
    name: str | None,
    *,
    catalog: StopCatalog,
    executor: Executor | None = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
    report: Callable[[str], None] | None = None,
) -> BusRoutes | None:
    """
    Return the services at `stop` whose route has a stop matching `name`.
    None when the query is invalid (no stop, empty stop id, or no name); nothing is dispatched then.
    Pass a shared `executor` to reuse a pool across calls; otherwise one is created per call.
    """
    if stop is None or not stop.stop_id or name is None:
        return None
    report = report or _log_failure

    try:
        services = catalog.services_at(stop)
        if not services:
            matches = {}
        elif executor is not None:
            matches = _join_lookups(services, name, executor)
        else:
            workers = max(1, min(max_workers, len(services)))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bus-lookup") as pool:
                matches = _join_lookups(services, name, pool)
    except Exception as e:
        report(f"Unable to complete query: {e}")
        record_lookup(failed=True)
        return BusRoutes(stop=stop, name=name, services={}, failed=True)

    record_lookup(failed=False)
    logger.info(
        "telemetry lookup_done stop_id=%s services=%s matched=%s",
        stop.stop_id,
        len(services),
        len(matches),
        extra={"stop_id": stop.stop_id, "matched": len(matches)},
    )
    return BusRoutes(stop=stop, name=name, services=matches)
