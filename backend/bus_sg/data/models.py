"""
Bus stops, bus services and the result of a route lookup between them.
All three are immutable once built; services compare and hash by service_id.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class BusStop:
    stop_id: str
    name: str = ""

    def matches_name(self, fragment: str) -> bool:
        """Case-insensitive substring match on the stop name. Empty fragment matches everything."""
        return fragment.lower() in self.name.lower()

    def __str__(self) -> str:
        return f"{self.stop_id} {self.name}" if self.name else self.stop_id


@dataclass(frozen=True)
class BusService:
    service_id: str
    route: tuple[BusStop, ...] = field(default=(), compare=False, repr=False)

    def bus_stops(self) -> tuple[BusStop, ...]:
        """Ordered stops this service calls at."""
        return self.route

    def find_stops_with(self, name: str) -> frozenset[BusStop]:
        return frozenset(stop for stop in self.bus_stops() if stop.matches_name(name))

    def __str__(self) -> str:
        return self.service_id


@dataclass(frozen=True)
class BusRoutes:
    """
    Services connecting `stop` to stops whose name contains `name`.
    A service is a key of `services` only if it matched at least one stop.
    `failed` is True when the lookup degraded to an empty mapping after an error.
    """

    stop: BusStop
    name: str
    services: Mapping[BusService, frozenset[BusStop]]
    failed: bool = False

    def __post_init__(self) -> None:
        # Services without a matched stop are never keys.
        frozen = {svc: frozenset(stops) for svc, stops in self.services.items()}
        frozen = {svc: stops for svc, stops in frozen.items() if stops}
        object.__setattr__(self, "services", MappingProxyType(frozen))

    def __hash__(self) -> int:
        return hash((self.stop, self.name, frozenset(self.services.items()), self.failed))

    def service_ids(self) -> list[str]:
        return sorted(svc.service_id for svc in self.services)

    def describe(self) -> str:
        lines = [f"Search for: {self.stop.stop_id} <-> {self.name}:", f"From {self.stop}"]
        if self.failed:
            lines.append("- Lookup failed, no results available")
        for svc in sorted(self.services, key=lambda s: s.service_id):
            lines.append(f"- Can take {svc} to:")
            for stop in sorted(self.services[svc], key=lambda s: s.stop_id):
                lines.append(f"  - {stop}")
        return "\n".join(lines)
