"""Pydantic models for bus route API responses."""

from pydantic import BaseModel

from bus_sg.data.models import BusRoutes, BusStop


class StopInfo(BaseModel):
    stop_id: str
    name: str

    @classmethod
    def from_stop(cls, stop: BusStop) -> "StopInfo":
        return cls(stop_id=stop.stop_id, name=stop.name)


class StopServicesResponse(BaseModel):
    stop_id: str
    services: list[str]


class ServiceMatch(BaseModel):
    service_id: str
    stops: list[StopInfo]


class BusRoutesResponse(BaseModel):
    stop: StopInfo
    name: str
    failed: bool
    services: list[ServiceMatch]

    @classmethod
    def from_routes(cls, routes: BusRoutes) -> "BusRoutesResponse":
        services = [
            ServiceMatch(
                service_id=svc.service_id,
                stops=[StopInfo.from_stop(s) for s in sorted(stops, key=lambda s: s.stop_id)],
            )
            for svc, stops in sorted(routes.services.items(), key=lambda kv: kv[0].service_id)
        ]
        return cls(stop=StopInfo.from_stop(routes.stop), name=routes.name, failed=routes.failed, services=services)
