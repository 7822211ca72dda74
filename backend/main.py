import logging
import re
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from settings import get_settings
from bus_sg.busapi.client import BusApiClient
from bus_sg.busapi.models import BusRoutesResponse, StopInfo, StopServicesResponse
from bus_sg.data.catalog import StopCatalog, load_catalog
from bus_sg.data.models import BusStop
from bus_sg.middleware import OptionalAPIKeyMiddleware, RequestLoggingMiddleware, get_valid_api_keys
from bus_sg.monitoring import get_metrics
from bus_sg.routes.service import find_bus_services_between

settings = get_settings()
BACKEND_ROOT = Path(__file__).resolve().parent
CATALOG_PATH = BACKEND_ROOT / settings.catalog_path

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=["100/minute"])

STOP_ID_MAX_LEN = 64
STOP_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_\-]+$")
NAME_MAX_LEN = 100


def build_catalog() -> StopCatalog:
    if settings.bus_api_base_url:
        return BusApiClient(settings.bus_api_base_url, timeout_seconds=settings.bus_api_timeout_seconds)
    return load_catalog(CATALOG_PATH)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.catalog = build_catalog()
    app.state.executor = ThreadPoolExecutor(
        max_workers=max(1, settings.lookup_max_workers), thread_name_prefix="bus-lookup"
    )
    yield
    app.state.executor.shutdown(wait=True)
    app.state.executor = None
    app.state.catalog = None


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    """Consistent JSON 500 for unhandled exceptions. Validation/HTTP errors pass through."""
    from fastapi.exceptions import RequestValidationError
    if isinstance(exc, (HTTPException, RequestValidationError)):
        raise exc
    logger.exception("telemetry unhandled_exception path=%s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again later."},
    )


# Last added = outermost: CORS, then auth, then request logging, then the default rate limit.
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    OptionalAPIKeyMiddleware,
    api_key_required=settings.api_key_required,
    api_keys=get_valid_api_keys(settings.api_keys),
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _catalog() -> StopCatalog:
    catalog = getattr(app.state, "catalog", None)
    if catalog is None:
        catalog = build_catalog()
        app.state.catalog = catalog
    return catalog


def _resolve_stop(stop_id: str) -> BusStop:
    if not stop_id or len(stop_id) > STOP_ID_MAX_LEN or not STOP_ID_PATTERN.match(stop_id):
        raise HTTPException(
            status_code=400,
            detail="Invalid stop_id (alphanumeric, underscore, hyphen only; max 64 chars).",
        )
    try:
        stop = _catalog().get_stop(stop_id)
    except RuntimeError as e:
        logger.warning("telemetry catalog_unavailable stop_id=%s error=%s", stop_id, str(e))
        raise HTTPException(status_code=503, detail="Bus data unavailable. Try again later.") from e
    if stop is None:
        raise HTTPException(status_code=404, detail=f"Bus stop not found: {stop_id}.")
    return stop


@app.get("/favicon.ico", include_in_schema=False)
@limiter.exempt
def favicon(request: Request):
    return Response(status_code=204)


@app.get("/health")
@limiter.exempt
def health(request: Request):
    logger.info("telemetry route=health")
    return {"status": "ok"}


@app.get("/metrics")
@limiter.exempt
def metrics(request: Request):
    """Request and lookup counters plus uptime."""
    return get_metrics()


@app.get("/stops/{stop_id}", response_model=StopInfo)
def get_stop(request: Request, stop_id: str):
    return StopInfo.from_stop(_resolve_stop(stop_id))


@app.get("/stops/{stop_id}/services", response_model=StopServicesResponse)
def get_stop_services(request: Request, stop_id: str):
    stop = _resolve_stop(stop_id)
    try:
        services = _catalog().services_at(stop)
    except RuntimeError as e:
        logger.warning("telemetry catalog_unavailable stop_id=%s error=%s", stop_id, str(e))
        raise HTTPException(status_code=503, detail="Bus data unavailable. Try again later.") from e
    return StopServicesResponse(stop_id=stop.stop_id, services=sorted(s.service_id for s in services))


@app.get("/stops/{stop_id}/routes", response_model=BusRoutesResponse)
def get_routes(request: Request, stop_id: str, name: str):
    """
    Bus services from stop_id to any stop whose name contains `name` (case-insensitive).
    `failed` is true when a lookup error forced an empty result.
    """
    if len(name) > NAME_MAX_LEN:
        raise HTTPException(status_code=400, detail=f"name must be at most {NAME_MAX_LEN} characters")
    stop = _resolve_stop(stop_id)
    logger.info("telemetry route=routes stop_id=%s name=%s", stop_id, name[:50])
    routes = find_bus_services_between(
        stop,
        name,
        catalog=_catalog(),
        executor=getattr(app.state, "executor", None),
        max_workers=settings.lookup_max_workers,
    )
    return BusRoutesResponse.from_routes(routes)
