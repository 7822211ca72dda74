"""In-memory request and lookup counters for the /metrics endpoint."""
import time
from collections.abc import MutableMapping
from threading import Lock

_start_time = time.monotonic()
_counts: MutableMapping[str, int] = {}
_lock = Lock()


def _incr(bucket: str) -> None:
    with _lock:
        _counts[bucket] = _counts.get(bucket, 0) + 1


def record_request(status_code: int) -> None:
    if 200 <= status_code < 300:
        bucket = "2xx"
    elif 400 <= status_code < 500:
        bucket = "4xx"
    elif status_code >= 500:
        bucket = "5xx"
    else:
        bucket = "other"
    _incr(bucket)


def record_lookup(failed: bool) -> None:
    _incr("lookups")
    if failed:
        _incr("lookup_failures")


def get_metrics() -> dict:
    with _lock:
        counts = dict(_counts)
    uptime_seconds = time.monotonic() - _start_time
    requests_total = sum(v for k, v in counts.items() if k in ("2xx", "4xx", "5xx", "other"))
    return {
        "requests_total": requests_total,
        "requests_2xx": counts.get("2xx", 0),
        "requests_4xx": counts.get("4xx", 0),
        "requests_5xx": counts.get("5xx", 0),
        "lookups_total": counts.get("lookups", 0),
        "lookup_failures_total": counts.get("lookup_failures", 0),
        "uptime_seconds": round(uptime_seconds, 1),
    }
