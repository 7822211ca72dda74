"""Pytest configuration and fixtures."""
import sys
from pathlib import Path

import pytest

# Ensure backend root is on path when running pytest from repo root or backend
backend = Path(__file__).resolve().parent.parent
if str(backend) not in sys.path:
    sys.path.insert(0, str(backend))

from bus_sg.data.catalog import InMemoryCatalog  # noqa: E402

SAMPLE_CATALOG = {
    "stops": {
        "Stop-001": "Main Street",
        "Stop-002": "Harbour Front",
        "Stop-003": "Central",
        "Stop-004": "Other",
    },
    "services": {
        "Svc-10": ["Stop-001", "Stop-002", "Stop-003"],
        "Svc-20": ["Stop-001", "Stop-004"],
    },
}


@pytest.fixture
def sample_catalog() -> InMemoryCatalog:
    return InMemoryCatalog.from_mapping(SAMPLE_CATALOG)
