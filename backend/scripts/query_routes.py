#!/usr/bin/env python3
"""
Answer route queries from the command line.

Each input line is "<stop_id> <name>", e.g.:
    12109 Clementi
    17171 Kent Ridge
For each line, prints the bus services from the stop to stops whose name contains <name>.

Examples:
    python scripts/query_routes.py < queries.txt
    python scripts/query_routes.py --input queries.txt --catalog data/catalog.json
    python scripts/query_routes.py --api-url https://bus-api.example.com < queries.txt
"""
import argparse
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

# Add backend root to path
backend = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend))

from bus_sg.busapi.client import BusApiClient
from bus_sg.data.catalog import load_catalog
from bus_sg.routes.service import DEFAULT_MAX_WORKERS, find_bus_services_between


def parse_query(line: str) -> tuple[str, str] | None:
    """Split a query line into (stop_id, name). None for blank lines."""
    line = line.strip()
    if not line:
        return None
    stop_id, _, name = line.partition(" ")
    return stop_id, name.strip()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Find bus services between a stop and stops matching a name")
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="File with one '<stop_id> <name>' query per line (default: stdin)",
    )
    parser.add_argument(
        "--catalog",
        default=backend / "data" / "catalog.json",
        type=Path,
        help="Catalog JSON with stops and service routes",
    )
    parser.add_argument("--api-url", default="", help="Bus API base URL (overrides --catalog)")
    parser.add_argument("--workers", type=int, default=DEFAULT_MAX_WORKERS, help="Lookup thread pool size")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log lookups to stderr")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s %(message)s",
    )

    if args.api_url:
        catalog = BusApiClient(args.api_url)
    else:
        if not args.catalog.exists():
            print(f"Error: catalog not found: {args.catalog}", file=sys.stderr)
            return 1
        catalog = load_catalog(args.catalog)

    source = open(args.input, encoding="utf-8") if args.input else sys.stdin
    try:
        with ThreadPoolExecutor(max_workers=max(1, args.workers)) as pool:
            for line in source:
                query = parse_query(line)
                if query is None:
                    continue
                stop_id, name = query
                try:
                    stop = catalog.get_stop(stop_id)
                except RuntimeError as e:
                    print(f"Error: {e}", file=sys.stderr)
                    continue
                if stop is None:
                    print(f"Unknown bus stop: {stop_id}", file=sys.stderr)
                    continue
                routes = find_bus_services_between(stop, name, catalog=catalog, executor=pool)
                print(routes.describe())
    finally:
        if source is not sys.stdin:
            source.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
