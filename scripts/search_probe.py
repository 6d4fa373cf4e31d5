#!/usr/bin/env python3
"""
Run one search against the WanderNav backend and print the normalized results.

Useful for checking that /api/search is reachable and that its rows map
onto places, users and hazards the way the search screen expects.

Usage:
    # Search places
    python scripts/search_probe.py "central park"

    # Search users on a different backend
    python scripts/search_probe.py jane --type users --host http://localhost:8080

    # Bias place results around a point
    python scripts/search_probe.py pier --near 34.05 -118.24

    # Print JSON instead of a table
    python scripts/search_probe.py coffee --json

Environment:
    API_BASE_URL: backend base URL (default from settings)

When the backend is unreachable the heuristic fallback results are shown,
marked with source=fallback, unless --no-fallback is given.
"""
import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from wandernav.core.search.domain import CURRENT_LOCATION_TEXT, LocationPoint, SearchTab  # noqa: E402
from wandernav.core.search.errors import NetworkError  # noqa: E402
from wandernav.core.search.fallback import heuristic_results  # noqa: E402
from wandernav.core.search.results import normalize_results  # noqa: E402
from wandernav.infra.api_client import SearchApiClient  # noqa: E402
from wandernav.infra.http_client import close_all_sessions  # noqa: E402


async def probe(args) -> int:
    tab = SearchTab(args.type)
    near = None
    if args.near:
        near = LocationPoint(latitude=args.near[0], longitude=args.near[1], name=CURRENT_LOCATION_TEXT)

    client = SearchApiClient(args.host)
    try:
        raw = await client.search(args.query, tab, near=near)
        items = normalize_results(raw, tab)
    except NetworkError as exc:
        print(f"Error: search failed: {exc}", file=sys.stderr)
        if args.no_fallback:
            return 1
        items = heuristic_results(args.query, tab)
    finally:
        await close_all_sessions()

    if args.json:
        print(json.dumps([asdict(item) for item in items], indent=2))
        return 0

    if not items:
        print(f'No results found for "{args.query}".')
        return 0

    for item in items:
        row = asdict(item)
        kind = row.pop("type")
        source = row.pop("source")
        fields = ", ".join(f"{k}={v}" for k, v in row.items() if v is not None)
        marker = " [fallback]" if source == "fallback" else ""
        print(f"{kind:7} {fields}{marker}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Probe the WanderNav search endpoint",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("query", help="Search text")
    parser.add_argument("--type", "-t", default="places", choices=[t.value for t in SearchTab],
                        help="Search category")
    parser.add_argument("--host", "-H", default=None, help="Backend base URL (default from settings)")
    parser.add_argument("--near", nargs=2, type=float, metavar=("LAT", "LNG"),
                        help="Bias results around this point")
    parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")
    parser.add_argument("--no-fallback", action="store_true", help="Fail instead of showing fallback results")

    args = parser.parse_args()
    if not args.query.strip():
        print("Error: query must not be blank", file=sys.stderr)
        sys.exit(1)

    sys.exit(asyncio.run(probe(args)))


if __name__ == "__main__":
    main()
