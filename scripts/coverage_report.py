#!/usr/bin/env python3
"""
City detection coverage report: probe known locations and print table stats.

Usage:
    python3 scripts/coverage_report.py
    python3 scripts/coverage_report.py --lat 45.0 --lng -110.0
    python3 scripts/coverage_report.py --json

Prints:
    location | detected | distance | market | result

Exits 1 if any probe location fails.
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict

from services.geo.resolver import default_resolver
from services.geo.resolver.coverage import PROBE_LOCATIONS, coverage_metrics, probe_location
from services.geo.resolver.distance import haversine_miles

# ANSI colors
GREEN = "\033[32m"
RED = "\033[31m"
YELLOW = "\033[33m"
RESET = "\033[0m"
BOLD = "\033[1m"


def print_point(lat: float, lng: float) -> None:
    match = default_resolver.detect_city_with_market(lat, lng)
    if match is None:
        print(f"{RED}No cities loaded{RESET}")
        return
    city = match.city
    distance = haversine_miles(lat, lng, city.coordinates.lat, city.coordinates.lng)
    print(f"{BOLD}{lat}, {lng}{RESET}")
    print(f"  nearest city:   {city.display_name} ({distance:.1f}mi)")
    print(f"  market:         {match.market.name + ' #' + match.market.id if match.market else '-'}")
    print(f"  covered (50mi): {default_resolver.is_within_event_radius(lat, lng)}")
    print(f"  search radius:  {default_resolver.get_optimal_search_radius(lat, lng)}mi")


def main() -> int:
    parser = argparse.ArgumentParser(description="City detection coverage report")
    parser.add_argument("--lat", type=float, help="Probe a single latitude (needs --lng)")
    parser.add_argument("--lng", type=float, help="Probe a single longitude (needs --lat)")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of a table")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    if (args.lat is None) != (args.lng is None):
        parser.error("--lat and --lng must be given together")
    if args.lat is not None:
        print_point(args.lat, args.lng)
        return 0

    results = [probe_location(loc) for loc in PROBE_LOCATIONS]
    metrics = coverage_metrics()
    failed = [r for r in results if not r.passed]

    if args.json:
        print(json.dumps({"results": [asdict(r) for r in results], "metrics": metrics}, indent=2))
        return 1 if failed else 0

    print(f"\n{BOLD}{'location':<30} {'detected':<24} {'dist':>7}  {'market':<6}  result{RESET}")
    for r in results:
        color = GREEN if r.passed else RED
        market = "TM" if r.has_market else "-"
        print(f"{r.location:<30} {r.detected:<24} {r.distance:>6.1f}mi  {market:<6}  {color}{r.message}{RESET}")

    print(f"\n{BOLD}Coverage{RESET}")
    for key, value in metrics.items():
        print(f"  {key:<20} {value}")

    summary_color = GREEN if not failed else YELLOW
    print(f"\n{summary_color}{len(results) - len(failed)}/{len(results)} probes passed{RESET}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
