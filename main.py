#!/usr/bin/env python3
"""
Riding Resolver: Entry Point
============================

Resolves a single address (or postal code) from the command line and prints
the confidence-graded result.

Usage:
    python main.py "14408 Chartwell Dr, Surrey"             # Geocoder + boundary service
    python main.py --postal-code "V6B 1A1"                  # Postal code lookup
    python main.py --browser "14408 Chartwell Dr, Surrey"   # Elections BC automation
    python main.py --property "738 Broughton St, Suite 2104, Vancouver"
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from riding_resolver.browser import BrowserSession
from riding_resolver.config import Settings
from riding_resolver.exceptions import NotFoundError, RidingResolverError
from riding_resolver.geocode import GeocodeBoundaryResolver
from riding_resolver.models import Confidence, RidingLookupResult
from riding_resolver.normalizer import parse_address
from riding_resolver.property_workflow import extract_property_value
from riding_resolver.riding_workflow import extract_riding

load_dotenv()


# ─── ANSI Color Constants ───────────────────────────────────────────

_RED = "\033[91m"
_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_RESET = "\033[0m"
_WIDTH = 72

_CONFIDENCE_COLORS = {
    Confidence.HIGH: _GREEN,
    Confidence.MEDIUM: _YELLOW,
    Confidence.LOW: _YELLOW,
    Confidence.NONE: _RED,
}


# ─── Pretty Printer ─────────────────────────────────────────────────


def print_lookup(query: str, result: RidingLookupResult) -> int:
    """Print a geocoder / postal-code result.

    Returns:
        0 if the riding is confirmed, 1 if it needs review.
    """
    color = _CONFIDENCE_COLORS[result.confidence]
    print(f"\n{'=' * _WIDTH}")
    print(f"{_BOLD}{_CYAN}  RIDING LOOKUP{_RESET}")
    print(f"{'=' * _WIDTH}")
    print(f"  Query:       {query}")
    print(f"  Source:      {result.source.value}")
    print(f"{'─' * _WIDTH}")
    print(f"  Riding:      {_BOLD}{result.riding}{_RESET}")
    print(f"  Confidence:  {color}{result.confidence.value}{_RESET}")
    print(f"{'=' * _WIDTH}")
    if result.needs_review:
        print(f"  {_YELLOW}{_BOLD}NEEDS REVIEW{_RESET}")
    else:
        print(f"  {_GREEN}{_BOLD}CONFIRMED{_RESET}")
    print(f"{'=' * _WIDTH}\n")
    return 1 if result.needs_review else 0


def print_extraction(label: str, address: str, value: str) -> None:
    query = parse_address(address)
    print(f"\n{'=' * _WIDTH}")
    print(f"  Address:     {query.raw}")
    print(f"  Query:       {_DIM}{query.canonical}{_RESET}")
    print(f"  {label:<12} {_BOLD}{_GREEN}{value}{_RESET}")
    print(f"{'=' * _WIDTH}\n")


# ─── Runners ─────────────────────────────────────────────────────────


async def _run_lookup(args: argparse.Namespace, settings: Settings) -> int:
    async with GeocodeBoundaryResolver(settings) as resolver:
        if args.postal_code:
            result = await resolver.lookup_by_postal_code(args.query)
        else:
            result = await resolver.lookup_by_address(args.query)
    return print_lookup(args.query, result)


async def _run_automation(args: argparse.Namespace, settings: Settings) -> int:
    session = BrowserSession(settings)
    try:
        if args.property:
            value = await extract_property_value(session, args.query, settings)
            print_extraction("Assessed:", args.query, value)
        else:
            riding = await extract_riding(session, args.query, settings)
            print_extraction("Riding:", args.query, riding)
    except NotFoundError as exc:
        print(f"\n  {_YELLOW}{_BOLD}NOT FOUND{_RESET}  {exc}\n")
        return 1
    except RidingResolverError as exc:
        print(f"\n  {_RED}{_BOLD}FAILED [{exc.code}]{_RESET}  {exc}\n")
        return 2
    finally:
        await session.close()
    return 0


# ─── Main ────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Resolve a BC address to its riding.")
    parser.add_argument("query", help="Civic address, or postal code with --postal-code")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--postal-code", action="store_true", help="Treat the query as a postal code")
    mode.add_argument("--browser", action="store_true", help="Use Elections BC browser automation")
    mode.add_argument("--property", action="store_true", help="Look up the assessed property value")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="  %(levelname)s %(name)s: %(message)s")

    if args.browser or args.property:
        exit_code = asyncio.run(_run_automation(args, settings))
    else:
        exit_code = asyncio.run(_run_lookup(args, settings))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
