#!/usr/bin/env python3
"""
Farewatch itinerary extractor - command line runner

Usage:
    python3 run.py trip.html              # Extract from a saved manage-trip page
    python3 run.py confirmation.txt       # Extract from a pasted confirmation
    cat page.html | python3 run.py -      # Read from stdin
"""

import json
import logging
import sys
from pathlib import Path

from farewatch.airports import get_airport_display
from farewatch.config import apply_config, load_config
from farewatch.models import KIND_HTML, KIND_TEXT, InvalidDocumentError
from farewatch.parser import extract

VERSION = "0.3.0"

HELP_TEXT = """
Farewatch itinerary extractor

Usage:
    python3 run.py [FILE] [options]

    FILE              HTML page or text file (stdin when omitted or '-')

Options:
    --airline XX      Airline hint (DL, AA, UA, AS, WN, B6)
    --html            Treat input as HTML
    --text            Treat input as pasted text
    --config PATH     Use a different config file
    --summary         Print a short summary instead of JSON
    --debug           Show debug logging
    --help            Show this help
"""


def _option_value(args, name):
    """Value following an option like --airline, or None."""
    if name not in args:
        return None
    index = args.index(name)
    if index + 1 >= len(args):
        print(f"Error: {name} needs a value")
        sys.exit(2)
    return args[index + 1]


def _positional(args):
    skip_next = False
    for arg in args:
        if skip_next:
            skip_next = False
            continue
        if arg in ("--airline", "--config"):
            skip_next = True
            continue
        if arg == "-" or not arg.startswith("-"):
            return arg
    return None


def _read_input(source):
    if source is None or source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        print(f"Error: {source} not found")
        sys.exit(1)
    return path.read_text(encoding="utf-8", errors="replace")


def print_summary(record):
    """Human readable one-screen summary."""
    print()
    print(f"  Confidence:  {record.confidence}")
    if record.pnr:
        print(f"  Confirmation: {record.pnr}")
    if record.airline:
        print(f"  Airline:     {record.airline}")
    if record.last_name:
        print(f"  Passenger:   {record.first_name or ''} {record.last_name}".rstrip())
    if record.origin_iata and record.destination_iata:
        print(f"  Route:       {get_airport_display(record.origin_iata)} -> "
              f"{get_airport_display(record.destination_iata)}")
    if record.travel_dates_display:
        print(f"  Dates:       {record.travel_dates_display}")
    for segment in record.segments:
        when = segment.depart_datetime.strftime("%b %d %I:%M %p") if segment.depart_datetime else "time unknown"
        print(f"    {segment.flight_code:<8} {segment.depart_airport} -> {segment.arrive_airport}  {when}")
    if record.fare_brand:
        print(f"  Fare:        {record.fare_brand}")
    if record.notes:
        print(f"  Note:        {record.notes}")
    print()


def main():
    args = sys.argv[1:]

    if "--help" in args or "-h" in args:
        print(HELP_TEXT)
        return

    if "--version" in args:
        print(f"farewatch {VERSION}")
        return

    config = load_config(_option_value(args, "--config"))

    level = logging.DEBUG if "--debug" in args else getattr(logging, config['log_level'], logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    apply_config(config)

    kind = None
    if "--html" in args:
        kind = KIND_HTML
    elif "--text" in args:
        kind = KIND_TEXT

    airline = _option_value(args, "--airline") or config.get('default_airline')
    content = _read_input(_positional(args))

    try:
        record = extract(content, airline=airline, kind=kind)
    except InvalidDocumentError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if "--summary" in args:
        print_summary(record)
    else:
        print(json.dumps(record.to_dict(), indent=config['indent'], ensure_ascii=False))


if __name__ == "__main__":
    main()
