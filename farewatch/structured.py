"""
Schema.org structured data (JSON-LD and microdata).

Some airline pages and most confirmation emails embed a FlightReservation.
When it is there it is the most reliable source of segments, so it is read
before any text heuristics run.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dateutil import parser as dateutil_parser

from .airports import clean_iata
from .extractors import is_valid_pnr, parse_datetime
from .models import FlightSegment

logger = logging.getLogger(__name__)

_CARRIER_PATTERN = re.compile(r'^[A-Z0-9]{2}$')
_FLIGHT_NUMBER_PATTERN = re.compile(r'^(?:([A-Z0-9]{2})\s?)?(\d{1,4}[A-Z]?)$')


@dataclass(frozen=True)
class StructuredTrip:
    pnr: Optional[str] = None
    segments: Tuple[FlightSegment, ...] = field(default_factory=tuple)


def _parse_datetime(value):
    if not value or not isinstance(value, str):
        return None
    try:
        # Wall-clock time at the airport; offsets are not carried over
        return dateutil_parser.isoparse(value).replace(tzinfo=None)
    except (ValueError, OverflowError):
        parsed = parse_datetime(value)
        if parsed is None:
            logger.debug(f"Dropped unparseable schema.org time {value!r}")
            return None
        return parsed.replace(tzinfo=None)


def _iata_of(node):
    if isinstance(node, dict):
        return clean_iata(str(node.get('iataCode', '')).strip())
    return None


def _carrier_of(flight):
    for key in ('airline', 'provider'):
        node = flight.get(key)
        if isinstance(node, dict):
            code = str(node.get('iataCode', '')).strip()
            if _CARRIER_PATTERN.match(code):
                return code
    return None


def _segment_from_flight(flight, index):
    number_match = _FLIGHT_NUMBER_PATTERN.match(str(flight.get('flightNumber', '')).strip())
    if not number_match:
        return None

    carrier = _carrier_of(flight) or number_match.group(1)
    depart = _iata_of(flight.get('departureAirport'))
    arrive = _iata_of(flight.get('arrivalAirport'))
    if not (carrier and depart and arrive):
        return None

    return FlightSegment(
        carrier=carrier,
        flight_number=number_match.group(2),
        depart_airport=depart,
        arrive_airport=arrive,
        depart_datetime=_parse_datetime(flight.get('departureTime')),
        arrive_datetime=_parse_datetime(flight.get('arrivalTime')),
        segment_index=index,
    )


def _iter_items(data):
    if isinstance(data, list):
        for item in data:
            yield from _iter_items(item)
    elif isinstance(data, dict):
        if '@graph' in data:
            yield from _iter_items(data['@graph'])
        else:
            yield data


def read_json_ld(view):
    """Extract a StructuredTrip from schema.org JSON-LD blocks.

    Returns:
        StructuredTrip or None if no FlightReservation was found
    """
    pnr = None
    segments = []

    for block in view.json_ld_blocks():
        try:
            data = json.loads(block)
        except (json.JSONDecodeError, TypeError):
            continue

        for item in _iter_items(data):
            if 'FlightReservation' not in str(item.get('@type', '')):
                continue

            code = str(item.get('reservationNumber', '')).strip().upper()
            if pnr is None and is_valid_pnr(code):
                pnr = code

            flight = item.get('reservationFor')
            if isinstance(flight, dict):
                segment = _segment_from_flight(flight, len(segments))
                if segment:
                    segments.append(segment)

    if not (pnr or segments):
        return None
    logger.debug(f"JSON-LD: {len(segments)} segment(s), locator {'found' if pnr else 'absent'}")
    return StructuredTrip(pnr=pnr, segments=tuple(segments))


def read_microdata(view, airline=None):
    """Extract a StructuredTrip from schema.org microdata attributes.

    Segments are only built when the airport codes pair up with the flight
    numbers (two airports per flight) and a carrier is known.
    """
    pnr = None
    for value in view.itemprop_values('reservationNumber'):
        if is_valid_pnr(value.upper()):
            pnr = value.upper()
            break

    iata_values = view.itemprop_values('iataCode')
    airports = [code for code in iata_values if clean_iata(code)]
    carriers = [code for code in iata_values if _CARRIER_PATTERN.match(code) and not clean_iata(code)]
    numbers = [m.group(2) for m in (_FLIGHT_NUMBER_PATTERN.match(v) for v in view.itemprop_values('flightNumber')) if m]

    carrier = carriers[0] if carriers else airline
    segments = []
    if carrier and numbers and len(airports) == 2 * len(numbers):
        for index, number in enumerate(numbers):
            segments.append(FlightSegment(
                carrier=carrier,
                flight_number=number,
                depart_airport=airports[2 * index],
                arrive_airport=airports[2 * index + 1],
                segment_index=index,
            ))

    if not (pnr or segments):
        return None
    return StructuredTrip(pnr=pnr, segments=tuple(segments))


def read_structured_trip(view, airline=None):
    """JSON-LD first (modern format), then microdata (older format)."""
    return read_json_ld(view) or read_microdata(view, airline=airline)
