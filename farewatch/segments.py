"""
Segment assembly.

Turns flight-number/airport-pair matches into ordered FlightSegments by
pairing each leg with the departure and arrival times printed near it.
"""

import logging
import re
from datetime import datetime, timedelta

from dateutil import parser as dateutil_parser

from .models import FlightSegment

logger = logging.getLogger(__name__)

# Lines searched per leg: the matched line plus the next two
WINDOW_LINES = 3

# "Mar 31, 2026 11:50 PM", "March 31 2026 8:05am"
_DATETIME_PATTERN = re.compile(
    r'\b([A-Z][a-z]{2,8})\.?\s+(\d{1,2}),?\s+(\d{4})\s+(\d{1,2}):(\d{2})\s*([AaPp][Mm])\b'
)

# Bare "1:10 AM", optionally with a "+1" next-day marker
_TIME_PATTERN = re.compile(r'\b(\d{1,2}):(\d{2})\s*([AaPp][Mm])\b(?:\s*\+\s*(\d))?')


def to_24_hour(hour, meridiem):
    """12 AM -> 0, 12 PM -> 12, other PM hours +12."""
    meridiem = meridiem.lower()
    if meridiem == 'am' and hour == 12:
        return 0
    if meridiem == 'pm' and hour != 12:
        return hour + 12
    return hour


def _clock(hour_text, minute_text, meridiem):
    hour, minute = int(hour_text), int(minute_text)
    if not (1 <= hour <= 12 and 0 <= minute <= 59):
        return None
    return to_24_hour(hour, meridiem), minute


def _parse_datetime_match(match):
    month, day, year, hour, minute, meridiem = match.groups()
    clock = _clock(hour, minute, meridiem)
    if clock is None:
        return None
    try:
        day_value = dateutil_parser.parse(f"{month} {day} {year}").date()
    except (ValueError, OverflowError):
        return None
    return datetime(day_value.year, day_value.month, day_value.day, clock[0], clock[1])


def _time_events(line):
    """Datetimes and bare times on one line, in reading order.

    Returns:
        List of (position, kind, value) where kind is 'datetime' with a
        datetime value, or 'time' with an (hour, minute, day_offset) value
    """
    events = []
    taken = []

    for match in _DATETIME_PATTERN.finditer(line):
        value = _parse_datetime_match(match)
        if value is not None:
            events.append((match.start(), 'datetime', value))
            taken.append((match.start(), match.end()))

    for match in _TIME_PATTERN.finditer(line):
        if any(start <= match.start() < end for start, end in taken):
            continue
        hour, minute, meridiem, offset = match.groups()
        clock = _clock(hour, minute, meridiem)
        if clock is not None:
            events.append((match.start(), 'time', (clock[0], clock[1], int(offset or 0))))

    events.sort(key=lambda event: event[0])
    return events


def _arrival_from(departure, kind, value):
    if kind == 'datetime':
        arrival = value
    else:
        hour, minute, day_offset = value
        arrival = datetime.combine(departure.date() + timedelta(days=day_offset),
                                   datetime.min.time()).replace(hour=hour, minute=minute)

    # Overnight flights: arrival printed with the departure's date
    if arrival <= departure:
        arrival += timedelta(days=1)
    return arrival


def _find_times(lines, start, stop):
    departure = None
    arrival = None

    for index in range(start, stop):
        for _, kind, value in _time_events(lines[index]):
            if departure is None:
                # A bare time before any date cannot be placed on a day
                if kind == 'datetime':
                    departure = value
                continue
            arrival = _arrival_from(departure, kind, value)
            return departure, arrival

    return departure, arrival


def assemble(leg_matches, lines):
    """Build FlightSegments from leg matches and the surrounding lines.

    Each leg looks at its own line and the next two (never past the next
    leg's line). The first dated time is the departure, the next time is
    the arrival. Legs without any time are still returned, with None
    timestamps.

    Args:
        leg_matches: LegMatch list in document order
        lines: The document lines the matches were found in

    Returns:
        List of FlightSegment in document order (not deduplicated)
    """
    segments = []
    lines = list(lines)

    for index, leg in enumerate(leg_matches):
        stop = min(leg.line_index + WINDOW_LINES, len(lines))
        if index + 1 < len(leg_matches):
            next_line = leg_matches[index + 1].line_index
            if next_line > leg.line_index:
                stop = min(stop, next_line)

        departure, arrival = _find_times(lines, leg.line_index, stop)
        if departure is None:
            logger.debug(f"No departure time near {leg.carrier}{leg.flight_number}")

        segments.append(FlightSegment(
            carrier=leg.carrier,
            flight_number=leg.flight_number,
            depart_airport=leg.depart_airport,
            arrive_airport=leg.arrive_airport,
            depart_datetime=departure,
            arrive_datetime=arrival,
            segment_index=index,
        ))

    return segments
