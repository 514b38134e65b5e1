"""
Field extractors.

Each extractor pulls one field out of a NormalizedText and returns None
when the field is not there. Extractors are independent of each other,
never raise for odd input and never mutate anything.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from dateutil import parser as dateutil_parser

from .airlines import FARE_BRANDS, airlines_in_scope
from .airports import is_iata_code, is_plausible_text_code
from .models import LegMatch
from .redact import mask, mask_name

logger = logging.getLogger(__name__)


# ============================================================================
# RECORD LOCATOR
# ============================================================================

_PNR_CANDIDATE_PATTERN = re.compile(r'\b([A-Z0-9]{6})\b')
_PNR_PATTERN = re.compile(r'^[A-Z0-9]{6}$')

# "TICKET 006...", "ETKT: 006...", "Ticket No: 006...", "TKT# 006..."
_TICKET_LABEL = r'(?:TICKET|ETKT|TKT)\s*(?:(?:NO|NUMBER|NUM)\.?|#)?\s*[:\-#]?\s*'
_TICKET_LABEL_PATTERN = re.compile(_TICKET_LABEL + r'\d', re.IGNORECASE)
# The whole labeled ticket number, so a code printed right after it is still in context
_LABELED_TICKET_PATTERN = re.compile(_TICKET_LABEL + r'\d{13}(?!\d)', re.IGNORECASE)

PNR_CONTEXT_CHARS = 20


def is_valid_pnr(code):
    return isinstance(code, str) and bool(_PNR_PATTERN.match(code))


def _in_ticket_context(text, start, end, ticket_spans=()):
    window_start, window_end = max(0, start - PNR_CONTEXT_CHARS), end + PNR_CONTEXT_CHARS
    if _TICKET_LABEL_PATTERN.search(text[window_start:window_end]):
        return True
    return any(s_start < window_end and s_end > window_start for s_start, s_end in ticket_spans)


def extract_record_locator(normalized, airline=None):
    """Find the first 6-character record locator outside a ticket-number context.

    Args:
        normalized: NormalizedText to scan
        airline: Unused; record locators look the same for every airline

    Returns:
        Record locator string or None when every candidate is rejected
    """
    text = normalized.text
    ticket_spans = [m.span() for m in _LABELED_TICKET_PATTERN.finditer(text)]
    for match in _PNR_CANDIDATE_PATTERN.finditer(text):
        code = match.group(1)
        if _in_ticket_context(text, match.start(), match.end(), ticket_spans):
            logger.debug(f"Rejected locator candidate {mask(code)}: ticket-number context")
            continue
        logger.debug(f"Record locator candidate accepted: {mask(code)}")
        return code
    return None


# ============================================================================
# PASSENGER NAME
# ============================================================================

@dataclass(frozen=True)
class PassengerName:
    first: Optional[str]
    last: Optional[str]
    # 'label', 'slash' or 'caps' (the low-precision fallback)
    method: str


_NAME_LABEL_PATTERN = re.compile(r'passenger|traveler|traveller|name', re.IGNORECASE)
_COLON_NAME_PATTERN = re.compile(r":\s*([A-Z][a-z]+(?:[\s'-][A-Z][a-z]+)*)")
_SLASH_NAME_PATTERN = re.compile(r"([A-Z'-]+)/([A-Z'-]+)")
_CAPS_TOKEN_PATTERN = re.compile(r"\b[A-Z][A-Z'-]+\b")


def _name_from_labeled_line(line):
    colon_match = _COLON_NAME_PATTERN.search(line)
    if colon_match:
        parts = colon_match.group(1).split()
        if len(parts) >= 2:
            return PassengerName(first=parts[0], last=' '.join(parts[1:]), method='label')
        return PassengerName(first=None, last=parts[0], method='label')

    slash_match = _SLASH_NAME_PATTERN.search(line)
    if slash_match:
        return PassengerName(first=slash_match.group(2), last=slash_match.group(1), method='slash')

    return None


def extract_passenger_name(normalized, airline=None, allow_fallback=True):
    """Extract the passenger's name.

    Strategy (in order):
    1. A line with a passenger/traveler/name label, as "Label: First Last"
       or "LAST/FIRST"
    2. Fallback: the first two all-caps tokens anywhere in the text, taken
       as last/first (a single token becomes the last name)

    The fallback is best-effort. It will happily pick up city names or
    fare-class labels and it splits multi-word surnames wrongly; callers
    see this through a 'caps' method on the result.

    Returns:
        PassengerName or None
    """
    for line in normalized.lines:
        if not _NAME_LABEL_PATTERN.search(line):
            continue
        name = _name_from_labeled_line(line)
        if name:
            logger.debug(f"Passenger name from {name.method} format: {mask_name(name.first, name.last)}")
            return name

    if not allow_fallback:
        return None

    tokens = []
    for line in normalized.lines:
        tokens.extend(_CAPS_TOKEN_PATTERN.findall(line))
        if len(tokens) >= 2:
            break

    if len(tokens) >= 2:
        name = PassengerName(first=tokens[1], last=tokens[0], method='caps')
    elif tokens:
        name = PassengerName(first=None, last=tokens[0], method='caps')
    else:
        return None

    logger.debug(f"Passenger name from all-caps fallback: {mask_name(name.first, name.last)}")
    return name


# ============================================================================
# FARE BRAND
# ============================================================================

def _brand_pattern(label):
    words = r'\s+'.join(re.escape(word) for word in label.split())
    return re.compile(rf'(?<![A-Za-z]){words}(?![A-Za-z])', re.IGNORECASE)


_BRAND_PATTERNS = [(label, _brand_pattern(label)) for label in FARE_BRANDS]


def extract_fare_brand(normalized, airline=None):
    """Return the first vocabulary brand that appears in the text.

    An occurrence of a label that sits inside an occurrence of a longer
    vocabulary label is not counted, so "Premium Economy" is never reported
    as plain "Economy" and "First Class" never as "First".
    """
    text = normalized.text
    occurrences = [
        (label, m.start(), m.end())
        for label, pattern in _BRAND_PATTERNS
        for m in pattern.finditer(text)
    ]

    for label, _ in _BRAND_PATTERNS:
        for occ_label, start, end in occurrences:
            if occ_label != label:
                continue
            covered = any(
                len(other) > len(label) and o_start <= start and end <= o_end
                for other, o_start, o_end in occurrences
            )
            if not covered:
                return label
    return None


# ============================================================================
# TICKET NUMBER
# ============================================================================

def extract_ticket_number(normalized, airline=None):
    """Find a 13-digit ticket number carrying an airline's numeric prefix.

    Returns None for airlines outside the supported set. Without a hint the
    earliest ticket number for any supported airline wins.
    """
    best = None
    for profile in airlines_in_scope(airline):
        pattern = profile.ticket_pattern
        if pattern is None:
            continue
        match = pattern.search(normalized.text)
        if match and (best is None or match.start() < best.start()):
            best = match

    if best:
        logger.debug(f"Ticket number found: {mask(best.group(0), keep=3)}")
        return best.group(0)
    return None


# ============================================================================
# ROUTE AND FLIGHT NUMBERS
# ============================================================================

_ROUTE_PATTERN = re.compile(r'\b([A-Z]{3})\s*(?:->|[-–>→])\s*([A-Z]{3})\b')


def extract_route(normalized, airline=None):
    """Find an explicit "AAA-BBB" / "AAA → BBB" route in visible text.

    Returns:
        Tuple of (origin, destination) or None
    """
    for match in _ROUTE_PATTERN.finditer(normalized.text):
        origin, destination = match.group(1), match.group(2)
        if is_plausible_text_code(origin) and is_plausible_text_code(destination):
            logger.debug(f"Visible-text route: {origin} -> {destination}")
            return origin, destination
    return None


def extract_flight_numbers(normalized, airline=None):
    """Find carrier-code flight numbers ("DL342", "AA 1234") in document order."""
    found = []
    for profile in airlines_in_scope(airline):
        for match in profile.flight_number_pattern.finditer(normalized.text):
            found.append((match.start(), re.sub(r'\s+', '', match.group(1)).upper()))

    numbers = []
    for _, number in sorted(found):
        if number not in numbers:
            numbers.append(number)
    return numbers


def find_leg_matches(normalized, airline=None):
    """Match carrier + flight number + airport pair, line by line.

    Returns:
        List of LegMatch in document order
    """
    legs = []
    for line_index, line in enumerate(normalized.lines):
        for profile in airlines_in_scope(airline):
            for match in profile.leg_pattern.finditer(line):
                number, depart, arrive = match.groups()
                if not (is_iata_code(depart) and is_iata_code(arrive)):
                    continue
                legs.append(LegMatch(
                    line_index=line_index,
                    position=match.start(),
                    carrier=profile.code,
                    flight_number=number,
                    depart_airport=depart,
                    arrive_airport=arrive,
                ))

    legs.sort(key=lambda leg: (leg.line_index, leg.position))
    logger.debug(f"Leg matches: {[f'{leg.carrier}{leg.flight_number}' for leg in legs]}")
    return legs


# ============================================================================
# TRIP DATES (using dateutil)
# ============================================================================

_DATE_EXPR = (
    r'(?:(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun)[a-z]*\.?,?\s+)?'
    r'((?:January|February|March|April|May|June|July|August|September|October|November|December|'
    r'Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}'
    r'|\d{4}-\d{2}-\d{2}'
    r'|\d{1,2}/\d{1,2}/\d{4})'
)

_DEPART_DATE_PATTERN = re.compile(
    r'\b(?:depart(?:s|ure|ing)?|outbound|leaving)\b(?:\s+date)?\s*[:\-]?\s*' + _DATE_EXPR,
    re.IGNORECASE
)
_RETURN_DATE_PATTERN = re.compile(
    r'\b(?:return(?:s|ing)?|inbound)\b(?:\s+date)?\s*[:\-]?\s*' + _DATE_EXPR,
    re.IGNORECASE
)


# Two unrelated defaults: a field missing from the string shows up as a difference
_DATE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def parse_datetime(value):
    """Parse a human date/time string with dateutil.

    Returns None when the string is unparseable or has no complete calendar
    date ("March 2026", "Friday"): missing parts are never filled in from
    the current date.
    """
    if not value:
        return None
    try:
        first, second = (dateutil_parser.parse(value, default=default, fuzzy=False)
                         for default in _DATE_DEFAULTS)
    except (ValueError, TypeError, OverflowError):
        logger.debug(f"Dropped unparseable date {value!r}")
        return None
    if first.date() != second.date():
        logger.debug(f"Dropped partial date {value!r}")
        return None
    return first


def parse_date(value):
    """Parse a human date string into an ISO date string (None if unparseable or partial)."""
    parsed = parse_datetime(value)
    return parsed.date().isoformat() if parsed else None


def extract_trip_dates(normalized, airline=None):
    """Find labeled departure / return dates in visible text.

    Returns:
        Dict with 'departure_date' and/or 'return_date' (ISO), or None
    """
    dates = {}
    for key, pattern in (('departure_date', _DEPART_DATE_PATTERN),
                         ('return_date', _RETURN_DATE_PATTERN)):
        for match in pattern.finditer(normalized.text):
            iso = parse_date(match.group(1))
            if iso:
                dates[key] = iso
                break
    return dates or None
