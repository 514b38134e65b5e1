"""
Trip record building.

Merges everything the extractors found into one TripRecord. Route and
dates can come from several places, which are tried in a fixed order
(highest first), per field:

1. Display tier: a pre-rendered route / travel-dates display string, then
   the airline's own beacon data
2. Assembled flight segments
3. Full-route strings: a caller "full route" value, the visible-text route
   match, labeled visible-text dates
4. Discrete trip fields (origin_iata / destination_iata, depart_date /
   return_date)
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from .airlines import get_airline
from .airports import clean_iata
from .extractors import is_valid_pnr, parse_date
from .models import HTML_CONFIDENCES, FlightSegment, TripRecord
from .redact import mask
from .scoring import classify

logger = logging.getLogger(__name__)

SOURCE_DISPLAY = 'display'
SOURCE_BEACON = 'beacon'
SOURCE_STRUCTURED = 'structured'
SOURCE_SEGMENTS = 'segments'
SOURCE_FULL_ROUTE = 'full_route'
SOURCE_TEXT = 'text'
SOURCE_TRIP_FIELDS = 'trip_fields'
SOURCE_HINT = 'hint'
SOURCE_MODEL = 'model'

_ROUTE_SPLIT_PATTERN = re.compile(r'\s*(?:→|->|–|-|>)\s*')
_DISPLAY_DATE_PATTERN = re.compile(
    r'\d{4}-\d{2}-\d{2}'
    r'|\d{1,2}/\d{1,2}/\d{4}'
    r'|(?:January|February|March|April|May|June|July|August|September|October|November|December|'
    r'Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}',
    re.IGNORECASE
)
_TICKET_NUMBER_PATTERN = re.compile(r'^\d{13}$')


@dataclass
class TripEvidence:
    """Everything found for one document, before merging."""

    is_html: bool
    airline_hint: Optional[str] = None
    pnr: dict = field(default_factory=dict)            # source -> value
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    fare_brand: Optional[str] = None
    ticket_number: Optional[str] = None
    segments: List[FlightSegment] = field(default_factory=list)
    segment_source: str = SOURCE_SEGMENTS
    flight_numbers: List[str] = field(default_factory=list)
    beacon: dict = field(default_factory=dict)          # beacon_trip_fields() output
    text_route: Optional[tuple] = None
    text_dates: dict = field(default_factory=dict)
    known: dict = field(default_factory=dict)           # caller-supplied trip fields


# ============================================================================
# ROUTE / DATE SOURCES
# ============================================================================

def parse_route_string(value):
    """'LGA → TQO' / 'JFK-ORD-LAX' -> (first, last); None unless both are IATA codes."""
    if not value:
        return None
    parts = [part for part in _ROUTE_SPLIT_PATTERN.split(value.strip()) if part]
    if len(parts) < 2:
        return None
    origin, destination = clean_iata(parts[0]), clean_iata(parts[-1])
    if origin and destination:
        return origin, destination
    return None


def route_from_segments(segments):
    """Origin of the first leg, destination of the last leg (document order)."""
    if not segments:
        return None
    return segments[0].depart_airport, segments[-1].arrive_airport


def dates_from_segments(segments):
    """Departure date of the first leg; return date of the last leg when there are several."""
    if not segments or segments[0].depart_datetime is None:
        return {}
    dates = {'departure_date': segments[0].depart_datetime.date().isoformat()}
    last = segments[-1]
    if len(segments) > 1 and last.depart_datetime is not None:
        return_iso = last.depart_datetime.date().isoformat()
        if return_iso != dates['departure_date']:
            dates['return_date'] = return_iso
    return dates


def dates_from_display(value):
    """Pull departure / return dates out of a travel-dates display string."""
    if not value:
        return {}
    found = [iso for iso in (parse_date(m.group(0)) for m in _DISPLAY_DATE_PATTERN.finditer(value)) if iso]
    dates = {}
    if found:
        dates['departure_date'] = found[0]
    if len(found) > 1 and found[-1] != found[0]:
        dates['return_date'] = found[-1]
    return dates


def _route_tiers(evidence):
    known = evidence.known
    display = parse_route_string(known.get('route_display'))
    beacon = evidence.beacon
    trip_fields = (clean_iata(known.get('origin_iata', '')), clean_iata(known.get('destination_iata', '')))

    return [
        (SOURCE_DISPLAY, display or (None, None)),
        (SOURCE_BEACON, (beacon.get('origin_iata'), beacon.get('destination_iata'))),
        (SOURCE_SEGMENTS, route_from_segments(evidence.segments) or (None, None)),
        (SOURCE_FULL_ROUTE, parse_route_string(known.get('full_route')) or (None, None)),
        (SOURCE_TEXT, evidence.text_route or (None, None)),
        (SOURCE_TRIP_FIELDS, trip_fields),
    ]


def _date_tiers(evidence):
    known = evidence.known
    trip_fields = {}
    for key, known_key in (('departure_date', 'depart_date'), ('return_date', 'return_date')):
        iso = parse_date(known.get(known_key))
        if iso:
            trip_fields[key] = iso

    return [
        (SOURCE_DISPLAY, dates_from_display(known.get('travel_dates_display'))),
        (SOURCE_BEACON, {k: v for k, v in evidence.beacon.items() if k in ('departure_date', 'return_date')}),
        (SOURCE_SEGMENTS, dates_from_segments(evidence.segments)),
        (SOURCE_TEXT, evidence.text_dates or {}),
        (SOURCE_TRIP_FIELDS, trip_fields),
    ]


def resolve_route(evidence):
    """Resolve origin / destination by source priority.

    Returns:
        Tuple of (origin, destination, sources dict)
    """
    resolved = {'origin_iata': None, 'destination_iata': None}
    sources = {}
    for source, (origin, destination) in _route_tiers(evidence):
        for key, value in (('origin_iata', origin), ('destination_iata', destination)):
            if resolved[key] is None and value:
                resolved[key] = value
                sources[key] = evidence.segment_source if source == SOURCE_SEGMENTS else source
    return resolved['origin_iata'], resolved['destination_iata'], sources


def resolve_dates(evidence):
    """Resolve departure / return dates by source priority.

    Returns:
        Tuple of (departure_date, return_date, sources dict)
    """
    resolved = {'departure_date': None, 'return_date': None}
    sources = {}
    for source, dates in _date_tiers(evidence):
        for key in resolved:
            if resolved[key] is None and dates.get(key):
                resolved[key] = dates[key]
                sources[key] = evidence.segment_source if source == SOURCE_SEGMENTS else source
    return resolved['departure_date'], resolved['return_date'], sources


def format_route_display(origin, destination):
    if origin and destination:
        return f"{origin} → {destination}"
    return None


def _format_day(iso):
    day = date.fromisoformat(iso)
    return f"{day:%b} {day.day}, {day.year}"


def format_travel_dates(departure_date, return_date):
    """'Mar 31, 2026' or 'Mar 31, 2026 - Apr 4, 2026'."""
    if not departure_date:
        return None
    text = _format_day(departure_date)
    if return_date:
        text += f" - {_format_day(return_date)}"
    return text


# ============================================================================
# RECORD BUILDING
# ============================================================================

_PNR_PRIORITY = (SOURCE_BEACON, SOURCE_STRUCTURED, SOURCE_TEXT)


def _resolve_airline(evidence):
    if get_airline(evidence.airline_hint):
        return evidence.airline_hint, SOURCE_HINT
    if evidence.segments:
        return evidence.segments[0].carrier, evidence.segment_source
    for number in evidence.flight_numbers:
        if get_airline(number[:2]):
            return number[:2], SOURCE_TEXT
    return None, None


def _flight_numbers(evidence):
    numbers = list(evidence.flight_numbers)
    for segment in evidence.segments:
        if segment.flight_code not in numbers:
            numbers.append(segment.flight_code)
    return numbers


def _finish(fields, sources, is_html):
    fields['route_display'] = fields.get('route_display') or format_route_display(
        fields.get('origin_iata'), fields.get('destination_iata'))
    fields['travel_dates_display'] = fields.get('travel_dates_display') or format_travel_dates(
        fields.get('departure_date'), fields.get('return_date'))

    confidence, notes = classify(fields, is_html)
    return TripRecord(confidence=confidence, notes=notes, sources=sources, **fields)


def build_trip_record(evidence):
    """Merge extractor output into one TripRecord and classify it."""
    sources = {}
    fields = {}

    for source in _PNR_PRIORITY:
        if evidence.pnr.get(source):
            fields['pnr'] = evidence.pnr[source]
            sources['pnr'] = source
            break

    airline, airline_source = _resolve_airline(evidence)
    if airline:
        fields['airline'] = airline
        sources['airline'] = airline_source

    for name in ('first_name', 'last_name', 'fare_brand', 'ticket_number'):
        value = getattr(evidence, name)
        if value:
            fields[name] = value
            sources[name] = SOURCE_TEXT

    fields['segments'] = tuple(evidence.segments)
    fields['flight_numbers'] = tuple(_flight_numbers(evidence))
    if evidence.segments:
        sources['segments'] = evidence.segment_source

    origin, destination, route_sources = resolve_route(evidence)
    fields['origin_iata'] = origin
    fields['destination_iata'] = destination
    sources.update(route_sources)

    departure_date, return_date, date_sources = resolve_dates(evidence)
    fields['departure_date'] = departure_date
    fields['return_date'] = return_date
    sources.update(date_sources)

    for name in ('route_display', 'travel_dates_display'):
        fields[name] = evidence.known.get(name)
        if fields[name]:
            sources[name] = SOURCE_DISPLAY

    record = _finish(fields, sources, evidence.is_html)
    logger.debug(
        f"Built trip record: locator={mask(record.pnr)}, route={record.origin_iata}->{record.destination_iata}, "
        f"segments={len(record.segments)}, confidence={record.confidence}"
    )
    return record


# ============================================================================
# MODEL FALLBACK
# ============================================================================

def needs_model_fallback(record):
    """True when route or departure date is still missing after regex extraction."""
    return not (record.origin_iata and record.destination_iata and record.departure_date)


def _clean_text(value):
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _model_segments(values):
    segments = []
    for item in values or ():
        if not isinstance(item, dict):
            continue
        carrier = _clean_text(item.get('carrier'))
        number = _clean_text(item.get('flight_number'))
        depart = clean_iata(item.get('depart_airport'))
        arrive = clean_iata(item.get('arrive_airport'))
        if not (carrier and number and depart and arrive):
            continue
        segments.append(FlightSegment(
            carrier=carrier,
            flight_number=number,
            depart_airport=depart,
            arrive_airport=arrive,
            depart_datetime=None,
            arrive_datetime=None,
            segment_index=len(segments),
        ))
    return segments


_MODEL_VALIDATORS = {
    'pnr': lambda v: v if is_valid_pnr(v) else None,
    'first_name': _clean_text,
    'last_name': _clean_text,
    'fare_brand': _clean_text,
    'ticket_number': lambda v: v if isinstance(v, str) and _TICKET_NUMBER_PATTERN.match(v) else None,
    'origin_iata': clean_iata,
    'destination_iata': clean_iata,
    'departure_date': lambda v: parse_date(v) if isinstance(v, str) else None,
    'return_date': lambda v: parse_date(v) if isinstance(v, str) else None,
}


def merge_model_fields(record, model_fields):
    """Merge a language-model extraction into a regex-derived record.

    Regex-derived values always win; model values only fill fields that are
    empty, and only after passing the same validation as regex values.

    Args:
        record: TripRecord from extract()
        model_fields: Dict using TripRecord field names (segments as dicts)

    Returns:
        New TripRecord (the input record is not modified)
    """
    if not model_fields:
        return record

    is_html = record.confidence in HTML_CONFIDENCES
    fields = {
        name: getattr(record, name)
        for name in ('pnr', 'airline', 'first_name', 'last_name', 'fare_brand', 'ticket_number',
                     'segments', 'flight_numbers', 'origin_iata', 'destination_iata',
                     'departure_date', 'return_date', 'route_display', 'travel_dates_display')
    }
    sources = dict(record.sources)

    for name, validate in _MODEL_VALIDATORS.items():
        if fields.get(name):
            continue
        value = validate(model_fields.get(name))
        if value:
            fields[name] = value
            sources[name] = SOURCE_MODEL

    if not fields['segments']:
        segments = _model_segments(model_fields.get('segments'))
        if segments:
            fields['segments'] = tuple(segments)
            sources['segments'] = SOURCE_MODEL

    # Derived display strings are rebuilt from the merged values
    for name in ('route_display', 'travel_dates_display'):
        if name not in sources:
            fields[name] = None

    merged = _finish(fields, sources, is_html)
    logger.debug(f"Merged model fields: {sorted(k for k, v in sources.items() if v == SOURCE_MODEL)}")
    return merged
