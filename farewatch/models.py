"""
Data model for itinerary extraction.

Everything here is immutable: a document goes in, a TripRecord comes out,
and nothing is kept between calls.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

# Confidence tiers - HTML / beacon path
EXACT_FLIGHT = 'exact-flight'
ROUTE_ESTIMATE = 'route-estimate'
UNKNOWN = 'unknown'

# Confidence tiers - freeform paste path
HIGH = 'high'
MEDIUM = 'medium'
LOW = 'low'

HTML_CONFIDENCES = (EXACT_FLIGHT, ROUTE_ESTIMATE, UNKNOWN)
TEXT_CONFIDENCES = (HIGH, MEDIUM, LOW)

KIND_HTML = 'html'
KIND_TEXT = 'text'
DOCUMENT_KINDS = (KIND_HTML, KIND_TEXT)

# Trip fields a caller may already know (e.g. from a stored trip row)
KNOWN_FIELDS = (
    'route_display', 'travel_dates_display', 'full_route',
    'origin_iata', 'destination_iata', 'depart_date', 'return_date',
)

_HTML_SNIFF = re.compile(
    r'<\s*(?:!doctype|html|head|body|script|style|div|span|table|p|br|img|meta)\b',
    re.IGNORECASE
)


class InvalidDocumentError(ValueError):
    """Raised when extraction is called without a usable document."""


def looks_like_html(content):
    """Guess whether a string is markup rather than pasted text."""
    return bool(_HTML_SNIFF.search(content or ''))


@dataclass(frozen=True)
class RawDocument:
    """One input document plus the caller's hints about it."""

    content: str
    kind: str = KIND_TEXT
    airline: Optional[str] = None
    known: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.content is None:
            raise InvalidDocumentError("No document provided")
        if not isinstance(self.content, str):
            raise InvalidDocumentError(
                f"Unsupported document type: {type(self.content).__name__}"
            )
        if self.kind not in DOCUMENT_KINDS:
            raise InvalidDocumentError(f"Unknown document kind: {self.kind!r}")

        airline = self.airline.strip().upper() if isinstance(self.airline, str) else None
        object.__setattr__(self, 'airline', airline or None)

        known = {k: v for k, v in dict(self.known or {}).items()
                 if k in KNOWN_FIELDS and isinstance(v, str) and v.strip()}
        object.__setattr__(self, 'known', MappingProxyType(known))

    @classmethod
    def from_content(cls, content, airline=None, kind=None, known=None):
        """Build a document, sniffing html vs. text when kind is not given."""
        if content is None:
            raise InvalidDocumentError("No document provided")
        if not isinstance(content, str):
            raise InvalidDocumentError(
                f"Unsupported document type: {type(content).__name__}"
            )
        if kind is None:
            kind = KIND_HTML if looks_like_html(content) else KIND_TEXT
        return cls(content=content, kind=kind, airline=airline, known=known or {})

    @property
    def is_html(self):
        return self.kind == KIND_HTML


@dataclass(frozen=True)
class NormalizedText:
    """Plain-text projection of a document.

    ``text`` is the whole document on one line; ``lines`` keeps the original
    line / block boundaries for extractors that work line by line.
    """

    text: str
    lines: Tuple[str, ...] = ()

    def __bool__(self):
        return bool(self.text)


@dataclass(frozen=True)
class BeaconParams:
    """Merged query parameters from one or more analytics beacons."""

    values: Mapping[str, str]
    airline: Optional[str] = None
    beacon_count: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'values', MappingProxyType(dict(self.values)))

    def get(self, key, default=None):
        return self.values.get(key, default)

    def __contains__(self, key):
        return key in self.values

    def __len__(self):
        return len(self.values)


@dataclass(frozen=True)
class LegMatch:
    """A flight number with its adjoining airport pair, found on one line."""

    line_index: int
    position: int
    carrier: str
    flight_number: str
    depart_airport: str
    arrive_airport: str


@dataclass(frozen=True)
class FlightSegment:
    carrier: str
    flight_number: str
    depart_airport: str
    arrive_airport: str
    depart_datetime: Optional[datetime] = None
    arrive_datetime: Optional[datetime] = None
    segment_index: int = 0

    @property
    def flight_code(self):
        return f"{self.carrier}{self.flight_number}"

    def to_dict(self):
        return {
            'carrier': self.carrier,
            'flight_number': self.flight_number,
            'depart_airport': self.depart_airport,
            'arrive_airport': self.arrive_airport,
            'depart_datetime': self.depart_datetime.isoformat() if self.depart_datetime else None,
            'arrive_datetime': self.arrive_datetime.isoformat() if self.arrive_datetime else None,
            'segment_index': self.segment_index,
        }


@dataclass(frozen=True)
class TripRecord:
    """The extraction result. Every field is optional except confidence."""

    confidence: str
    pnr: Optional[str] = None
    airline: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    fare_brand: Optional[str] = None
    ticket_number: Optional[str] = None
    segments: Tuple[FlightSegment, ...] = ()
    flight_numbers: Tuple[str, ...] = ()
    origin_iata: Optional[str] = None
    destination_iata: Optional[str] = None
    departure_date: Optional[str] = None
    return_date: Optional[str] = None
    route_display: Optional[str] = None
    travel_dates_display: Optional[str] = None
    notes: Optional[str] = None
    sources: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'segments', tuple(self.segments))
        object.__setattr__(self, 'flight_numbers', tuple(self.flight_numbers))
        object.__setattr__(self, 'sources', MappingProxyType(dict(self.sources)))

    def to_dict(self):
        """Serialize to a plain dict, leaving out fields that were not found."""
        out = {}
        for name in ('pnr', 'airline', 'first_name', 'last_name', 'fare_brand',
                     'ticket_number', 'origin_iata', 'destination_iata',
                     'departure_date', 'return_date', 'route_display',
                     'travel_dates_display'):
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        if self.flight_numbers:
            out['flight_numbers'] = list(self.flight_numbers)
        if self.segments:
            out['segments'] = [seg.to_dict() for seg in self.segments]
        out['confidence'] = self.confidence
        if self.notes:
            out['notes'] = self.notes
        if self.sources:
            out['sources'] = dict(sorted(self.sources.items()))
        return out
