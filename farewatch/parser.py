"""
Itinerary extraction entry points.

Strategy (in order of reliability):
1. Analytics beacons fired by the airline's manage-trip page (HTML only)
2. Schema.org JSON-LD / microdata (HTML only)
3. Flight-number / airport / time heuristics over the normalized text
4. Caller-supplied trip fields, as the last resort

Every call is independent: a document goes in, one TripRecord comes out.
"""

import logging

from .beacons import beacon_trip_fields, read_beacons
from .builder import (
    SOURCE_SEGMENTS, SOURCE_STRUCTURED, SOURCE_TEXT, SOURCE_BEACON,
    TripEvidence, build_trip_record,
)
from .dom import get_document_query
from .extractors import (
    extract_fare_brand, extract_flight_numbers, extract_passenger_name,
    extract_record_locator, extract_route, extract_ticket_number,
    extract_trip_dates, find_leg_matches,
)
from .models import KIND_HTML, KIND_TEXT, InvalidDocumentError, RawDocument
from .normalizer import normalize
from .redact import mask, mask_name
from .segments import assemble
from .structured import read_structured_trip

logger = logging.getLogger(__name__)


def _as_document(document, airline=None, kind=None, known=None):
    if isinstance(document, RawDocument):
        if airline is None and kind is None and known is None:
            return document
        return RawDocument(
            content=document.content,
            kind=kind or document.kind,
            airline=airline or document.airline,
            known=known if known is not None else document.known,
        )
    if document is None:
        raise InvalidDocumentError("No document provided")
    if not isinstance(document, str):
        raise InvalidDocumentError(f"Unsupported document type: {type(document).__name__}")
    return RawDocument.from_content(document, airline=airline, kind=kind, known=known)


# ============================================================================
# MARKUP-ONLY SOURCES
# ============================================================================

def _collect_markup_evidence(doc, evidence):
    """Beacons and structured data; the document is parsed once for both."""
    view = get_document_query().open(doc.content)

    params = read_beacons(doc, view=view)
    if params:
        evidence.beacon = beacon_trip_fields(params)
        if evidence.beacon.get('pnr'):
            evidence.pnr[SOURCE_BEACON] = evidence.beacon['pnr']
        logger.debug(f"Beacon fields: {sorted(evidence.beacon)}")

    structured = read_structured_trip(view, airline=doc.airline)
    if structured:
        if structured.pnr:
            evidence.pnr[SOURCE_STRUCTURED] = structured.pnr
        if structured.segments:
            evidence.segments = list(structured.segments)
            evidence.segment_source = SOURCE_STRUCTURED


# ============================================================================
# TEXT HEURISTICS
# ============================================================================

def _collect_text_evidence(doc, normalized, evidence):
    airline = doc.airline

    pnr = extract_record_locator(normalized, airline)
    if pnr:
        evidence.pnr[SOURCE_TEXT] = pnr

    # The all-caps fallback misfires on page chrome, so only pasted text uses it
    name = extract_passenger_name(normalized, airline, allow_fallback=not doc.is_html)
    if name:
        evidence.first_name = name.first
        evidence.last_name = name.last
        logger.debug(f"Passenger name ({name.method}): {mask_name(name.first, name.last)}")

    evidence.fare_brand = extract_fare_brand(normalized, airline)
    evidence.ticket_number = extract_ticket_number(normalized, airline)
    evidence.flight_numbers = extract_flight_numbers(normalized, airline)
    evidence.text_route = extract_route(normalized, airline)
    evidence.text_dates = extract_trip_dates(normalized, airline) or {}

    if not evidence.segments:
        legs = find_leg_matches(normalized, airline)
        if legs:
            evidence.segments = assemble(legs, normalized.lines)
            evidence.segment_source = SOURCE_SEGMENTS


def extract(document, airline=None, kind=None, known=None):
    """Extract one trip from an HTML page or a pasted confirmation.

    Args:
        document: RawDocument or document content as a string
        airline: Optional two-letter airline hint ("DL")
        kind: 'html' or 'text'; sniffed from the content when omitted
        known: Optional dict of trip fields the caller already has
            (route_display, travel_dates_display, full_route, origin_iata,
            destination_iata, depart_date, return_date)

    Returns:
        TripRecord

    Raises:
        InvalidDocumentError: document is None, not a string, or kind is unknown
    """
    doc = _as_document(document, airline=airline, kind=kind, known=known)
    logger.debug(f"Extracting from {doc.kind} document ({len(doc.content)} chars), airline hint {doc.airline}")

    normalized = normalize(doc)
    evidence = TripEvidence(is_html=doc.is_html, airline_hint=doc.airline, known=dict(doc.known))

    if doc.is_html:
        _collect_markup_evidence(doc, evidence)
    _collect_text_evidence(doc, normalized, evidence)

    record = build_trip_record(evidence)
    logger.debug(f"Extraction done: {mask(record.pnr)} {record.confidence}")
    return record


def extract_from_html(html, airline=None, known=None):
    """Extract from a manage-trip HTML page."""
    return extract(html, airline=airline, kind=KIND_HTML, known=known)


def extract_from_text(text, airline=None, known=None):
    """Extract from a pasted confirmation (plain text)."""
    return extract(text, airline=airline, kind=KIND_TEXT, known=known)
