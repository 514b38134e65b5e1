"""
Confidence classification for extracted trips.

Two vocabularies, depending on how the document came in:

- HTML / beacon path: exact-flight > route-estimate > unknown
- Freeform paste path: high > medium > low

Downstream price comparisons use the tier to decide whether a fare
difference is exact or only an estimate.
"""

from typing import List, Optional, Tuple

from .models import (
    EXACT_FLIGHT, HIGH, LOW, MEDIUM, ROUTE_ESTIMATE, UNKNOWN,
)

LOW_CONFIDENCE_NOTE = 'Some fields could not be extracted automatically'


def classify_html(has_flight_match: bool, origin: Optional[str], destination: Optional[str]) -> str:
    """Tier for the HTML path.

    Args:
        has_flight_match: A flight number (or full segment) was matched in
            visible text or structured data
        origin: Resolved origin IATA code
        destination: Resolved destination IATA code
    """
    if has_flight_match:
        return EXACT_FLIGHT
    if origin and destination:
        return ROUTE_ESTIMATE
    return UNKNOWN


def classify_text(pnr: Optional[str], last_name: Optional[str], segment_count: int) -> str:
    """Tier for the freeform-paste path."""
    if pnr and last_name and segment_count > 0:
        return HIGH
    if pnr and last_name:
        return MEDIUM
    return LOW


def missing_fields(record_fields: dict, is_html: bool) -> List[str]:
    """Names of the fields that held the tier down."""
    if is_html:
        wanted = ('origin_iata', 'destination_iata', 'departure_date', 'flight_numbers')
    else:
        wanted = ('pnr', 'last_name', 'segments')
    return [name for name in wanted if not record_fields.get(name)]


def low_confidence_note(missing: List[str]) -> str:
    if not missing:
        return LOW_CONFIDENCE_NOTE
    return f"{LOW_CONFIDENCE_NOTE} (missing: {', '.join(missing)})"


def classify(record_fields: dict, is_html: bool) -> Tuple[str, Optional[str]]:
    """Pick the confidence tier and, for the lowest tier, the user-facing note.

    Args:
        record_fields: Resolved trip fields (as passed to TripRecord)
        is_html: True for the HTML / beacon path

    Returns:
        Tuple of (confidence, notes)
    """
    segments = record_fields.get('segments') or ()
    if is_html:
        confidence = classify_html(
            bool(record_fields.get('flight_numbers') or segments),
            record_fields.get('origin_iata'),
            record_fields.get('destination_iata'),
        )
        is_lowest = confidence == UNKNOWN
    else:
        confidence = classify_text(
            record_fields.get('pnr'),
            record_fields.get('last_name'),
            len(segments),
        )
        is_lowest = confidence == LOW

    notes = low_confidence_note(missing_fields(record_fields, is_html)) if is_lowest else None
    return confidence, notes
