"""
Analytics beacon reader.

Airline "manage trip" pages fire analytics beacons whose query strings carry
the trip (origin, destination, dates, record locator) more reliably than the
visible page. This module finds those beacon URLs and turns their
parameters into trip fields.
"""

import logging
import re
from datetime import date
from urllib.parse import parse_qsl, urlsplit

from .airlines import airlines_in_scope
from .airports import clean_iata
from .dom import get_document_query
from .extractors import is_valid_pnr
from .models import BeaconParams
from .redact import mask

logger = logging.getLogger(__name__)

_MMDDYYYY_PATTERN = re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})$')


def mmddyyyy_to_iso(value):
    """Convert 'MM/DD/YYYY' to 'YYYY-MM-DD'.

    Returns None for anything malformed, including impossible dates
    like 02/30/2026.
    """
    match = _MMDDYYYY_PATTERN.match((value or '').strip())
    if not match:
        return None
    month, day, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def collect_beacon_sources(html, profile, view=None):
    """All beacon URLs for one airline, in document order."""
    pattern = profile.beacon_pattern
    if pattern is None:
        return []
    if view is None:
        view = get_document_query().open(html)
    return [url for url in view.resource_urls() if pattern.search(url)]


def read_beacons(doc, airline=None, view=None):
    """Parse and merge the analytics beacons embedded in an HTML document.

    Later beacons overwrite earlier ones key by key (the page may fire one
    beacon on load and another after content hydration).

    Args:
        doc: RawDocument (HTML)
        airline: Airline hint; defaults to the document's own hint
        view: Already-opened DocumentView, to avoid parsing twice

    Returns:
        BeaconParams or None when no beacon with a query string was found
    """
    if not doc.is_html:
        return None

    hint = airline or doc.airline
    if view is None:
        view = get_document_query().open(doc.content)

    for profile in airlines_in_scope(hint):
        sources = collect_beacon_sources(doc.content, profile, view=view)
        if not sources:
            continue

        merged = {}
        count = 0
        for src in sources:
            query = urlsplit(src).query
            if not query:
                continue
            for key, value in parse_qsl(query, keep_blank_values=True):
                merged[key] = value
            count += 1

        if count:
            logger.debug(f"Read {count} {profile.code} beacon(s), {len(merged)} parameters")
            return BeaconParams(values=merged, airline=profile.code, beacon_count=count)

    return None


def beacon_trip_fields(params, airline=None):
    """Map beacon parameters to trip fields using the airline's key table.

    Values that fail validation are dropped, never coerced. A return date
    equal to the departure date means a one-way trip and is left out.

    Returns:
        Dict with any of pnr, origin_iata, destination_iata,
        departure_date, return_date
    """
    if not params:
        return {}

    profiles = airlines_in_scope(airline or params.airline)
    if not profiles or not profiles[0].beacon_keys:
        return {}
    keys = profiles[0].beacon_keys

    fields = {}

    pnr = params.get(keys.get('pnr', ''), '').strip()
    if is_valid_pnr(pnr):
        fields['pnr'] = pnr
    elif pnr:
        logger.debug(f"Dropped beacon locator {mask(pnr)}: not 6 uppercase alphanumerics")

    for field_name in ('origin_iata', 'destination_iata'):
        code = clean_iata(params.get(keys.get(field_name, ''), '').strip())
        if code:
            fields[field_name] = code

    depart_iso = mmddyyyy_to_iso(params.get(keys.get('departure_date', '')))
    if depart_iso:
        fields['departure_date'] = depart_iso

    return_iso = mmddyyyy_to_iso(params.get(keys.get('return_date', '')))
    if return_iso and return_iso != depart_iso:
        fields['return_date'] = return_iso

    return fields
