"""
Airline reference data used by the extractors.

Per-airline heuristics live in the AIRLINES table rather than in
per-airline functions: ticket prefixes, flight-number patterns, analytics
beacon hosts and the beacon keys that carry trip data.
"""

import re
from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass(frozen=True)
class AirlineProfile:
    code: str
    name: str
    ticket_prefix: Optional[str] = None
    manage_trip_url: Optional[str] = None
    # Regex fragment matched against beacon src URLs
    beacon_host: Optional[str] = None
    # trip field -> beacon query key
    beacon_keys: Mapping[str, str] = field(default_factory=dict)

    @property
    def leg_pattern(self):
        """Carrier code + flight number + adjoining AAA-BBB airport pair."""
        return _compiled(
            rf'\b(?i:{re.escape(self.code)})\s?(\d{{1,4}}[A-Z]?)\s+'
            r'([A-Z]{3})\s*[-–]\s*([A-Z]{3})\b'
        )

    @property
    def flight_number_pattern(self):
        # Case-sensitive: "as 2024" in prose is not an Alaska flight
        return _compiled(rf'\b({re.escape(self.code)}\s?\d{{1,4}})\b')

    @property
    def ticket_pattern(self):
        if not self.ticket_prefix:
            return None
        return _compiled(rf'\b{self.ticket_prefix}\d{{10}}\b')

    @property
    def beacon_pattern(self):
        if not self.beacon_host:
            return None
        return _compiled(self.beacon_host, re.IGNORECASE)


_PATTERN_CACHE = {}


def _compiled(pattern, flags=0):
    key = (pattern, flags)
    if key not in _PATTERN_CACHE:
        _PATTERN_CACHE[key] = re.compile(pattern, flags)
    return _PATTERN_CACHE[key]


AIRLINES = {
    'AA': AirlineProfile(
        code='AA',
        name='American Airlines',
        ticket_prefix='001',
        manage_trip_url='https://www.aa.com/reservation/view/find-your-reservation',
    ),
    'DL': AirlineProfile(
        code='DL',
        name='Delta Air Lines',
        ticket_prefix='006',
        manage_trip_url='https://www.delta.com/my-trips/trip-details',
        beacon_host=r'smetrics\.delta\.com/b/ss/',
        beacon_keys={
            'origin_iata': 'v4',
            'destination_iata': 'v5',
            'departure_date': 'v10',
            'return_date': 'v11',
            'pnr': 'v91',
        },
    ),
    'UA': AirlineProfile(
        code='UA',
        name='United Airlines',
        ticket_prefix='016',
        manage_trip_url='https://www.united.com/en/us/manageres/mytrips',
    ),
    'AS': AirlineProfile(
        code='AS',
        name='Alaska Airlines',
        ticket_prefix='027',
        manage_trip_url='https://www.alaskaair.com/booking/reservation-lookup',
    ),
    'WN': AirlineProfile(
        code='WN',
        name='Southwest',
        ticket_prefix='526',
    ),
    'B6': AirlineProfile(
        code='B6',
        name='JetBlue',
        ticket_prefix='279',
    ),
}


def get_airline(code):
    """Look up an airline profile by IATA code (None when not supported)."""
    if not code:
        return None
    return AIRLINES.get(code.strip().upper())


def airlines_in_scope(hint):
    """Profiles an airline-specific extractor should try.

    No hint means every supported airline; a hint outside the supported
    set means none of them.
    """
    if not hint:
        return list(AIRLINES.values())
    profile = get_airline(hint)
    return [profile] if profile else []


# ============================================================================
# FARE BRANDS
# ============================================================================

# Scan order for the fare-brand extractor
FARE_BRANDS = (
    'Basic Economy',
    'Main Cabin',
    'Economy',
    'Premium Economy',
    'Business',
    'First Class',
    'Saver',
    'Main',
    'First',
)

# Categories the rest of the product groups brands into
BRAND_OPTIONS = (
    'Basic Economy',
    'Main/Economy',
    'Premium Economy',
    'First/Business',
)

_BRAND_CATEGORIES = {
    'basic economy': 'Basic Economy',
    'saver': 'Basic Economy',
    'main cabin': 'Main/Economy',
    'main': 'Main/Economy',
    'economy': 'Main/Economy',
    'premium economy': 'Premium Economy',
    'business': 'First/Business',
    'first class': 'First/Business',
    'first': 'First/Business',
}


def brand_category(brand):
    """Map a fare brand label to one of BRAND_OPTIONS (or None)."""
    if not brand:
        return None
    return _BRAND_CATEGORIES.get(brand.strip().lower())


def is_basic_economy(brand):
    return 'basic' in (brand or '').lower()
