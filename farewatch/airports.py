"""
Airport code validation and display helpers.

Codes are validated by shape only (three uppercase letters). New airports
open all the time, so a code is never rejected just because it is missing
from FRIENDLY_NAMES.
"""

import re

_IATA_RE = re.compile(r'^[A-Z]{3}$')

# Three-letter words that show up in confirmation text in A-B-C / X-Y-Z
# shaped runs and are not meant as airports
EXCLUDED_CODES = {
    'THE', 'AND', 'FOR', 'ARE', 'BUT', 'NOT', 'YOU', 'ALL', 'CAN', 'HAD',
    'HER', 'WAS', 'ONE', 'OUR', 'OUT', 'DAY', 'GET', 'HAS', 'HIM', 'HIS',
    'HOW', 'ITS', 'MAY', 'NEW', 'NOW', 'OLD', 'SEE', 'WAY', 'WHO', 'AIR',
    'END', 'PRE', 'PRO', 'VIA', 'PER', 'NET', 'WEB', 'APP', 'URL', 'USA',
    'COM', 'ORG', 'EDU', 'GOV', 'FEE', 'BAG', 'TAX', 'REF', 'NON', 'SMS',
    'MON', 'TUE', 'WED', 'THU', 'FRI', 'SAT', 'SUN',
    'JAN', 'FEB', 'MAR', 'APR', 'JUN', 'JUL', 'AUG', 'SEP', 'OCT', 'NOV', 'DEC',
    'EST', 'PST', 'CST', 'MST', 'PDT', 'CDT', 'MDT', 'EDT', 'GMT', 'UTC', 'USD',
    'AAA', 'BBB', 'CCC', 'XXX', 'ZZZ',
}

# Short display names for the airports travelers see most often
FRIENDLY_NAMES = {
    'ATL': 'Atlanta', 'DFW': 'Dallas-Fort Worth', 'DEN': 'Denver', 'ORD': "Chicago O'Hare",
    'LAX': 'Los Angeles', 'JFK': 'New York JFK', 'LAS': 'Las Vegas', 'MCO': 'Orlando',
    'MIA': 'Miami', 'CLT': 'Charlotte', 'SEA': 'Seattle', 'PHX': 'Phoenix',
    'EWR': 'Newark', 'SFO': 'San Francisco', 'IAH': 'Houston', 'BOS': 'Boston',
    'FLL': 'Fort Lauderdale', 'MSP': 'Minneapolis', 'LGA': 'New York LaGuardia', 'DTW': 'Detroit',
    'PHL': 'Philadelphia', 'SLC': 'Salt Lake City', 'DCA': 'Washington Reagan', 'SAN': 'San Diego',
    'BWI': 'Baltimore', 'TPA': 'Tampa', 'AUS': 'Austin', 'IAD': 'Washington Dulles',
    'BNA': 'Nashville', 'MDW': 'Chicago Midway', 'HNL': 'Honolulu', 'DAL': 'Dallas Love Field',
    'PDX': 'Portland', 'ANC': 'Anchorage', 'OGG': 'Maui', 'SJU': 'San Juan',
    'CUN': 'Cancun', 'TQO': 'Tulum', 'SJD': 'Cabo', 'MEX': 'Mexico City',
    'YYZ': 'Toronto', 'YVR': 'Vancouver', 'LHR': 'London Heathrow', 'CDG': 'Paris',
    'AMS': 'Amsterdam', 'FRA': 'Frankfurt', 'HND': 'Tokyo Haneda', 'NRT': 'Tokyo Narita',
    'ICN': 'Seoul', 'SYD': 'Sydney',
}


def is_iata_code(code):
    """True when code is exactly three uppercase letters."""
    return isinstance(code, str) and bool(_IATA_RE.match(code))


def clean_iata(code):
    """Return the code if it is a well-formed IATA code, else None.

    Codes are not upper-cased or trimmed: a malformed candidate is
    discarded rather than coerced.
    """
    return code if is_iata_code(code) else None


def is_plausible_text_code(code):
    """Check a code picked out of visible text (not a common word)."""
    return is_iata_code(code) and code not in EXCLUDED_CODES


def get_airport_display(code):
    """Get a display string for an airport code.

    Returns:
        "Boston (BOS)" for known airports, otherwise just the code
    """
    if not code:
        return ""
    name = FRIENDLY_NAMES.get(code)
    return f"{name} ({code})" if name else code
