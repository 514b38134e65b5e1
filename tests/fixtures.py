"""Sample documents shared by the test modules."""

DELTA_BEACON = (
    "https://smetrics.delta.com/b/ss/deltacom2/1/JS-2.22.0/s71234?AQB=1"
    "&amp;v4=LGA&amp;v5=TQO&amp;v10=03/31/2026&amp;v11=03/31/2026&amp;v91=GO7RLB&amp;AQE=1"
)

DELTA_TRIP_HTML = f"""<!DOCTYPE html>
<html>
<head>
<title>My Trips - Delta Air Lines</title>
<script src="https://www.delta.com/static/app.js"></script>
<script src="{DELTA_BEACON}"></script>
</head>
<body>
<div class="trip-header"><h1>New York to Tulum</h1></div>
<div class="flight-card">
<p>Flight DL342</p>
<p>Main Cabin</p>
</div>
</body>
</html>
"""

# Page fires a beacon on load and another one after the trip finished loading
DELTA_TWO_BEACONS_HTML = """<html><body>
<img src="https://smetrics.delta.com/b/ss/deltacom2/1/s1?v4=JFK&amp;v5=CUN&amp;v10=03/30/2026">
<div><p>Loading your trip</p></div>
<img src="https://smetrics.delta.com/b/ss/deltacom2/1/s2?v4=LGA&amp;v10=03/31/2026&amp;v11=04/07/2026">
</body></html>
"""

UNITED_JSON_LD_HTML = """<html>
<body>
<script type="application/ld+json">
{
  "@context": "http://schema.org",
  "@type": "FlightReservation",
  "reservationNumber": "RXJ34P",
  "reservationFor": {
    "@type": "Flight",
    "flightNumber": "1234",
    "airline": {"@type": "Airline", "iataCode": "UA"},
    "departureAirport": {"@type": "Airport", "iataCode": "SFO"},
    "departureTime": "2026-05-02T07:15:00-07:00",
    "arrivalAirport": {"@type": "Airport", "iataCode": "EWR"},
    "arrivalTime": "2026-05-02T15:40:00-04:00"
  }
}
</script>
<div><p>Your trip is confirmed.</p></div>
</body>
</html>
"""

MICRODATA_HTML = """<html><body>
<div itemscope itemtype="http://schema.org/FlightReservation">
  <meta itemprop="reservationNumber" content="KT4W9B">
  <div itemprop="reservationFor" itemscope itemtype="http://schema.org/Flight">
    <span itemprop="flightNumber">2210</span>
    <div itemprop="airline" itemscope><meta itemprop="iataCode" content="AS"></div>
    <div itemprop="departureAirport" itemscope><span itemprop="iataCode">SEA</span></div>
    <div itemprop="arrivalAirport" itemscope><span itemprop="iataCode">ANC</span></div>
  </div>
</div>
</body></html>
"""

AA_CONFIRMATION_TEXT = """Your trip confirmation
Confirmation: QX7T2M
Name: John Smith
AA 1234 JFK-LAX
Mar 31, 2026 8:05 AM  Mar 31, 2026 11:20 AM
Fare: Main Cabin
Ticket number 0012345678901
"""

RED_EYE_TEXT = """Record locator: HX4PLM
Passenger: Maria Lopez
DL 1570 LAX-JFK
Mar 31, 2026 10:30 PM
Arrives 6:45 AM
"""

CONNECTION_TEXT = """Confirmation code: PQ8ZRD
Traveler: Ann Lee
UA 512 ORD-DEN
Apr 10, 2026 9:00 AM Apr 10, 2026 10:35 AM
UA 1877 DEN-SFO
Apr 10, 2026 11:50 AM Apr 10, 2026 1:40 PM
"""

VAGUE_TEXT = "hey can you check my flight to Lax next week, it was pricey"

# Beacon left in the page source inside an HTML comment
COMMENTED_BEACON_HTML = """<html><body>
<!-- <script src="https://smetrics.delta.com/b/ss/deltacom2/1/s1?v4=BOS&amp;v5=SEA"></script> -->
<p>Your trip</p>
</body></html>
"""

UNQUOTED_BEACON_HTML = """<html><body>
<p>Your trip</p>
<img alt=tracking src=https://smetrics.delta.com/b/ss/deltacom2/1/s1?v4=BOS&amp;v5=SEA width=1>
</body></html>
"""

# Legal HTML5: </head> omitted
UNCLOSED_HEAD_HTML = "<html><head><title>Trip</title><body><p>Flight DL342</p></body></html>"
