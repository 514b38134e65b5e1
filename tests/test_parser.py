"""End-to-end tests for farewatch.parser."""

from datetime import datetime

import pytest

from farewatch.models import (
    EXACT_FLIGHT, HIGH, LOW, MEDIUM, ROUTE_ESTIMATE, UNKNOWN,
    InvalidDocumentError, RawDocument,
)
from farewatch.parser import extract, extract_from_html, extract_from_text
from fixtures import (
    AA_CONFIRMATION_TEXT, COMMENTED_BEACON_HTML, CONNECTION_TEXT, DELTA_TRIP_HTML,
    DELTA_TWO_BEACONS_HTML, MICRODATA_HTML, RED_EYE_TEXT, UNCLOSED_HEAD_HTML,
    UNITED_JSON_LD_HTML, UNQUOTED_BEACON_HTML, VAGUE_TEXT,
)


class TestDeltaManageTrip:
    """Delta manage-trip page with an analytics beacon."""

    def test_beacon_fields(self, backend) -> None:
        record = extract(DELTA_TRIP_HTML, airline="DL")
        assert record.pnr == "GO7RLB"
        assert record.origin_iata == "LGA"
        assert record.destination_iata == "TQO"
        assert record.departure_date == "2026-03-31"
        # Same-day return in the beacon means one-way
        assert record.return_date is None

    def test_flight_number_makes_exact(self, backend) -> None:
        record = extract(DELTA_TRIP_HTML, airline="DL")
        assert record.flight_numbers == ("DL342",)
        assert record.confidence == EXACT_FLIGHT
        assert record.notes is None

    def test_display_strings(self) -> None:
        record = extract_from_html(DELTA_TRIP_HTML)
        assert record.route_display == "LGA → TQO"
        assert record.travel_dates_display == "Mar 31, 2026"
        assert record.fare_brand == "Main Cabin"
        assert record.airline == "DL"

    def test_sources(self) -> None:
        record = extract_from_html(DELTA_TRIP_HTML, airline="DL")
        assert record.sources["pnr"] == "beacon"
        assert record.sources["origin_iata"] == "beacon"
        assert record.sources["airline"] == "hint"

    def test_later_beacon_wins(self, backend) -> None:
        record = extract(DELTA_TWO_BEACONS_HTML)
        assert record.origin_iata == "LGA"
        # Only the first beacon carried a destination
        assert record.destination_iata == "CUN"
        assert record.departure_date == "2026-03-31"
        assert record.return_date == "2026-04-07"
        assert record.confidence == ROUTE_ESTIMATE

    def test_display_string_beats_beacon(self) -> None:
        record = extract_from_html(DELTA_TRIP_HTML, known={"route_display": "JFK → CUN"})
        assert record.origin_iata == "JFK"
        assert record.destination_iata == "CUN"
        assert record.route_display == "JFK → CUN"
        assert record.sources["route_display"] == "display"

    def test_commented_out_beacon_is_ignored(self, backend) -> None:
        record = extract(COMMENTED_BEACON_HTML)
        assert record.origin_iata is None
        assert record.confidence == UNKNOWN

    def test_unquoted_beacon_src(self, backend) -> None:
        record = extract(UNQUOTED_BEACON_HTML)
        assert (record.origin_iata, record.destination_iata) == ("BOS", "SEA")
        assert record.confidence == ROUTE_ESTIMATE

    def test_unclosed_head_keeps_body_text(self) -> None:
        record = extract(UNCLOSED_HEAD_HTML)
        assert record.flight_numbers == ("DL342",)
        assert record.confidence == EXACT_FLIGHT

    def test_unsupported_airline_keeps_generic_fields(self) -> None:
        record = extract_from_html(DELTA_TRIP_HTML, airline="ZZ")
        assert record.pnr is None
        assert record.flight_numbers == ()
        assert record.fare_brand == "Main Cabin"
        assert record.confidence == UNKNOWN
        assert record.notes.startswith("Some fields could not be extracted automatically")


class TestStructuredData:

    def test_json_ld(self, backend) -> None:
        record = extract(UNITED_JSON_LD_HTML)
        assert record.pnr == "RXJ34P"
        assert record.airline == "UA"
        assert len(record.segments) == 1
        segment = record.segments[0]
        assert segment.flight_code == "UA1234"
        assert (segment.depart_airport, segment.arrive_airport) == ("SFO", "EWR")
        assert segment.depart_datetime == datetime(2026, 5, 2, 7, 15)
        assert segment.arrive_datetime == datetime(2026, 5, 2, 15, 40)
        assert record.departure_date == "2026-05-02"
        assert record.confidence == EXACT_FLIGHT
        assert record.sources["segments"] == "structured"

    def test_microdata(self, backend) -> None:
        record = extract(MICRODATA_HTML)
        assert record.pnr == "KT4W9B"
        assert [s.flight_code for s in record.segments] == ["AS2210"]
        assert record.origin_iata == "SEA"
        assert record.destination_iata == "ANC"
        assert record.departure_date is None
        assert record.confidence == EXACT_FLIGHT


class TestPastedConfirmation:

    def test_high_confidence(self) -> None:
        record = extract(AA_CONFIRMATION_TEXT)
        assert record.confidence == HIGH
        assert record.pnr == "QX7T2M"
        assert (record.first_name, record.last_name) == ("John", "Smith")
        assert record.airline == "AA"
        assert record.fare_brand == "Main Cabin"
        assert record.ticket_number == "0012345678901"
        assert record.flight_numbers == ("AA1234",)
        assert record.origin_iata == "JFK"
        assert record.destination_iata == "LAX"
        assert record.departure_date == "2026-03-31"
        assert record.segments[0].depart_datetime == datetime(2026, 3, 31, 8, 5)
        assert record.segments[0].arrive_datetime == datetime(2026, 3, 31, 11, 20)
        assert record.notes is None

    def test_red_eye_arrives_next_day(self) -> None:
        record = extract_from_text(RED_EYE_TEXT)
        segment = record.segments[0]
        assert segment.depart_datetime == datetime(2026, 3, 31, 22, 30)
        assert segment.arrive_datetime == datetime(2026, 4, 1, 6, 45)
        assert record.confidence == HIGH

    def test_connection_route_spans_all_legs(self) -> None:
        record = extract_from_text(CONNECTION_TEXT)
        assert [s.flight_code for s in record.segments] == ["UA512", "UA1877"]
        assert [s.segment_index for s in record.segments] == [0, 1]
        assert record.origin_iata == "ORD"
        assert record.destination_iata == "SFO"
        assert record.return_date is None

    def test_medium_without_segments(self) -> None:
        record = extract_from_text("Confirmation: QX7T2M\nName: John Smith\n")
        assert record.confidence == MEDIUM
        assert record.notes is None

    def test_low_confidence_note(self) -> None:
        record = extract(VAGUE_TEXT)
        assert record.confidence == LOW
        assert record.pnr is None
        assert record.notes == (
            "Some fields could not be extracted automatically (missing: pnr, last_name, segments)"
        )

    def test_segments_beat_known_trip_fields(self) -> None:
        record = extract_from_text(
            AA_CONFIRMATION_TEXT,
            known={"origin_iata": "BOS", "destination_iata": "SEA", "depart_date": "2026-06-01"},
        )
        assert (record.origin_iata, record.destination_iata) == ("JFK", "LAX")
        assert record.departure_date == "2026-03-31"
        assert record.sources["origin_iata"] == "segments"

    def test_known_trip_fields_fill_gaps(self) -> None:
        record = extract_from_text(
            "Confirmation: QX7T2M\nName: John Smith\n",
            known={"origin_iata": "BOS", "destination_iata": "SEA", "depart_date": "June 1, 2026"},
        )
        assert (record.origin_iata, record.destination_iata) == ("BOS", "SEA")
        assert record.departure_date == "2026-06-01"
        assert record.sources["destination_iata"] == "trip_fields"

    @pytest.mark.parametrize("depart_date", ["March 2026", "Friday", "31st"])
    def test_partial_known_date_is_dropped(self, depart_date) -> None:
        record = extract_from_text(
            "Confirmation: QX7T2M\nName: John Smith\n", known={"depart_date": depart_date})
        assert record.departure_date is None
        assert record.travel_dates_display is None

    def test_caps_fallback_picks_up_city_names(self) -> None:
        # Known limitation: the all-caps fallback has no notion of what a name is
        record = extract_from_text("NEW YORK to Tulum, confirmation GO7RLB")
        assert record.last_name == "NEW"
        assert record.first_name == "YORK"
        assert record.confidence == MEDIUM

    def test_unsupported_airline_hint(self) -> None:
        record = extract_from_text(AA_CONFIRMATION_TEXT, airline="ZZ")
        assert record.segments == ()
        assert record.flight_numbers == ()
        assert record.ticket_number is None
        assert record.pnr == "QX7T2M"
        assert record.confidence == MEDIUM


class TestExtractContract:

    def test_idempotent(self) -> None:
        first = extract(AA_CONFIRMATION_TEXT)
        second = extract(AA_CONFIRMATION_TEXT)
        assert first.to_dict() == second.to_dict()

    def test_backends_agree(self) -> None:
        pytest.importorskip("bs4")
        from farewatch import dom

        results = []
        for name in (dom.BACKEND_REGEX, dom.BACKEND_TREE):
            dom.configure_backend(name)
            results.append([extract(html).to_dict() for html in
                            (DELTA_TRIP_HTML, DELTA_TWO_BEACONS_HTML, UNITED_JSON_LD_HTML, MICRODATA_HTML,
                             COMMENTED_BEACON_HTML, UNQUOTED_BEACON_HTML, UNCLOSED_HEAD_HTML)])
        assert results[0] == results[1]

    def test_accepts_raw_document(self) -> None:
        doc = RawDocument(content=AA_CONFIRMATION_TEXT, kind="text", airline="aa")
        record = extract(doc)
        assert record.airline == "AA"
        assert record.sources["airline"] == "hint"

    @pytest.mark.parametrize("document", [None, b"<html></html>", 42])
    def test_invalid_document(self, document) -> None:
        with pytest.raises(InvalidDocumentError):
            extract(document)

    def test_unknown_kind(self) -> None:
        with pytest.raises(InvalidDocumentError):
            extract("some text", kind="pdf")

    def test_invalid_document_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            extract(None)

    def test_empty_text(self) -> None:
        record = extract("")
        assert record.confidence == LOW
        assert record.to_dict()["confidence"] == LOW

    def test_to_dict_omits_missing(self) -> None:
        data = extract(RED_EYE_TEXT).to_dict()
        assert "fare_brand" not in data
        assert data["segments"][0]["arrive_datetime"] == "2026-04-01T06:45:00"
        assert data["sources"]["pnr"] == "text"
