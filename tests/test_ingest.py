import io

import pytest

from core.ingest import build_bookings, import_lodgify_csv
from core.models import GuestDetails

CSV = (
    "Id,Name,HouseName,DateArrival,DateDeparture,Nights,People,TotalAmount,Source,Notes\n"
    "1,Alice,House A,2025-01-05,2025-01-08,3,2,\"300,00\",Airbnb,\n"
    "2,Bob,Marbella Old Town,2025-02-01,2025-02-04,3,3,450,Booking,Early arrival\n"
    "3,Alice,House A,2025-01-01,2025-01-05,4,2,400,Airbnb,\n"
)

WELCOME = {
    "Management-Wine", "Management-Coffee", "Management-Water",
    "Management-Tea", "Management-Slippers",
}


def test_alice_back_to_back_scenario(make_row):
    rows = [
        make_row(Id="1", DateArrival="2025-01-01", DateDeparture="2025-01-05"),
        make_row(Id="2", DateArrival="2025-01-05", DateDeparture="2025-01-08"),
    ]
    first, second = build_bookings(rows)

    assert first.is_first_booking_of_stay is True
    assert first.is_consecutive_stay is False
    assert WELCOME <= {e.category for e in first.expenses}

    assert second.is_consecutive_stay is True
    assert second.is_first_booking_of_stay is False
    categories = {e.category for e in second.expenses}
    assert "Cleaning" not in categories
    assert not WELCOME & categories


def test_import_keeps_csv_order():
    bookings = import_lodgify_csv(io.StringIO(CSV))
    assert [b.id for b in bookings] == ["1", "2", "3"]
    alice_later, bob, alice_first = bookings
    assert alice_later.is_consecutive_stay is True
    assert alice_first.is_first_booking_of_stay is True
    assert alice_later.total_amount == pytest.approx(300.0)
    assert bob.guest_notes == ["Early arrival"]
    assert bob.previous_stay is None


def test_import_is_deterministic():
    first = import_lodgify_csv(io.StringIO(CSV))
    second = import_lodgify_csv(io.StringIO(CSV))
    assert first == second
    assert [repr(b) for b in first] == [repr(b) for b in second]


def test_duplicate_rows_are_distinct_bookings(make_row):
    rows = [make_row(), make_row()]
    a, b = build_bookings(rows)
    # stesso arrivo/partenza: nessuna continua l'altra
    assert a.is_consecutive_stay is False
    assert b.is_consecutive_stay is False


def test_guest_details_join(make_row):
    details = {
        ("Alice", "2025-01-01"): GuestDetails(
            nationality="ES", accompanying_guests=[{"name": "Ben"}]
        ),
    }
    rows = [
        make_row(Id="1"),
        make_row(Id="2", Name="Bob"),
    ]
    alice, bob = build_bookings(rows, guest_details=details)
    assert alice.guest_details.nationality == "ES"
    assert alice.guest_details.accompanying_guests == [{"name": "Ben"}]
    assert bob.guest_details is None


def test_bookings_are_not_mutated_by_build(make_row):
    rows = [make_row(Id="1")]
    before = dict(rows[0])
    build_bookings(rows)
    assert rows[0] == before
