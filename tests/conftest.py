import pytest


def _row(**overrides) -> dict:
    row = {
        "Id": "1001",
        "Type": "Booking",
        "Source": "Airbnb",
        "Name": "Alice",
        "HouseName": "House A",
        "DateArrival": "2025-01-01",
        "DateDeparture": "2025-01-05",
        "Nights": "4",
        "People": "2",
        "TotalAmount": "1000",
        "Currency": "EUR",
        "Status": "Booked",
        "Email": "alice@example.com",
        "Phone": "+34 600 000 000",
        "CountryName": "Spain",
        "Notes": "",
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_row():
    return _row
