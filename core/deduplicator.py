"""
Controllo duplicati: evita di salvare prenotazioni già presenti nel foglio.

Una prenotazione è identificata da (proprietà, nome ospite, arrivo, partenza):
l'Id Lodgify non basta perché lo stesso export può essere reimportato
dopo modifiche manuali.
"""

from typing import List, Set, Tuple

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.dates import to_iso
from core.models import Booking

BookingKey = Tuple[str, str, str, str]


def booking_key(house_name: str, guest_name: str, arrival, departure) -> BookingKey:
    def norm(s):
        return str(s).strip().lower() if s is not None else ""
    return (norm(house_name), norm(guest_name), to_iso(arrival), to_iso(departure))


def key_of(b: Booking) -> BookingKey:
    return booking_key(b.house_name, b.name, b.date_arrival, b.date_departure)


def load_existing_keys(all_values: List[list]) -> Set[BookingKey]:
    """
    Legge le righe del foglio prenotazioni (header incluso, come da
    Worksheet.get_all_values) e restituisce le chiavi già presenti.
    """
    if len(all_values) <= 1:
        return set()

    headers = all_values[0]
    try:
        prop_idx = headers.index("property")
        name_idx = headers.index("guest_name")
        arr_idx = headers.index("arrival_date")
        dep_idx = headers.index("departure_date")
    except ValueError:
        return set()

    width = max(prop_idx, name_idx, arr_idx, dep_idx)
    keys = set()
    for row in all_values[1:]:
        if len(row) <= width:
            continue
        keys.add(booking_key(row[prop_idx], row[name_idx], row[arr_idx], row[dep_idx]))
    return keys


def is_booking_duplicate(b: Booking, existing_keys: Set[BookingKey]) -> bool:
    return key_of(b) in existing_keys
