"""
Import completo di un export Lodgify: righe grezze → Booking con registro spese.

Passi:
  1. normalizzazione di ogni riga (parsers.lodgify.normalize_row)
  2. raggruppamento per ospite e ordinamento per arrivo (core.stays)
  3. flag di continuità del soggiorno
  4. registro spese (core.expenses)
  5. abbinamento dettagli ospiti, se presenti

Funzione pura: stesso input → stesso output, nell'ordine delle righe del CSV.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Mapping, Optional

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.expenses import RateTable, build_expenses
from core.models import Booking, GuestDetails
from core.stays import group_by_guest, resolve_stays
from parsers.guest_details import GuestKey, guest_key
from parsers.lodgify import normalize_row, read_lodgify_csv

logger = logging.getLogger(__name__)


def build_bookings(
    rows: List[Mapping[str, str]],
    guest_details: Optional[Dict[GuestKey, GuestDetails]] = None,
    rates: RateTable = None,
) -> List[Booking]:
    """Trasforma le righe grezze in Booking completi."""
    if rates is None:
        rates = RateTable.from_config()
    guest_details = guest_details or {}

    normalized = [normalize_row(r) for r in rows]

    # id(oggetto) → Booking finale: i nomi ospite non sono univoci e
    # due righe possono essere identiche
    built: Dict[int, Booking] = {}
    for name, group in group_by_guest(normalized).items():
        for booking, flags in zip(group, resolve_stays(group)):
            flagged = replace(
                booking,
                is_consecutive_stay=flags.is_consecutive_stay,
                is_first_booking_of_stay=flags.is_first_booking_of_stay,
                previous_stay=flags.previous_stay,
                guest_details=guest_details.get(guest_key(booking.name, booking.date_arrival)),
            )
            built[id(booking)] = replace(flagged, expenses=build_expenses(flagged, rates))

    bookings = [built[id(b)] for b in normalized]
    logger.info(
        "Import: %d prenotazioni, %d voci di spesa",
        len(bookings), sum(len(b.expenses) for b in bookings),
    )
    return bookings


def import_lodgify_csv(
    filepath_or_buffer,
    guest_details: Optional[Dict[GuestKey, GuestDetails]] = None,
    rates: RateTable = None,
) -> List[Booking]:
    """Legge il CSV Lodgify e restituisce le prenotazioni con spese."""
    rows = read_lodgify_csv(filepath_or_buffer)
    return build_bookings(rows, guest_details=guest_details, rates=rates)
