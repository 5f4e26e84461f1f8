"""
Google Sheets storage per prenotazioni e spese importate.

Il Google Sheet ha questi fogli:
  - bookings → una riga per prenotazione
  - expenses → una riga per voce di spesa (collegata tramite booking_id)

Autenticazione via Service Account (credenziali in Streamlit secrets):
  [gcp_service_account]  → JSON del service account
  [google_sheets]        → spreadsheet_id

Gli errori di scrittura non annullano l'import: finiscono tra i warning
del risultato e le prenotazioni non salvate vanno reimportate a mano.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Callable, List

import gspread
import streamlit as st

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import SHEET_BOOKINGS, SHEET_EXPENSES
from core.deduplicator import is_booking_duplicate, key_of, load_existing_keys
from core.expenses import RateTable
from core.models import Booking, BookingExpense

logger = logging.getLogger(__name__)


BOOKING_COLUMNS = [
    "booking_id", "property", "guest_name", "guest_email", "guest_phone",
    "guest_country", "arrival_date", "departure_date", "nights", "guests",
    "total_amount", "source", "status",
    "guest_birthplace", "guest_nationality", "guest_passport", "guest_address",
    "accompanying_guests",
]

EXPENSE_COLUMNS = [
    "expense_id", "booking_id", "category", "amount", "description", "date",
]

_HEADERS = {
    SHEET_BOOKINGS: BOOKING_COLUMNS,
    SHEET_EXPENSES: EXPENSE_COLUMNS,
}


@dataclass
class ImportResult:
    success: bool
    inserted: int = 0
    skipped: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f"Import completed: {self.inserted} new bookings imported, "
            f"{self.skipped} existing bookings skipped"
        )


@st.cache_resource
def get_gspread_client():
    """Client gspread autenticato via Service Account (da st.secrets)."""
    creds_dict = dict(st.secrets["gcp_service_account"])
    return gspread.service_account_from_dict(creds_dict)


def get_sheet(sheet_name: str):
    """Apre il foglio richiesto, creandolo con l'header se manca."""
    gc = get_gspread_client()
    spreadsheet_id = st.secrets["google_sheets"]["spreadsheet_id"]
    sh = gc.open_by_key(spreadsheet_id)
    try:
        return sh.worksheet(sheet_name)
    except gspread.WorksheetNotFound:
        headers = _HEADERS[sheet_name]
        ws = sh.add_worksheet(title=sheet_name, rows=1000, cols=len(headers))
        ws.append_row(headers)
        return ws


def _booking_to_row(b: Booking) -> list:
    """Converte un Booking in lista di valori per il foglio bookings."""
    d = b.guest_details
    accompanying = ""
    if d is not None and d.accompanying_guests is not None:
        accompanying = json.dumps(d.accompanying_guests, ensure_ascii=False)

    return [
        b.id,                                    # booking_id
        b.house_name,                            # property
        b.name,                                  # guest_name
        b.email,                                 # guest_email
        b.phone,                                 # guest_phone
        b.country_name or "N/A",                 # guest_country
        b.date_arrival,                          # arrival_date
        b.date_departure,                        # departure_date
        b.nights,                                # nights
        b.people,                                # guests
        round(b.total_amount, 2),                # total_amount
        b.source or "CSV Import",                # source
        (b.status or "confirmed").lower(),       # status
        (d.birthplace or "") if d else "",       # guest_birthplace
        (d.nationality or "") if d else "",      # guest_nationality
        (d.passport or "") if d else "",         # guest_passport
        (d.address or "") if d else "",          # guest_address
        accompanying,                            # accompanying_guests
    ]


def _expense_to_row(b: Booking, e: BookingExpense) -> list:
    """Converte una voce di spesa in lista di valori per il foglio expenses."""
    return [
        e.id,
        b.id,
        e.category,
        round(e.amount, 2),
        e.description,
        e.date,
    ]


def save_to_sheets(
    bookings: List[Booking],
    dry_run: bool = False,
    rates: RateTable = None,
    open_sheet: Callable = get_sheet,
) -> ImportResult:
    """
    Salva prenotazioni e relative spese su Google Sheets, saltando i duplicati.
    """
    if rates is None:
        rates = RateTable.from_config()

    result = ImportResult(success=True)

    bookings_ws = open_sheet(SHEET_BOOKINGS)
    existing = load_existing_keys(bookings_ws.get_all_values())

    new_bookings = []
    for b in bookings:
        if is_booking_duplicate(b, existing):
            result.skipped += 1
            continue
        existing.add(key_of(b))
        new_bookings.append(b)
        if not rates.is_known(b.house_name):
            result.warnings.append(
                f"Property not in rate table: {b.house_name or '(empty)'} "
                f"(booking {b.id}), default rates applied"
            )

    if dry_run or not new_bookings:
        result.inserted = len(new_bookings)
        return result

    # Batch append (una sola chiamata API per foglio)
    try:
        bookings_ws.append_rows(
            [_booking_to_row(b) for b in new_bookings],
            value_input_option="RAW",
        )
    except gspread.exceptions.APIError as e:
        logger.error("Salvataggio prenotazioni fallito: %s", e)
        result.success = False
        result.warnings.append(f"Error inserting bookings: {e}")
        return result

    result.inserted = len(new_bookings)

    expense_rows = [_expense_to_row(b, e) for b in new_bookings for e in b.expenses]
    if expense_rows:
        try:
            open_sheet(SHEET_EXPENSES).append_rows(
                expense_rows, value_input_option="RAW"
            )
        except gspread.exceptions.APIError as e:
            logger.error("Salvataggio spese fallito: %s", e)
            result.warnings.append(
                f"Error inserting expenses for {len(new_bookings)} bookings: {e}"
            )

    logger.info(
        "Google Sheets: %d prenotazioni salvate, %d saltate, %d warning",
        result.inserted, result.skipped, len(result.warnings),
    )
    return result
