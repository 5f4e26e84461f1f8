"""
Parser per il CSV esportato da Lodgify (elenco prenotazioni).

Come esportare da Lodgify:
  Bookings → Export → CSV (tutte le colonne)

Struttura CSV: header obbligatorio, separatore virgola, encoding utf-8 (BOM opzionale).
Colonne usate (nomi Lodgify):
  Id, Type, Source, SourceText, Name, DateArrival, DateDeparture, Nights,
  HouseName, House_Id, RoomTypes, People, DateCreated, TotalAmount, Currency,
  Status, Email, Phone, CountryName, RoomRatesTotal, PromotionsTotal,
  FeesTotal, TaxesTotal, AddOnsTotal, AmountPaid, BalanceDue,
  OwnerFirstName, OwnerLastName, OwnerEmail, OwnerPayout, Notes

Gli importi possono usare la virgola come separatore decimale ("1234,50").
Valori numerici non validi diventano 0 (ospiti: 1), senza errori: una riga
sporca non deve bloccare l'import dell'intero file.
"""

import logging
import math
from typing import List, Mapping

import pandas as pd

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.models import Booking
from config import REQUIRED_COLUMNS

logger = logging.getLogger(__name__)


def _to_float(val) -> float:
    """Converte importo CSV in float. Virgola decimale ammessa, errori → 0.0."""
    if val is None or str(val).strip() in ("", "-", "nan"):
        return 0.0
    try:
        result = float(str(val).strip().replace(",", ".").replace(" ", ""))
    except (ValueError, TypeError):
        return 0.0
    # float() accetta anche "NaN", "inf", "Infinity"
    return result if math.isfinite(result) else 0.0


def _to_int(val, default: int) -> int:
    """Converte intero CSV ("3", "3.0", "3,0"). Errori → default."""
    if val is None or str(val).strip() in ("", "-", "nan"):
        return default
    try:
        result = float(str(val).strip().replace(",", "."))
    except (ValueError, TypeError):
        return default
    return int(result) if math.isfinite(result) else default


def _text(row: Mapping[str, str], key: str, default: str = "") -> str:
    val = row.get(key)
    if val is None:
        return default
    val = str(val).strip()
    return val if val else default


def normalize_row(row: Mapping[str, str]) -> Booking:
    """
    Converte una riga grezza del CSV in Booking.

    Non solleva mai eccezioni: campi mancanti prendono il default,
    i flag di soggiorno e le spese vengono calcolati dopo (core.ingest).
    """
    people = _to_int(row.get("People"), 1)
    if people < 1:
        people = 1

    notes = _text(row, "Notes")

    return Booking(
        id=_text(row, "Id"),
        type=_text(row, "Type"),
        source=_text(row, "Source"),
        source_text=_text(row, "SourceText"),
        name=_text(row, "Name"),
        date_arrival=_text(row, "DateArrival"),
        date_departure=_text(row, "DateDeparture"),
        nights=_to_int(row.get("Nights"), 0),
        house_name=_text(row, "HouseName"),
        house_id=_text(row, "House_Id"),
        room_types=_text(row, "RoomTypes"),
        people=people,
        date_created=_text(row, "DateCreated"),
        total_amount=_to_float(row.get("TotalAmount")),
        currency=_text(row, "Currency"),
        status=_text(row, "Status"),
        email=_text(row, "Email"),
        phone=_text(row, "Phone"),
        country_name=_text(row, "CountryName", "N/A"),
        room_rates_total=_to_float(row.get("RoomRatesTotal")),
        promotions_total=_to_float(row.get("PromotionsTotal")),
        fees_total=_to_float(row.get("FeesTotal")),
        taxes_total=_to_float(row.get("TaxesTotal")),
        add_ons_total=_to_float(row.get("AddOnsTotal")),
        amount_paid=_to_float(row.get("AmountPaid")),
        balance_due=_to_float(row.get("BalanceDue")),
        owner_first_name=_text(row, "OwnerFirstName"),
        owner_last_name=_text(row, "OwnerLastName"),
        owner_email=_text(row, "OwnerEmail"),
        owner_payout=_to_float(row.get("OwnerPayout")),
        guest_notes=[notes] if notes else [],
    )


def read_lodgify_csv(filepath_or_buffer) -> List[dict]:
    """
    Legge il CSV Lodgify e restituisce le righe grezze (dict colonna → stringa).

    Solleva ValueError solo per errori strutturali: file vuoto, illeggibile
    o senza le colonne obbligatorie.
    """
    try:
        df = pd.read_csv(
            filepath_or_buffer,
            encoding="utf-8-sig",
            dtype=str,
            na_filter=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        raise ValueError("File CSV Lodgify vuoto")
    except Exception as e:
        raise ValueError(f"Errore lettura CSV Lodgify: {e}")

    # Normalizza nomi colonne
    df.columns = df.columns.str.strip()

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(
            f"Header CSV non riconosciuto, colonne mancanti: {', '.join(missing)}"
        )

    # Righe composte solo da separatori (",,,,")
    df = df[(df != "").any(axis=1)]
    if df.empty:
        raise ValueError("Nessuna prenotazione trovata nel CSV Lodgify")

    rows = df.to_dict(orient="records")
    logger.info("CSV Lodgify: %d righe lette", len(rows))
    return rows


def parse_lodgify_csv(filepath_or_buffer) -> List[Booking]:
    """Legge il CSV e normalizza ogni riga (senza flag di soggiorno né spese)."""
    return [normalize_row(row) for row in read_lodgify_csv(filepath_or_buffer)]
