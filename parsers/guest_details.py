"""
Parser per il foglio XLSX con i dettagli ospiti (opzionale).

Una riga per prenotazione, colonne:
  Name, DateArrival, Birthplace, Nationality, Passport, Address,
  AccompanyingGuests (lista accompagnatori come stringa JSON)

Abbinamento alle prenotazioni tramite (Name, DateArrival).
"""

import json
import logging
from typing import Dict, Tuple

import pandas as pd

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.dates import to_iso
from core.models import GuestDetails
from config import GUEST_DETAILS_COLUMNS

logger = logging.getLogger(__name__)

GuestKey = Tuple[str, str]


def guest_key(name: str, date_arrival) -> GuestKey:
    """Chiave di abbinamento: nome ospite + data arrivo ISO."""
    return (str(name).strip(), to_iso(date_arrival))


def _clean(val):
    if val is None or (isinstance(val, float) and pd.isna(val)):
        return None
    s = str(val).strip()
    return s if s and s.lower() != "nan" else None


def _decode_guests(raw, name: str):
    """AccompanyingGuests è JSON; se non valido → None."""
    raw = _clean(raw)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (ValueError, TypeError):
        logger.warning("AccompanyingGuests non valido per %s: %r", name, raw)
        return None


def details_from_records(records) -> Dict[GuestKey, GuestDetails]:
    """Costruisce la mappa (nome, arrivo) → GuestDetails da righe dict."""
    details = {}
    for rec in records:
        name = _clean(rec.get("Name"))
        arrival = to_iso(rec.get("DateArrival"))
        if not name or not arrival:
            continue
        values = {}
        for col, attr in GUEST_DETAILS_COLUMNS.items():
            if attr == "accompanying_guests":
                values[attr] = _decode_guests(rec.get(col), name)
            else:
                values[attr] = _clean(rec.get(col))
        details[(name, arrival)] = GuestDetails(**values)
    return details


def parse_guest_details_xlsx(filepath) -> Dict[GuestKey, GuestDetails]:
    """Legge il foglio XLSX dettagli ospiti."""
    try:
        df = pd.read_excel(filepath, engine="openpyxl", header=0)
    except Exception as e:
        raise ValueError(f"Errore lettura XLSX dettagli ospiti: {e}")

    df.columns = [str(c).strip() for c in df.columns]
    if "Name" not in df.columns or "DateArrival" not in df.columns:
        raise ValueError("Foglio dettagli ospiti senza colonne Name/DateArrival")

    details = details_from_records(df.to_dict(orient="records"))
    logger.info("Dettagli ospiti: %d righe abbinabili", len(details))
    return details
