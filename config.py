"""
Configurazione centralizzata - modifica qui tariffe, proprietà e mapping.
"""

# Anno di default per i report (lo scheletro a 12 mesi)
DEFAULT_REPORT_YEAR = 2025

# Colonne obbligatorie nell'export CSV Lodgify
REQUIRED_COLUMNS = ["Name", "HouseName", "DateArrival", "DateDeparture"]

# Nomi dei fogli nel Google Sheet
SHEET_BOOKINGS = "bookings"
SHEET_EXPENSES = "expenses"

# ── Tariffe ──────────────────────────────────────────────────────────────────

TRANSACTION_FEE_RATE = 0.013   # costo transazione pagamento (1,3%)
VAT_RATE = 0.21                # IVA sulla commissione di gestione
DEFAULT_COMMISSION_RATE = 0.18

# Nome esatto della proprietà (HouseName nel CSV) → tariffe.
# Proprietà non elencate: pulizie 0, commissione DEFAULT_COMMISSION_RATE.
PROPERTY_RATES = {
    "Marbella Old Town": {
        "cleaning_fee": 90.0,
        "commission_rate": 0.22,
    },
    "Playa de la Fontanilla Marbella": {
        "cleaning_fee": 60.0,
        "commission_rate": 0.18,
    },
    "Jardines Tropicales-Puerto Banús": {
        "cleaning_fee": 30.0,
        "commission_rate": 0.18,
    },
    "ALOHA • Garden + Rooftop View Marbella Stay": {
        "cleaning_fee": 100.0,
        "commission_rate": 0.18,
        "ld_commission_rate": 0.15,   # commissione L&D sull'importo senza pulizie
    },
}

# Welcome package: una volta per soggiorno.
WELCOME_WINE = 2.00            # fisso, indipendente dal numero ospiti
WELCOME_PER_GUEST = {          # per ospite
    "coffee": 0.30,
    "water": 0.36,
    "tea": 0.30,
    "slippers": 0.60,
}

# ── Foglio dettagli ospiti (XLSX opzionale) ─────────────────────────────────

# Colonna nel foglio → campo di GuestDetails
GUEST_DETAILS_COLUMNS = {
    "Birthplace": "birthplace",
    "Nationality": "nationality",
    "Passport": "passport",
    "Address": "address",
    "AccompanyingGuests": "accompanying_guests",
}
