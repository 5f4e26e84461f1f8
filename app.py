"""
Lodgify Dashboard - prenotazioni e spese di gestione, Marbella.
Web app Streamlit con Google Sheets come storage.
"""

import streamlit as st
import pandas as pd
import io
import logging
import os
import sys
from datetime import date

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import DEFAULT_REPORT_YEAR, PROPERTY_RATES
from core.ingest import import_lodgify_csv
from core.sheets import save_to_sheets
from parsers.guest_details import parse_guest_details_xlsx
from reports.summary import (
    OVERALL,
    bookings_frame,
    chart_data,
    expense_totals,
    financial_summary,
    group_by_property,
    monthly_stats,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(
    page_title="Lodgify Dashboard",
    page_icon="🏠",
    layout="wide",
)

st.title("🏠 Lodgify Dashboard - Marbella")


# ── Verifica connessione Google Sheets ──────────────────────────────────────
def check_sheets_connection() -> bool:
    try:
        _ = st.secrets["gcp_service_account"]
        _ = st.secrets["google_sheets"]["spreadsheet_id"]
        return True
    except Exception:
        return False


with st.sidebar:
    st.header("Stato connessione")
    if check_sheets_connection():
        st.success("✓ Google Sheets connesso")
    else:
        st.error("✗ Credenziali mancanti")
        st.caption("Configura `.streamlit/secrets.toml`")

    st.divider()
    year = st.number_input("Anno report", min_value=2000, max_value=2100,
                           value=DEFAULT_REPORT_YEAR, step=1)
    st.caption("**Come esportare i file:**")
    with st.expander("Lodgify CSV"):
        st.write("Bookings → Export → CSV")
    with st.expander("Dettagli ospiti XLSX"):
        st.write("Name, DateArrival, Birthplace, Nationality, Passport, Address, AccompanyingGuests")


def df_to_excel_bytes(df: pd.DataFrame) -> bytes:
    """Converte DataFrame in bytes XLSX per il download."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Dati")
    return buf.getvalue()


tab_import, tab_bookings, tab_report = st.tabs(["📥 Importa", "📋 Prenotazioni", "📊 Report"])


# ============================================================
# TAB 1: IMPORTA
# ============================================================
with tab_import:
    st.header("Importa export Lodgify")

    csv_file = st.file_uploader("CSV prenotazioni", type=["csv"])
    details_file = st.file_uploader("Dettagli ospiti (opzionale)", type=["xlsx"])

    if csv_file is not None:
        try:
            details = parse_guest_details_xlsx(details_file) if details_file is not None else None
            bookings = import_lodgify_csv(csv_file, guest_details=details)
            st.session_state["bookings"] = bookings
            st.success(f"✓ {len(bookings)} prenotazioni lette da {csv_file.name}")
        except ValueError as e:
            st.error(f"**{csv_file.name}**: {e}")
            st.session_state.pop("bookings", None)

    bookings = st.session_state.get("bookings", [])
    if bookings:
        unknown = sorted({b.house_name for b in bookings if b.house_name not in PROPERTY_RATES})
        if unknown:
            st.warning(
                "⚠️ Proprietà senza tariffe (pulizie 0, commissione 18%): "
                + ", ".join(unknown) + ". Controlla `config.py`."
            )

        st.divider()
        col1, col2 = st.columns([1, 4])
        with col1:
            dry_run = st.checkbox("Dry run", value=False, help="Anteprima senza salvare")
        with col2:
            if st.button("✅ Salva su Google Sheets", type="primary",
                         disabled=not check_sheets_connection()):
                with st.spinner("Salvataggio in corso..."):
                    try:
                        result = save_to_sheets(bookings, dry_run=dry_run)
                        if not result.success:
                            st.error("Salvataggio non riuscito")
                        elif dry_run:
                            st.info(f"**Dry run:** {result.message}")
                        else:
                            st.success(f"✓ {result.message}")
                        if result.warnings:
                            with st.expander(f"Warning ({len(result.warnings)})"):
                                st.write("\n".join(f"- {w}" for w in result.warnings))
                    except Exception as e:
                        st.error(f"Errore: {e}")


# ============================================================
# TAB 2: PRENOTAZIONI
# ============================================================
with tab_bookings:
    st.header("Prenotazioni")
    bookings = st.session_state.get("bookings", [])

    if not bookings:
        st.info("Nessun dato. Importa un CSV dal tab Importa.")
    else:
        props = ["Tutte"] + sorted({b.house_name for b in bookings})
        sel_prop = st.selectbox("Proprietà", props)
        selected = [b for b in bookings if sel_prop == "Tutte" or b.house_name == sel_prop]

        df_show = bookings_frame(selected)
        st.dataframe(df_show, use_container_width=True, hide_index=True)

        returning = [b for b in selected if b.previous_stay is not None]
        if returning:
            st.subheader("Ospiti di ritorno")
            st.dataframe(pd.DataFrame([{
                "ospite": b.name,
                "arrivo": b.date_arrival,
                "soggiorno precedente": b.previous_stay.house_name,
                "partito il": b.previous_stay.date_departure,
                "giorni di intervallo": b.previous_stay.days_gap,
            } for b in returning]), use_container_width=True, hide_index=True)

        with st.expander("Dettaglio spese"):
            st.dataframe(pd.DataFrame([{
                "ospite": b.name,
                "proprieta": b.house_name,
                "categoria": e.category,
                "descrizione": e.description,
                "importo": round(e.amount, 2),
                "data": e.date,
            } for b in selected for e in b.expenses]), use_container_width=True, hide_index=True)

        col_csv, col_xlsx = st.columns(2)
        with col_csv:
            st.download_button("⬇️ Scarica CSV", df_show.to_csv(index=False).encode("utf-8"),
                               file_name="prenotazioni.csv", mime="text/csv")
        with col_xlsx:
            st.download_button(
                "⬇️ Scarica Excel", df_to_excel_bytes(df_show),
                file_name="prenotazioni.xlsx",
                mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )


# ============================================================
# TAB 3: REPORT
# ============================================================
with tab_report:
    st.header(f"Report {year}")
    bookings = st.session_state.get("bookings", [])

    if not bookings:
        st.info("Nessun dato.")
    else:
        today = date.today()
        summary = financial_summary(bookings, today)

        k1, k2, k3, k4 = st.columns(4)
        k1.metric("Incassi totali €", f"{summary['total_earnings']:.2f}")
        k2.metric("Incassato a oggi €", f"{summary['earned_to_date']:.2f}")
        k3.metric("Spese €", f"{summary['expenses']:.2f}")
        k4.metric("Utile netto €", f"{summary['net_profit']:.2f}")

        by_property = group_by_property(bookings, PROPERTY_RATES.keys())
        data = chart_data(by_property, int(year), today)

        sel = st.selectbox("Proprietà", [OVERALL] + sorted(by_property.keys()),
                           format_func=lambda p: "Tutte" if p == OVERALL else p)
        stats = data[sel]

        st.subheader("Incassi e spese per mese (€)")
        st.bar_chart(pd.DataFrame({
            "incassi": stats.monthly_revenue,
            "spese": stats.monthly_expenses,
        }))

        st.subheader("Occupazione (%)")
        st.line_chart(pd.Series(stats.monthly_occupancy, name="occupazione"))

        st.subheader("Spese per categoria")
        st.dataframe(
            pd.Series(stats.expenses_by_category, name="importo").round(2),
            use_container_width=True,
        )

        st.subheader("Spese per proprietà, mese e categoria")
        st.dataframe(expense_totals(bookings, int(year), PROPERTY_RATES.keys()).round(2),
                     use_container_width=True)

        st.subheader("Riepilogo mensile")
        st.dataframe(monthly_stats(bookings, int(year)).round(2),
                     use_container_width=True, hide_index=True)
