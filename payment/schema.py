# payment/schema.py
"""
Column contract for purchase ledger records.

Rows arrive from the store with snake_case column names and from the
presentation layer with camelCase keys; both are accepted and converted to
one typed frame.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

import pandas as pd

from utils.time_utils import TimeUtils

logger = logging.getLogger(__name__)

# storage column -> record field
FIELD_MAP = {
    "id": "id",
    "company_name": "companyName",
    "department": "department",
    "invoice_number": "invoiceNumber",
    "invoice_date": "invoiceDate",
    "invoice_amount": "invoiceAmount",
    "tps": "tps",
    "tvq": "tvq",
    "net_amount": "netAmount",
    "check_number": "checkNumber",
    "clear_flag": "clearFlag",
    "actual_paid_amount": "actualPaidAmount",
    "check_total_amount": "checkTotalAmount",
    "check_date": "checkDate",
    "check_mailed_date": "checkMailedDate",
    "bank_reconciliation_date": "bankReconciliationDate",
    "bank_reconciliation_note": "bankReconciliationNote",
    "difference": "difference",
    "remarks": "remarks",
    # derived
    "unpaid": "unpaid",
    "payment_days": "paymentDays",
    "date_fallback": "dateFallback",
}
RECORD_FIELDS = {v: k for k, v in FIELD_MAP.items()}

DERIVED_COLUMNS = ["unpaid", "payment_days", "date_fallback"]

# the 19 storage columns
COLUMNS = [c for c in FIELD_MAP if c not in DERIVED_COLUMNS]

# grouping keys; a blank label is its own group
LABEL_COLUMNS = ["department", "company_name"]

AMOUNT_COLUMNS = [
    "invoice_amount",
    "tps",
    "tvq",
    "net_amount",
    "actual_paid_amount",
    "check_total_amount",
    "difference",
]

DATE_COLUMNS = [
    "invoice_date",
    "check_date",
    "check_mailed_date",
    "bank_reconciliation_date",
]

# The four fields a clear flag wipes
PAYMENT_COLUMNS = ["check_number", "actual_paid_amount", "check_total_amount", "check_date"]


def _to_day_column(series: pd.Series, fallback: pd.Timestamp) -> tuple[pd.Series, pd.Series]:
    if pd.api.types.is_datetime64_any_dtype(series):
        if series.dt.tz is not None:
            series = series.dt.tz_localize(None)
        return series.dt.normalize(), pd.Series(False, index=series.index)
    return TimeUtils.parse_days(series, fallback)


def coerce_types(frame: pd.DataFrame, today=None) -> pd.DataFrame:
    """
    Return a typed copy of ``frame``.

    • every column of ``COLUMNS`` exists (missing ones are all-absent)
    • absent department / company labels become ""
    • amounts are floats, blanks and junk become NaN
    • dates are midnight Timestamps, blanks become NaT
    • a present but unparseable date is replaced by ``today`` and the row
      is flagged in ``date_fallback``

    Already-typed frames pass through unchanged, so the call is idempotent.
    """
    df = frame.rename(columns={k: v for k, v in RECORD_FIELDS.items() if k != v}).copy()
    for col in COLUMNS:
        if col not in df.columns:
            df[col] = None
    for col in LABEL_COLUMNS:
        df[col] = df[col].where(df[col].notna(), "")

    for col in AMOUNT_COLUMNS + ["unpaid", "payment_days"]:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    fallback = TimeUtils.today(today)
    flagged = pd.Series(False, index=df.index)
    for col in DATE_COLUMNS:
        df[col], failed = _to_day_column(df[col], fallback)
        flagged |= failed

    if flagged.any():
        logger.warning(
            "%d row(s) carried unparseable dates; substituted %s",
            int(flagged.sum()), f"{fallback:%Y-%m-%d}",
        )

    if "date_fallback" in df.columns:
        flagged |= df["date_fallback"].fillna(False).astype(bool)
    df["date_fallback"] = flagged
    return df


def records_to_frame(rows: Iterable[Mapping], today=None) -> pd.DataFrame:
    """Build a typed frame from raw row mappings (either naming convention)."""
    df = pd.DataFrame(list(rows))
    return coerce_types(df, today=today)


def frame_to_records(frame: pd.DataFrame) -> list[dict]:
    """Typed frame -> camelCase dicts with ``YYYY-MM-DD`` dates and None for absent values."""
    if frame.empty:
        return []
    df = frame.copy()
    for col in df.columns:
        if pd.api.types.is_datetime64_any_dtype(df[col]):
            df[col] = df[col].dt.strftime("%Y-%m-%d")
    df = df.astype(object).where(df.notna(), None)
    df = df.rename(columns=FIELD_MAP)
    return df.to_dict("records")
