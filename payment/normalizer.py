"""Record normalizer: clear-flag redaction and mandatory-field filtering."""

from __future__ import annotations

import numpy as np
import pandas as pd


def is_clear_flag_set(value) -> bool:
    """True for the sentinel ``"1"`` (or the number 1 a spreadsheet hands back)."""
    if isinstance(value, str):
        return value.strip() == "1"
    if isinstance(value, (bool, np.bool_)) or value is None:
        return False
    try:
        return not pd.isna(value) and float(value) == 1.0
    except (TypeError, ValueError):
        return False


def _has_invoice_date(dates: pd.Series) -> pd.Series:
    present = dates.notna()
    if dates.dtype == object:
        present &= dates.astype(str).str.strip() != ""
    return present


def normalize(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Redact cleared payments and drop rows that cannot be aggregated.

    Rows whose clear flag is set lose ``check_number``, ``actual_paid_amount``,
    ``check_total_amount`` and ``check_date``. Rows without an invoice amount
    or an invoice date are dropped. Order is preserved; ``frame`` is not
    modified.
    """
    df = frame.copy()
    if df.empty:
        return df

    cleared = df["clear_flag"].map(is_clear_flag_set).astype(bool)
    if cleared.any():
        df.loc[cleared, "check_number"] = None
        df.loc[cleared, ["actual_paid_amount", "check_total_amount"]] = np.nan
        df.loc[cleared, "check_date"] = pd.NaT

    keep = df["invoice_amount"].notna() & _has_invoice_date(df["invoice_date"])
    return df[keep]
