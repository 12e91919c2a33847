"""Payment inference: exclusions, auto-pay settlement, unpaid and latency."""

from __future__ import annotations

import logging
from typing import Dict

import numpy as np
import pandas as pd

from utils.time_utils import TimeUtils
from .config import merge_cfg

logger = logging.getLogger(__name__)


def auto_pay_mask(frame: pd.DataFrame, marker: str = "*") -> pd.Series:
    """Rows of auto-pay vendors (trailing marker) that have no check date yet."""
    names = frame["company_name"].fillna("").astype(str).str.strip()
    return names.str.endswith(marker) & frame["check_date"].isna()


def infer(frame: pd.DataFrame, *, today=None, cfg: Dict | None = None) -> pd.DataFrame:
    """
    Enrich normalized records with payment status.

    1. drop excluded vendors
    2. drop void rows (zero invoice, zero or absent payment)
    3. auto-pay vendors whose due date (invoice + ``auto_pay_days``) is
       strictly before ``today`` are settled on the due date for the full
       invoice amount
    4. ``unpaid = invoice_amount - actual_paid_amount`` (absent paid -> 0)
    5. ``payment_days`` = whole days from invoice to check, where both exist
    """
    cfg = merge_cfg(cfg)
    today = TimeUtils.today(today)

    df = frame.copy()
    excluded = df["company_name"].isin(cfg["excluded_companies"])
    void = (df["invoice_amount"] == 0) & (df["actual_paid_amount"].fillna(0) == 0)
    df = df[~excluded & ~void].copy()
    logger.debug("Excluded %d vendor row(s) and %d void row(s)", int(excluded.sum()), int((void & ~excluded).sum()))

    df["check_date"] = pd.to_datetime(df["check_date"])
    due_date = df["invoice_date"] + pd.Timedelta(days=cfg["auto_pay_days"])
    settled = auto_pay_mask(df, cfg["auto_pay_marker"]) & (due_date < today)
    if settled.any():
        df.loc[settled, "check_date"] = due_date[settled]
        df.loc[settled, "actual_paid_amount"] = df.loc[settled, "invoice_amount"]
        df.loc[settled, "check_total_amount"] = df.loc[settled, "invoice_amount"]
        logger.info("Assumed %d auto-pay invoice(s) settled", int(settled.sum()))

    df["unpaid"] = df["invoice_amount"] - df["actual_paid_amount"].fillna(0)

    both = df["check_date"].notna() & df["invoice_date"].notna()
    df["payment_days"] = np.nan
    df.loc[both, "payment_days"] = (df.loc[both, "check_date"] - df.loc[both, "invoice_date"]).dt.days
    return df
