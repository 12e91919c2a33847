# payment/repository.py
"""
Repository layer – holds one cleaned and one processed copy of the ledger.

Rows may come from the store loader or straight from a workbook; both
naming conventions are accepted.
"""

from __future__ import annotations

from typing import Dict

import pandas as pd

from utils.time_utils import TimeUtils
from .inference import infer
from .normalizer import normalize
from .schema import RECORD_FIELDS, coerce_types


class PaymentRepository:
    """Immutable snapshot of one load of the ledger."""

    REQUIRED_COLUMNS = {
        "company_name",
        "department",
        "invoice_date",
        "invoice_amount",
    }

    def __init__(self, ledger_df: pd.DataFrame, *, today=None, cfg: Dict | None = None):
        if ledger_df is None:
            raise ValueError("ledger_df cannot be None")

        columns = {RECORD_FIELDS.get(c, c) for c in ledger_df.columns}
        missing = self.REQUIRED_COLUMNS - columns
        if missing:
            raise KeyError(
                f"Missing required column(s): {', '.join(sorted(missing))}"
            )

        # One clock for the whole snapshot
        self.today = TimeUtils.today(today)

        self._df = normalize(coerce_types(ledger_df, today=self.today))
        self._processed = infer(self._df, today=self.today, cfg=cfg)

    # ── Public “read” helpers ────────────────────────────────────────────
    def all(self) -> pd.DataFrame:
        """Return the normalized rows (never mutate this! use .copy())."""
        return self._df

    def processed(self) -> pd.DataFrame:
        """Return rows after exclusions, auto-pay inference, unpaid and latency."""
        return self._processed

    def paid(self) -> pd.DataFrame:
        """Processed rows with both a check date and a paid amount."""
        df = self._processed
        return df[df["check_date"].notna() & df["actual_paid_amount"].notna()].copy()

    @property
    def date_fallbacks(self) -> int:
        """Rows whose dates could not be parsed and were replaced by ``today``."""
        return int(self._df["date_fallback"].sum())
