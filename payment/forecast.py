"""Forecast of near-term payments from historical payment latency."""

from __future__ import annotations

import logging
from typing import Dict

import numpy as np
import pandas as pd

from utils.time_utils import TimeUtils
from .config import merge_cfg

logger = logging.getLogger(__name__)


def _nested_sum(frame: pd.DataFrame, value_col: str) -> tuple[dict, dict]:
    """{dept: amount} and {dept: {company: amount}} for ``value_col``."""
    by_dept: Dict[str, float] = {}
    by_dept_company: Dict[str, Dict[str, float]] = {}
    for (dept, company), amount in frame.groupby(["department", "company_name"], sort=False)[value_col].sum().items():
        by_dept[dept] = by_dept.get(dept, 0.0) + float(amount)
        by_dept_company.setdefault(dept, {})[company] = float(amount)
    return by_dept, by_dept_company


def forecast(frame: pd.DataFrame, metrics: pd.DataFrame, *, today=None, cfg: Dict | None = None) -> Dict:
    """
    Predict payment dates for open balances and total what falls due this week.

    Every row with ``abs(unpaid) > due_epsilon`` is carried into
    ``all_records``. Rows whose (department, company) has a historical median
    latency get ``predicted_date = invoice_date + median days`` and are due
    when that date is on or before the Sunday closing the current
    Monday-start week. Rows without history keep ``median_days = 0``, an
    empty ``predicted_date`` and are never due.
    """
    cfg = merge_cfg(cfg)
    today = TimeUtils.today(today)
    end_of_week = TimeUtils.end_of_week(today)

    records = frame[frame["unpaid"].abs() > cfg["due_epsilon"]].copy()

    lookup = {
        (row.department, row.company_name): row.median_days
        for row in metrics.itertuples(index=False)
    }
    keys = list(zip(records["department"], records["company_name"]))
    median_days = pd.Series([lookup.get(k, np.nan) for k in keys], index=records.index, dtype=float)
    has_history = median_days.notna()

    predicted = records["invoice_date"] + pd.to_timedelta(np.trunc(median_days), unit="D")
    is_due = has_history & (predicted <= end_of_week)

    records["median_days"] = median_days.fillna(0)
    records["predicted_date"] = predicted.dt.strftime("%Y-%m-%d").where(has_history, "")
    records["is_due_this_week"] = is_due.astype(bool)
    records["unpaid_amount"] = records["unpaid"]
    logger.debug(
        "Forecast: %d open record(s), %d without history, %d due by %s",
        len(records), int((~has_history).sum()), int(is_due.sum()), f"{end_of_week:%Y-%m-%d}",
    )

    due = records[records["is_due_this_week"]]
    by_dept, by_dept_company = _nested_sum(due, "unpaid_amount")

    return {
        "total_due_this_week": float(due["unpaid_amount"].sum()),
        "by_dept": by_dept,
        "by_dept_company": by_dept_company,
        "all_records": records.reset_index(drop=True),
    }


def due_this_week(result: Dict) -> pd.DataFrame:
    """Records predicted due this week, largest balance first."""
    records = result["all_records"]
    return (records[records["is_due_this_week"]]
            .sort_values("unpaid_amount", ascending=False, kind="stable")
            .reset_index(drop=True))


def all_unpaid(result: Dict, epsilon: float = 0.01) -> pd.DataFrame:
    """Positive open balances ordered by company, then invoice date."""
    records = result["all_records"]
    return (records[records["unpaid_amount"] > epsilon]
            .sort_values(["company_name", "invoice_date"], kind="stable")
            .reset_index(drop=True))
