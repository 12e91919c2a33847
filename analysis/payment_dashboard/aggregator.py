"""Calendar bucketing of ledger amounts.

This module provides the monthly and weekly roll-ups behind the purchase
(invoice-basis) and payment (payment-basis) views.
"""

from __future__ import annotations

from typing import Dict, List

import pandas as pd

from payment.schema import frame_to_records
from utils.time_utils import TimeUtils

# basis -> (bucketing date column, amount column)
BASES = {
    "invoice": ("invoice_date", "invoice_amount"),
    "payment": ("check_date", "actual_paid_amount"),
}


def basis_frame(frame: pd.DataFrame, basis: str = "invoice") -> tuple[pd.DataFrame, str, str]:
    """Rows eligible for ``basis`` plus its date and amount column names.

    The payment basis only keeps rows with a check date and a paid amount.
    """
    if basis not in BASES:
        raise ValueError("basis must be 'invoice' or 'payment'")
    date_col, amount_col = BASES[basis]
    if basis == "payment":
        frame = frame[frame["check_date"].notna() & frame["actual_paid_amount"].notna()]
    return frame, date_col, amount_col


def _subtotals(frame: pd.DataFrame, key: str, by: str, amount_col: str) -> Dict[str, Dict[str, float]]:
    """{bucket: {label: amount}} with zero subtotals left out."""
    sums = frame.groupby([key, by], sort=False)[amount_col].sum()
    out: Dict[str, Dict[str, float]] = {}
    for (bucket, label), amount in sums.items():
        if amount != 0:
            out.setdefault(bucket, {})[label] = float(amount)
    return out


def monthly_summary(frame: pd.DataFrame, basis: str = "invoice") -> List[Dict]:
    """Totals per ``YYYY-MM`` with a department breakdown, ascending by month.

    Args:
        frame: Normalized (invoice basis) or processed (payment basis) records
        basis: 'invoice' or 'payment'

    Returns:
        List of dicts with month, total_amount, total_monthly_amount,
        by_department and, on the invoice basis, the contributing records
    """
    df, date_col, amount_col = basis_frame(frame, basis)
    if df.empty:
        return []

    df = df.assign(_month=TimeUtils.month_key(df[date_col]), _amount=df[amount_col].fillna(0))
    totals = df.groupby("_month")["_amount"].sum()
    by_department = _subtotals(df, "_month", "department", "_amount")

    summary = []
    for month, total in totals.sort_index().items():
        entry = {
            "month": month,
            "total_amount": float(total),
            "total_monthly_amount": float(total),
            "by_department": by_department.get(month, {}),
        }
        if basis == "invoice":
            entry["records"] = frame_to_records(df[df["_month"] == month].drop(columns=["_month", "_amount"]))
        summary.append(entry)
    return summary


def weekly_summary(frame: pd.DataFrame, basis: str = "invoice", month: str | None = None) -> List[Dict]:
    """Totals per Monday-start week with department and company breakdowns.

    Args:
        frame: Normalized (invoice basis) or processed (payment basis) records
        basis: 'invoice' or 'payment'
        month: Optional ``YYYY-MM``; only rows bucketed in that month are kept

    Returns:
        List of dicts with week_range, week_start, week_end, total_amount,
        total_weekly_amount, by_department and by_company, ascending by week
    """
    df, date_col, amount_col = basis_frame(frame, basis)
    if month:
        df = df[TimeUtils.month_key(df[date_col]) == month]
    if df.empty:
        return []

    start = TimeUtils.week_start_series(df[date_col])
    end = start + pd.Timedelta(days=6)
    df = df.assign(
        _week=[TimeUtils.week_label(s, e) for s, e in zip(start, end)],
        _week_start=start.dt.strftime("%Y-%m-%d"),
        _week_end=end.dt.strftime("%Y-%m-%d"),
        _amount=df[amount_col].fillna(0),
    )

    totals = (df.groupby(["_week", "_week_start", "_week_end"])["_amount"].sum()
              .reset_index()
              .rename(columns={"_week": "week_range", "_week_start": "week_start",
                               "_week_end": "week_end", "_amount": "total_amount"}))
    by_department = _subtotals(df, "_week", "department", "_amount")
    by_company = _subtotals(df, "_week", "company_name", "_amount")

    summary = []
    for row in totals.sort_values("week_start").itertuples(index=False):
        summary.append({
            "week_range": row.week_range,
            "week_start": row.week_start,
            "week_end": row.week_end,
            "total_amount": float(row.total_amount),
            "total_weekly_amount": float(row.total_amount),
            "by_department": by_department.get(row.week_range, {}),
            "by_company": by_company.get(row.week_range, {}),
        })
    return summary


def company_week_matrix(
    frame: pd.DataFrame,
    department: str,
    basis: str = "invoice",
    month: str | None = None,
) -> List[Dict]:
    """Weekly buckets of a single department, for the company-by-week view."""
    return weekly_summary(frame[frame["department"] == department], basis=basis, month=month)
