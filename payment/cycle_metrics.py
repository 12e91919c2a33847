"""Historical payment-latency statistics per (department, vendor)."""

from __future__ import annotations

import pandas as pd

METRIC_COLUMNS = [
    "department",
    "company_name",
    "invoice_count",
    "total_amount",
    "median_days",
    "min_days",
    "max_days",
    "avg_days",
]

_SORT_KEYS = {"median": "median_days", "amount": "total_amount"}


def median(values) -> float:
    """Two-branch median: middle value, or the mean of the two middle values."""
    ordered = sorted(values)
    if not ordered:
        return 0.0
    half = len(ordered) // 2
    if len(ordered) % 2:
        return float(ordered[half])
    return (ordered[half - 1] + ordered[half]) / 2.0


def cycle_metrics(frame: pd.DataFrame, sort_by: str | None = None) -> pd.DataFrame:
    """
    One row per (department, company_name) among rows with ``payment_days``.

    Parameters
    ----------
    frame
        Output of ``payment.inference.infer``.
    sort_by
        None keeps first-seen order; 'median' or 'amount' sort descending.
    """
    if sort_by is not None and sort_by not in _SORT_KEYS:
        raise ValueError("sort_by must be None, 'median', or 'amount'")

    paid = frame[frame["payment_days"].notna()]
    if paid.empty:
        return pd.DataFrame(columns=METRIC_COLUMNS)

    grouped = paid.groupby(["department", "company_name"], sort=False)
    out = grouped.agg(
        invoice_count=("payment_days", "size"),
        total_amount=("invoice_amount", "sum"),
        median_days=("payment_days", median),
        min_days=("payment_days", "min"),
        max_days=("payment_days", "max"),
        avg_days=("payment_days", "mean"),
    ).reset_index()

    if sort_by is not None:
        out = out.sort_values(_SORT_KEYS[sort_by], ascending=False, kind="stable")
    return out[METRIC_COLUMNS].reset_index(drop=True)


def metrics_for_department(metrics: pd.DataFrame, department: str) -> pd.DataFrame:
    """Metrics rows of a single department."""
    return metrics[metrics["department"] == department].reset_index(drop=True)
