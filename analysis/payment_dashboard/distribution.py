"""Per-company, per-day amount distribution for the bubble views."""

from __future__ import annotations

from typing import Dict, Iterable, Sequence

import pandas as pd

from payment.config import merge_cfg
from analysis.payment_dashboard.aggregator import basis_frame

POINT_COLUMNS = ["company_name", "day", "amount", "invoice_count", "total_company_amount"]


def _window(frame: pd.DataFrame,
            date_col: str,
            department: str,
            companies: Iterable[str] | None,
            date_range: Sequence) -> pd.DataFrame:
    days = frame[date_col].dt.normalize()
    # an open bound means the edge of the data
    start, end = date_range
    start = days.min() if start is None else pd.to_datetime(start).normalize()
    end = days.max() if end is None else pd.to_datetime(end).normalize()
    mask = (days >= start) & (days <= end) & (frame["department"] == department)
    companies = set(companies or ())
    if companies:
        mask &= frame["company_name"].isin(companies)
    return frame[mask]


def company_distribution(frame: pd.DataFrame,
                         department: str,
                         companies: Iterable[str] | None = None,
                         date_range: Sequence = (None, None),
                         basis: str = "invoice",
                         *,
                         cfg: Dict | None = None) -> Dict:
    """Amount per (company, day) inside ``date_range``, capped to the top companies.

    Args:
        frame: Normalized (invoice basis) or processed (payment basis) records
        department: Department to show
        companies: Company names to keep; empty or None keeps all
        date_range: Inclusive (start, end), strings or timestamps; None for an open bound
        basis: 'invoice' or 'payment'
        cfg: Overrides for ``top_n_companies``

    Returns:
        {"points": [...], "ordered_companies": [...]} where companies are
        ordered by window total, smallest first
    """
    cfg = merge_cfg(cfg)
    df, date_col, amount_col = basis_frame(frame, basis)
    df = _window(df, date_col, department, companies, date_range)
    if df.empty:
        return {"points": [], "ordered_companies": []}

    df = df.assign(day=df[date_col].dt.strftime("%Y-%m-%d"), amount=df[amount_col].fillna(0))
    points = (df.groupby(["company_name", "day"], sort=False)
                .agg(amount=("amount", "sum"), invoice_count=("amount", "size"))
                .reset_index())
    company_totals = df.groupby("company_name", sort=False)["amount"].sum()

    top_n = cfg["top_n_companies"]
    if len(company_totals) > top_n:
        company_totals = company_totals.sort_values(ascending=False, kind="stable").head(top_n)

    points = points[points["company_name"].isin(company_totals.index) & (points["amount"] > 0)]
    points = points.assign(total_company_amount=points["company_name"].map(company_totals))
    ordered = company_totals.sort_values(ascending=True, kind="stable")

    return {
        "points": [
            {**p, "amount": float(p["amount"]), "invoice_count": int(p["invoice_count"]),
             "total_company_amount": float(p["total_company_amount"])}
            for p in points[POINT_COLUMNS].to_dict("records")
        ],
        "ordered_companies": ordered.index.tolist(),
    }


def distribution_drilldown(frame: pd.DataFrame,
                           department: str,
                           company: str,
                           day,
                           basis: str = "invoice") -> pd.DataFrame:
    """Records behind one bubble: ``company`` in ``department`` on ``day``."""
    df, date_col, _ = basis_frame(frame, basis)
    day = pd.to_datetime(day).normalize()
    mask = ((df["company_name"] == company)
            & (df["department"] == department)
            & (df[date_col].dt.normalize() == day))
    return df[mask].reset_index(drop=True)
