"""Export functions for the payment dashboard.

This module provides functions to write dashboard views to Excel files.
"""

import os
from pathlib import Path
from typing import Dict, List

import pandas as pd


def buckets_to_frame(buckets: List[Dict], key: str, breakdown: str = "by_department") -> pd.DataFrame:
    """Flatten month/week buckets into one row per bucket, one column per label."""
    rows = [{key: b[key], "total_amount": b["total_amount"], **b[breakdown]} for b in buckets]
    return pd.DataFrame(rows, columns=None if rows else [key, "total_amount"]).fillna(0)


def nested_to_frame(nested: Dict[str, Dict[str, float]], outer: str, inner: str) -> pd.DataFrame:
    """{dept: {company: amount}} -> long frame."""
    rows = [
        {outer: o, inner: i, "amount": amount}
        for o, values in nested.items()
        for i, amount in values.items()
    ]
    return pd.DataFrame(rows, columns=[outer, inner, "amount"])


def export_to_excel(tables: Dict,
                    output_dir: str = "output",
                    file_stem: str = "payment_dashboard") -> Path:
    """Export dashboard views to an Excel workbook.

    Args:
        tables: Result of ``build_dashboard``
        output_dir: Directory to save the Excel file
        file_stem: File name without extension; the evaluation day is appended

    Returns:
        Path to the created Excel file
    """
    os.makedirs(output_dir, exist_ok=True)
    outfile = Path(output_dir) / f"{file_stem}_{tables['today']}.xlsx"

    forecast = tables["forecast"]
    unpaid = tables["unpaid"]

    with pd.ExcelWriter(outfile) as xl:
        buckets_to_frame(tables["monthly"], "month").to_excel(xl, sheet_name="Monthly Purchase", index=False)
        buckets_to_frame(tables["weekly"], "week_range").to_excel(xl, sheet_name="Weekly Purchase", index=False)
        buckets_to_frame(tables["payment_monthly"], "month").to_excel(xl, sheet_name="Monthly Payment", index=False)
        buckets_to_frame(tables["payment_weekly"], "week_range").to_excel(xl, sheet_name="Weekly Payment", index=False)
        nested_to_frame(unpaid["by_dept_company"], "department", "company_name").to_excel(
            xl, sheet_name="Unpaid", index=False)
        tables["cycle_metrics"].to_excel(xl, sheet_name="Payment Cycle", index=False)
        forecast["all_records"].to_excel(xl, sheet_name="Forecast", index=False)
        nested_to_frame(forecast["by_dept_company"], "department", "company_name").to_excel(
            xl, sheet_name="Due This Week", index=False)

    return outfile
