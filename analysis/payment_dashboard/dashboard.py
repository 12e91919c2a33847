"""Main build function for the payment dashboard.

This module provides the function that runs the whole ledger pipeline under
a single clock value and gathers every view the dashboard renders.
"""

from typing import Dict

import pandas as pd

from payment.config import merge_cfg
from payment.cycle_metrics import cycle_metrics, metrics_for_department
from payment.forecast import forecast
from payment.queries import PaymentQueries
from payment.repository import PaymentRepository
from analysis.payment_dashboard.aggregator import monthly_summary, weekly_summary, company_week_matrix
from analysis.payment_dashboard.distribution import company_distribution


def build_dashboard(ledger_df: pd.DataFrame,
                    *,
                    today=None,
                    cfg: Dict | None = None,
                    month: str | None = None,
                    department: str | None = None,
                    date_range=(None, None)) -> Dict:
    """Build every dashboard view from raw ledger rows.

    Args:
        ledger_df: Raw rows as loaded from the store or the workbook
        today: Evaluation day shared by inference and forecast; defaults to today
        cfg: Optional configuration dictionary to override defaults
        month: ``YYYY-MM`` for the weekly views; defaults to the current month
               when present in the data, else the latest month
        department: Department for the single-department views; defaults to
                    the configured default department
        date_range: Inclusive window of the distribution views

    Returns:
        Dictionary of summaries, metric frames and the forecast
    """
    cfg = merge_cfg(cfg)
    repo = PaymentRepository(ledger_df, today=today, cfg=cfg)
    queries = PaymentQueries(repo, epsilon=cfg["due_epsilon"])
    cleaned, processed = repo.all(), repo.processed()

    months = queries.available_months()
    if month is None and months:
        current = f"{repo.today:%Y-%m}"
        month = current if current in months else months[-1]

    departments, default_index = queries.ordered_departments(
        cfg["department_priority"], cfg["default_department"]
    )
    if department is None and departments:
        department = departments[default_index]

    metrics = cycle_metrics(processed)

    return {
        "today": f"{repo.today:%Y-%m-%d}",
        "date_fallbacks": repo.date_fallbacks,
        "month": month,
        "department": department,
        "departments": departments,
        "months": months,
        # purchase views (invoice basis)
        "monthly": monthly_summary(cleaned, basis="invoice"),
        "weekly": weekly_summary(cleaned, basis="invoice", month=month),
        "company_weekly": company_week_matrix(cleaned, department, basis="invoice", month=month),
        "distribution": company_distribution(cleaned, department, date_range=date_range,
                                             basis="invoice", cfg=cfg),
        # payment views (payment basis)
        "payment_monthly": monthly_summary(processed, basis="payment"),
        "payment_weekly": weekly_summary(processed, basis="payment", month=month),
        "payment_company_weekly": company_week_matrix(processed, department, basis="payment", month=month),
        "payment_distribution": company_distribution(processed, department, date_range=date_range,
                                                     basis="payment", cfg=cfg),
        # unpaid / cycle / forecast
        "unpaid": queries.unpaid_summary(),
        "cycle_metrics": metrics,
        "department_cycle_metrics": metrics_for_department(metrics, department),
        "forecast": forecast(processed, metrics, today=repo.today, cfg=cfg),
    }
