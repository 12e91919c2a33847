# payment/queries.py
"""
Look‑ups behind the unpaid, paid‑history and check‑search tables.

Every method reads the snapshot taken from the repository and returns a
new frame or dict.
"""

from __future__ import annotations

import re
from typing import Sequence

import pandas as pd

from .config import DEFAULT_CFG
from .repository import PaymentRepository

_DIGITS = re.compile(r"(\d+)")


def _natural_key(value) -> tuple:
    """'INV-9' sorts before 'INV-10'."""
    parts = _DIGITS.split("" if pd.isna(value) else str(value))
    return tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in parts if p)


class PaymentQueries:
    def __init__(self, repo: PaymentRepository, epsilon: float = DEFAULT_CFG["due_epsilon"]):
        # One *read‑only* snapshot for all helpers
        self.df = repo.processed()
        self.cleaned = repo.all()
        self.epsilon = epsilon

    # ── Unpaid bills ────────────────────────────────────────────────────
    def unpaid_summary(self) -> dict:
        """
        Open balances by department and by department × company.

        ``total_unpaid`` sums every row (overpayments included); the
        breakdowns skip settled rows and ``details`` lists the open ones.
        """
        df = self.df
        open_rows = df[df["unpaid"].abs() >= self.epsilon]

        by_department: dict = {}
        by_dept_company: dict = {}
        for (dept, company), amount in open_rows.groupby(["department", "company_name"], sort=False)["unpaid"].sum().items():
            by_department[dept] = by_department.get(dept, 0.0) + float(amount)
            by_dept_company.setdefault(dept, {})[company] = float(amount)

        return {
            "total_unpaid": float(df["unpaid"].sum()),
            "by_department": by_department,
            "by_dept_company": by_dept_company,
            "details": df[df["unpaid"].abs() > self.epsilon].reset_index(drop=True),
        }

    def unpaid_detail(self, company: str, department: str | None = None) -> pd.DataFrame:
        """
        Open invoices of ``company`` oldest first, with a running balance.
        """
        df = self.df[self.df["unpaid"].abs() > self.epsilon]
        df = df[df["company_name"] == company]
        if department is not None:
            df = df[df["department"] == department]

        df = df.assign(_invoice_key=df["invoice_number"].map(_natural_key))
        df = df.sort_values(["invoice_date", "_invoice_key"], kind="stable").drop(columns="_invoice_key")
        df["calculated_difference"] = df["invoice_amount"].fillna(0) - df["actual_paid_amount"].fillna(0)
        df["cumulative_unpaid"] = df["calculated_difference"].cumsum()
        return df.reset_index(drop=True)

    # ── Paid history ────────────────────────────────────────────────────
    @staticmethod
    def _with_reverse_cumulative(df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df["calculated_difference"] = df["invoice_amount"].fillna(0) - df["actual_paid_amount"].fillna(0)
        df["cumulative_difference"] = df["calculated_difference"].iloc[::-1].cumsum().iloc[::-1]
        return df.reset_index(drop=True)

    def paid_history(self, company: str | None = None) -> pd.DataFrame:
        """
        Settled invoices, newest invoice first.

        ``cumulative_difference`` accumulates from the oldest row upwards.
        """
        df = self.df[self.df["check_date"].notna() & self.df["invoice_date"].notna()]
        if company:
            df = df[df["company_name"].str.lower().str.contains(company.lower(), regex=False, na=False)]
        df = df.sort_values("invoice_date", ascending=False, kind="stable")
        return self._with_reverse_cumulative(df)

    def check_search(self, check_number: str) -> pd.DataFrame:
        """Invoices paid by exactly ``check_number``, newest check first."""
        if not check_number:
            return self._with_reverse_cumulative(self.df.iloc[0:0])
        df = self.df[self.df["check_number"].fillna("").astype(str) == str(check_number)]
        df = df.sort_values("check_date", ascending=False, kind="stable")
        return self._with_reverse_cumulative(df)

    # ── Selectors ───────────────────────────────────────────────────────
    def ordered_departments(
        self,
        priority_order: Sequence[str] | None = None,
        default: str | None = None,
    ) -> tuple[list[str], int]:
        """
        Departments with the preferred ones first, then the rest alphabetically.

        Returns the list and the index of ``default`` (0 when absent).
        """
        priority_order = DEFAULT_CFG["department_priority"] if priority_order is None else priority_order
        default = DEFAULT_CFG["default_department"] if default is None else default

        present = sorted(d for d in self.cleaned["department"].dropna().unique() if d)
        preferred = [d for d in priority_order if d in present]
        departments = preferred + [d for d in present if d not in preferred]
        default_index = departments.index(default) if default in departments else 0
        return departments, default_index

    def available_months(self) -> list[str]:
        """Sorted ``YYYY-MM`` months that have invoices."""
        return sorted(self.cleaned["invoice_date"].dt.strftime("%Y-%m").dropna().unique())

    def companies(self) -> list[str]:
        """Sorted vendor names among processed records."""
        return sorted(self.df["company_name"].dropna().unique())
