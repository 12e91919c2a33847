"""Payment Dashboard Package.

This package provides the calendar roll-ups, company distributions and the
orchestration that turns raw ledger rows into the payment dashboard views.
"""

from analysis.payment_dashboard.dashboard import build_dashboard
