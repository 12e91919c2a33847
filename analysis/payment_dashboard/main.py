"""CLI entry-point for the payment dashboard.

This module provides a command-line interface that builds the dashboard from
the ledger store (or straight from a workbook) and exports it to Excel.
"""

import argparse
from pathlib import Path

from utils.config_utils import configure_logging
from payment.config import DEFAULT_CONFIG_FILE, load_config
from payment.data_loader import get_all_finance_data
from payment.spreadsheet_import import read_ledger_sheet
from analysis.payment_dashboard.dashboard import build_dashboard
from analysis.payment_dashboard.export import export_to_excel

def main():
    """Execute the payment dashboard build as a CLI application."""
    parser = argparse.ArgumentParser(description="Build the payment ledger dashboard")
    parser.add_argument("--excel", type=Path, default=None,
                       help="Read the ledger from this workbook instead of the store")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_FILE,
                       help="YAML file overriding the policy constants")
    parser.add_argument("--today", type=str, default=None,
                       help="Evaluation day (YYYY-MM-DD); defaults to today")
    parser.add_argument("--month", type=str, default=None, help="Month (YYYY-MM) for the weekly views")
    parser.add_argument("--department", type=str, default=None, help="Department for the single-department views")
    parser.add_argument("--output-dir", type=str, default="output",
                       help="Directory for output files")
    args = parser.parse_args()

    logger = configure_logging()
    cfg = load_config(args.config)

    if args.excel is not None:
        ledger_df = read_ledger_sheet(args.excel, cfg["sheet_name"])
    else:
        ledger_df = get_all_finance_data(page_size=cfg["page_size"])

    if ledger_df is None or ledger_df.empty:
        raise SystemExit("Ledger data frame is empty – aborting dashboard build.")

    tables = build_dashboard(ledger_df, today=args.today, cfg=cfg,
                             month=args.month, department=args.department)
    if tables["date_fallbacks"]:
        logger.warning("%d row(s) had unparseable dates replaced by %s",
                       tables["date_fallbacks"], tables["today"])

    outfile = export_to_excel(tables, args.output_dir)
    print(f"Exported payment dashboard workbook → {outfile.absolute()}")

if __name__ == "__main__":
    main()
