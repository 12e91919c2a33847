#!/usr/bin/env python3
"""
spreadsheet_import.py
────────────────────────────────────────────────────────────────────────────
Loads the ledger workbook into the finance_data table:

• Sheet located by exact title (``数据源`` by default)
• Localized headers mapped onto the storage columns
• Date cells written as YYYY-MM-DD text (raw text kept if unparseable)
• Blank numerics written as 0
• Inserts in small batches, one transaction per batch
"""
from __future__ import annotations

import argparse
import datetime as dt
import logging
import os
import sys
from pathlib import Path
from typing import Dict

import pandas as pd
from sqlalchemy import func, select
from sqlalchemy.engine import Engine

# Add project root to path first
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data_access.finance_database import FINANCE_TABLE, create_tables, finance_data, get_engine
from payment.config import DEFAULT_CFG

logger = logging.getLogger(__name__)

# ───────────────────── workbook header -> storage column ─────────────────
SHEET_COLUMNS: Dict[str, str] = {
    "公司名称": "company_name",
    "部门": "department",
    "发票号": "invoice_number",
    "发票日期": "invoice_date",
    "发票金额": "invoice_amount",
    "TPS": "tps",
    "TVQ": "tvq",
    "税后净值": "net_amount",
    "付款支票号": "check_number",
    "特殊标记清除": "clear_flag",
    "实际支付金额": "actual_paid_amount",
    "付款支票总额": "check_total_amount",
    "开支票日期": "check_date",
    "支票寄出日期": "check_mailed_date",
    "银行对账日期": "bank_reconciliation_date",
    "银行对账日期备注": "bank_reconciliation_note",
    "差额": "difference",
    "备注": "remarks",
}

DATE_FIELDS = ["invoice_date", "check_date", "check_mailed_date", "bank_reconciliation_date"]
NUMERIC_FIELDS = [
    "invoice_amount", "tps", "tvq", "net_amount",
    "actual_paid_amount", "check_total_amount", "difference",
]
TEXT_FIELDS = [
    "company_name", "department", "invoice_number", "check_number",
    "clear_flag", "bank_reconciliation_note", "remarks",
]


# ────────────────────────────────────────────────────────────────────────
def excel_date(value) -> str | None:
    """Date cell -> 'YYYY-MM-DD'; unparseable text is returned as-is."""
    if value is None or (not isinstance(value, str) and pd.isna(value)) or value == "":
        return None
    if isinstance(value, (pd.Timestamp, dt.datetime, dt.date)):
        return pd.Timestamp(value).strftime("%Y-%m-%d")
    parsed = pd.to_datetime(str(value).strip(), errors="coerce")
    if pd.isna(parsed):
        return str(value)
    return parsed.strftime("%Y-%m-%d")


def excel_text(value) -> str | None:
    """Text cell; numbers typed into text columns lose the float suffix (1.0 -> '1')."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def map_sheet(sheet: pd.DataFrame) -> pd.DataFrame:
    """Rename localized headers and clean every cell for insertion."""
    out = pd.DataFrame(index=sheet.index)
    for header, column in SHEET_COLUMNS.items():
        raw = sheet[header] if header in sheet.columns else pd.Series(None, index=sheet.index, dtype=object)
        if column in DATE_FIELDS:
            out[column] = raw.map(excel_date)
        elif column in NUMERIC_FIELDS:
            out[column] = pd.to_numeric(raw, errors="coerce").fillna(0.0)
        else:
            out[column] = raw.map(excel_text)
    return out.reset_index(drop=True)


def read_ledger_sheet(path: Path, sheet_name: str = DEFAULT_CFG["sheet_name"]) -> pd.DataFrame:
    """Read and map the ledger sheet; raises ValueError if it is missing or empty."""
    with pd.ExcelFile(path) as workbook:
        if sheet_name not in workbook.sheet_names:
            raise ValueError(f'Sheet "{sheet_name}" not found in the Excel file.')
        sheet = workbook.parse(sheet_name)

    if sheet.empty:
        raise ValueError("Sheet is empty.")
    logger.info("Parsing %d records from %s", len(sheet), path)
    return map_sheet(sheet)


def write_chunks(rows: pd.DataFrame, engine: Engine, chunk_size: int = DEFAULT_CFG["upload_chunk_size"]) -> int:
    """Append ``rows`` to the ledger table in batches; returns rows written."""
    create_tables(engine)
    total_rows = 0
    for start in range(0, len(rows), chunk_size):
        chunk = rows.iloc[start:start + chunk_size]
        with engine.begin() as conn:
            chunk.to_sql(name=FINANCE_TABLE, con=conn, if_exists="append", index=False)
        total_rows += len(chunk)
        logger.info("Uploaded %d / %d records", total_rows, len(rows))
    return total_rows


def import_workbook(
    path: Path,
    engine: Engine,
    *,
    sheet_name: str = DEFAULT_CFG["sheet_name"],
    chunk_size: int = DEFAULT_CFG["upload_chunk_size"],
) -> int:
    """Read the workbook and append its rows to the store."""
    rows = read_ledger_sheet(path, sheet_name)
    return write_chunks(rows, engine, chunk_size)


def delete_all(engine: Engine) -> int:
    """Remove every ledger row; returns the number deleted."""
    create_tables(engine)
    with engine.begin() as conn:
        result = conn.execute(finance_data.delete())
    logger.info("Deleted %d ledger rows", result.rowcount)
    return result.rowcount


def count_rows(engine: Engine) -> int:
    create_tables(engine)
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(finance_data)).scalar_one()


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-8s %(message)s",
    )
    parser = argparse.ArgumentParser(description="Import the ledger workbook into the finance store")
    parser.add_argument("workbook", type=Path, help="Path to the .xlsx file")
    parser.add_argument("--sheet", type=str, default=DEFAULT_CFG["sheet_name"], help="Sheet title holding the ledger")
    parser.add_argument("--replace", action="store_true", help="Delete existing rows before importing")
    args = parser.parse_args()

    if not args.workbook.exists():
        logging.error("Workbook not found: %s", args.workbook)
        sys.exit(1)

    engine = get_engine()
    if args.replace:
        delete_all(engine)

    rows = import_workbook(args.workbook, engine, sheet_name=args.sheet)
    logging.info("✓ Import complete (%s rows, %s in store).", f"{rows:,}", f"{count_rows(engine):,}")


if __name__ == "__main__":
    main()
