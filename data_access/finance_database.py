import os
import logging

import pandas as pd
from sqlalchemy import Column, Float, Integer, MetaData, String, Table, Text, create_engine, text

logger = logging.getLogger(__name__)

# Database connection details
DB_URL_ENV = 'FINANCE_DB_URL'
DEFAULT_DB_URL = 'postgresql+psycopg2://localhost:5432/postgres'
FINANCE_TABLE = 'finance_data'

metadata = MetaData()

# Dates are kept as the YYYY-MM-DD text the importer writes; unparseable
# cells survive as raw text and are dealt with when the rows are loaded.
finance_data = Table(
    FINANCE_TABLE,
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('company_name', String(200)),
    Column('department', String(50)),
    Column('invoice_number', String(100)),
    Column('invoice_date', String(32)),
    Column('invoice_amount', Float),
    Column('tps', Float),
    Column('tvq', Float),
    Column('net_amount', Float),
    Column('check_number', String(100)),
    Column('clear_flag', String(10)),
    Column('actual_paid_amount', Float),
    Column('check_total_amount', Float),
    Column('check_date', String(32)),
    Column('check_mailed_date', String(32)),
    Column('bank_reconciliation_date', String(32)),
    Column('bank_reconciliation_note', Text),
    Column('difference', Float),
    Column('remarks', Text),
)

def create_tables(engine):
    """Create the ledger table if it does not exist yet."""
    metadata.create_all(engine)

def get_connection_string():
    """Connection string for the ledger store, overridable through FINANCE_DB_URL."""
    return os.environ.get(DB_URL_ENV, DEFAULT_DB_URL)

def get_engine(url=None):
    return create_engine(url or get_connection_string())

def load_and_process_table(query, engine, params=None, rename_cols=None, additional_processing=None, **kwargs):
    """
    Runs a SQL query and returns a pandas DataFrame with optional processing.

    Args:
        query (str): SQL query to execute, may use :name bind parameters
        engine: SQLAlchemy engine
        params (dict, optional): Bind parameters for the query
        rename_cols (dict, optional): Dictionary to rename columns {old_name: new_name}
        additional_processing (function, optional): Function to apply additional processing
        **kwargs: Additional arguments for the processing function

    Returns:
        DataFrame: Processed pandas DataFrame
    """
    with engine.connect() as conn:
        df = pd.read_sql_query(text(query), con=conn, params=params)
    if rename_cols:
        df = df.rename(columns=rename_cols)
    if additional_processing:
        df = additional_processing(df, **kwargs)
    return df

def load_paginated_table(query, engine, page_size=1000):
    """
    Runs a LIMIT/OFFSET query page by page until a short page comes back.

    Args:
        query (str): SQL query with :limit and :offset bind parameters
        engine: SQLAlchemy engine
        page_size (int): Rows requested per page

    Returns:
        DataFrame: All pages concatenated in fetch order
    """
    pages = []
    offset = 0
    while True:
        chunk = load_and_process_table(query, engine, params={'limit': page_size, 'offset': offset})
        if chunk.empty:
            break
        pages.append(chunk)
        offset += page_size
        logger.debug("Fetched %d rows (offset %d)", len(chunk), offset)
        # Fewer rows than requested means we've reached the end
        if len(chunk) < page_size:
            break

    if not pages:
        return pd.DataFrame()
    return pd.concat(pages, ignore_index=True)
