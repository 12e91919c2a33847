import os
import logging
import pandas as pd
from data_access.finance_database import get_engine

# Define project root as a constant
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

def configure_logging(level=logging.INFO):
    """Configure logging with a given level and return a logger."""
    logging.basicConfig(level=level)
    return logging.getLogger(__name__)

def read_sql_file(file_name):
    """Read a SQL query from the project's 'sql' directory, e.g. 'finance/finance_data_page.sql'."""
    if file_name.startswith('sql/'):
        file_name = file_name[4:]

    sql_file_path = os.path.join(PROJECT_ROOT, 'sql', file_name)
    with open(sql_file_path, 'r', encoding='utf-8') as file:
        return file.read()

def get_database_engine():
    """Engine for the ledger store (FINANCE_DB_URL, or the local default)."""
    return get_engine()

def set_pandas_display_options():
    """Set pandas display options for wide ledger previews."""
    pd.set_option('display.max_columns', None)
    pd.set_option('display.width', 200)
