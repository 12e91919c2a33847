import os
import sys
import logging

# Add project root to path first
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils.config_utils import (
    configure_logging,
    read_sql_file,
    get_database_engine,
    set_pandas_display_options
)
from data_access.finance_database import load_paginated_table
from payment.config import DEFAULT_CFG

logger = logging.getLogger(__name__)

# One page of the raw ledger (bind :limit / :offset)
finance_page_query = read_sql_file('finance/finance_data_page.sql')

def get_all_finance_data(engine=None, page_size=DEFAULT_CFG['page_size']):
    """Returns a DataFrame containing every ledger row, fetched page by page."""
    engine = engine or get_database_engine()
    if not engine:
        logger.error("Could not get database engine.")
        return None

    try:
        df = load_paginated_table(finance_page_query, engine, page_size=page_size)
        logger.info("Loaded %d ledger records", len(df))
        return df
    except Exception as e:
        logger.error("Error during query execution or processing: %s", e)
        return None

if __name__ == "__main__":
    configure_logging()
    set_pandas_display_options()

    print("\n=== FINANCE DATA ===")
    finance_df = get_all_finance_data()
    if finance_df is not None:
        print("Ledger Data Preview:")
        print(finance_df.head(10))
        print("\nColumn Names:", finance_df.columns.tolist())
        print("\nTotal records:", len(finance_df))
