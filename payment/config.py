"""Policy constants for the payment ledger pipeline.

Every business rule the pipeline applies is named here so it can be tuned
from ``config/payment_dashboard.yml`` or overridden per call with a ``cfg``
dict.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import yaml

# ────────────────────────────────────────────────────────────────────────────
# Configuration defaults
# ────────────────────────────────────────────────────────────────────────────
DEFAULT_CFG: Dict = {
    "excluded_companies": ("SLEEMAN", "Arc-en-ciel"),  # never part of any report
    "auto_pay_marker": "*",              # trailing marker on auto-pay vendor names
    "auto_pay_days": 10,                 # days after invoice an auto-pay is assumed settled
    "top_n_companies": 20,               # bubble cap on the distribution view
    "due_epsilon": 0.01,                 # unpaid amounts within this are settled
    "department_priority": (
        "杂货", "菜部", "冻部", "肉部", "鱼部", "厨房", "牛奶生鲜", "酒水", "面包",
    ),
    "default_department": "杂货",
    "page_size": 1_000,                  # rows per store page
    "upload_chunk_size": 100,            # rows per insert batch
    "sheet_name": "数据源",               # workbook sheet holding the ledger
}

DEFAULT_CONFIG_FILE = Path("config/payment_dashboard.yml")


def merge_cfg(cfg: Dict | None = None) -> Dict:
    """Overlay ``cfg`` on the defaults."""
    return {**DEFAULT_CFG, **(cfg or {})}


def load_config(path: Path = DEFAULT_CONFIG_FILE) -> Dict:
    """Load overrides from YAML; fall back to the defaults when the file is absent."""
    try:
        content = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except FileNotFoundError:
        return merge_cfg()

    for key in ("excluded_companies", "department_priority"):
        if key in content:
            content[key] = tuple(content[key])
    return merge_cfg(content)
