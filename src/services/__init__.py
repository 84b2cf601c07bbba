from src.services.ledger import adjust_stock, operation_key, stock_ledger_balance
from src.services.loader import CHECK_POLICIES, HANDLERS, Policy, load_batch, parse_record
from src.services.orchestrator import (
    LOAD_ORDER,
    check_connection,
    reset_database,
    run_seed,
)
from src.services.reference import validate_reference_fields
from src.services.verification import count_rows

__all__ = [
    # ledger
    "adjust_stock",
    "operation_key",
    "stock_ledger_balance",
    # loader
    "CHECK_POLICIES",
    "HANDLERS",
    "Policy",
    "load_batch",
    "parse_record",
    # orchestrator
    "LOAD_ORDER",
    "check_connection",
    "reset_database",
    "run_seed",
    # reference
    "validate_reference_fields",
    # verification
    "count_rows",
]
