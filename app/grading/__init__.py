from .truth_tables import (
    TRUTH_TABLES,
    UNLOCK_REQUIREMENTS,
    TruthTable,
    UnlockRequirement,
    build_truth_table,
    get_truth_table,
    get_unlock_requirement,
)
from .verifier import UnlockChecker, VerificationResult, verify_truth_table

__all__ = [
    "TRUTH_TABLES",
    "UNLOCK_REQUIREMENTS",
    "TruthTable",
    "UnlockRequirement",
    "build_truth_table",
    "get_truth_table",
    "get_unlock_requirement",
    "UnlockChecker",
    "VerificationResult",
    "verify_truth_table",
]
