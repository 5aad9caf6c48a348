"""
OracleBridge Constants - protocol parameters and defaults.

Every value here can be overridden per Bridge instance.

Receipt: oraclebridge_constants
Gate: t2h
"""

# ═══════════════════════════════════════════════════════════════════
# RECEIPTS
# ═══════════════════════════════════════════════════════════════════

TENANT_ID = "oraclebridge"
DEFAULT_LEDGER_PATH = "receipts.jsonl"

# ═══════════════════════════════════════════════════════════════════
# PRICING
# ═══════════════════════════════════════════════════════════════════

# Units of work a reporter spends resolving one query.
# Price floor = gas_price * ESTIMATED_REPORT_RESULT_GAS
ESTIMATED_REPORT_RESULT_GAS = 102_496

# ═══════════════════════════════════════════════════════════════════
# CLAIMS (claim-based variant)
# ═══════════════════════════════════════════════════════════════════

CLAIM_EXPIRATION_EPOCHS = 13  # Blocks before a claim can be taken over

# ═══════════════════════════════════════════════════════════════════
# PROOFS
# ═══════════════════════════════════════════════════════════════════

MAX_MERKLE_DEPTH = 32  # Longest sibling path accepted by the bridge
