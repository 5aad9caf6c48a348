"""
OracleBridge Escrow Modules - Reward custody.

Purpose:
    - ledger: EscrowLedger (deposit, release exactly once)
    - pricing: price floor estimation

Receipt: escrow_receipt
Gate: t24h
"""

from oraclebridge.escrow.ledger import EscrowLedger, Tranche
from oraclebridge.escrow.pricing import estimate_reward, revised_gas_price

__all__ = [
    # ledger
    "EscrowLedger", "Tranche",
    # pricing
    "estimate_reward", "revised_gas_price",
]
