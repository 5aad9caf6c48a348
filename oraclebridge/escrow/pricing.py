"""
Pricing Module

Purpose: Price floor for escrowed rewards

Receipt: none (pure)
Gate: t8h
"""

from oraclebridge.constants import ESTIMATED_REPORT_RESULT_GAS


def estimate_reward(gas_price: int, report_result_gas: int = ESTIMATED_REPORT_RESULT_GAS) -> int:
    """
    Minimum reward a query must carry at the given price per unit of work.

    Args:
        gas_price: Price per unit of work offered by the requester
        report_result_gas: Units of work one report is estimated to cost

    Returns:
        Price floor
    """
    return gas_price * report_result_gas


def revised_gas_price(recorded: int, offered: int) -> int:
    """Gas price only ever moves upward."""
    return offered if offered > recorded else recorded
