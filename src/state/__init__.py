"""
State management for the in-memory range-bound system
"""

from .balances import Account, AssetAddress, TokenLedger

__all__ = [
    "Account",
    "AssetAddress",
    "TokenLedger",
]
