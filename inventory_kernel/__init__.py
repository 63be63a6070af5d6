"""
Inventory Kernel - stock ledger engine

A single-location stock ledger with:
- Non-negative on-hand quantities
- Append-only transaction history, one record per stock movement
- Atomic quantity update + history append
- Low-stock and valuation reporting
"""

__version__ = "0.1.0"
