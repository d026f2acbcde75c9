"""
Personal Banking Ledger

Savings and current accounts with deposit/withdraw bookkeeping, a
date-filtered passbook, and key-value persistence of the whole ledger.
All monetary values use Decimal.
"""

__version__ = "1.0.0"
