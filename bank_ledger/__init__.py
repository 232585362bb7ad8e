"""
Bank Ledger

An in-memory banking ledger: customers, savings and current accounts,
append-only transaction ledgers, all-or-nothing transfers and monthly
interest, with proper financial math using Decimal.
"""

__version__ = "1.0.0"
