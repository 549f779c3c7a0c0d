"""
Smart Banking Ledger

A single-process ledger for savings, current and loan accounts with
month-end interest processing, a human-readable account store and an
append-only statement log.
"""

__version__ = "1.0.0"
