"""
Loan Accounts

Loan account management with a fixed-payment amortization calculator.
All financial math uses Decimal with explicit half-up rounding.
"""

__version__ = "1.0.0"
