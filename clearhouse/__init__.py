"""
Clearhouse

A sealed-round auction clearinghouse:
- Content-addressed item catalog with reserve prices
- Single-slot bid ledger and per-bidder holds
- Atomic round clearing with payouts and refunds
- Winnings history that survives across rounds
"""

__version__ = "0.1.0"
