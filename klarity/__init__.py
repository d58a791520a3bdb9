"""
Klarity - Source Package

A brutally honest personal finance ledger: transactions with emotional
tags, savings targets, a shame counter and the metrics that turn them
into a daily spending allowance.

DESIGN PRINCIPLES:
1. Everything lives on the device, in three keys of a key-value store
2. Fail visibly: a failed write is reported, never hidden
3. No silent corrections
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.1.0"
__author__ = "Klarity Team"
