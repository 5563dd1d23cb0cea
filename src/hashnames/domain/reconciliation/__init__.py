"""Recover the names an account owns from its NFT holdings and the registration log.

There is no index from account to name. Holdings (token + serial) are matched
against registration events published once per minted serial.
"""

from __future__ import annotations

from .engine import ReconciliationEngine, ReconciliationResult

__all__ = ["ReconciliationEngine", "ReconciliationResult"]
