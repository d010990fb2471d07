# stockrecon/__init__.py

"""
Two-source stock reconciliation engine.

Takes two independently extracted record sets keyed by a business key,
deduplicates each side, matches them without row multiplication, computes
null-safe differences and classifies every key.
"""

from stockrecon.core import aggregate, deduplicate, reconcile, ReconciliationResult
from stockrecon.models import FieldPair, KeySpec, MatchStatus

__all__ = [
    "aggregate",
    "deduplicate",
    "reconcile",
    "ReconciliationResult",
    "FieldPair",
    "KeySpec",
    "MatchStatus",
]
