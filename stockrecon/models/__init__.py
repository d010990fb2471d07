# stockrecon/models/__init__.py

from stockrecon.models.record import (
    FieldValue,
    Number,
    Record,
    Key,
    Side,
    KeySpec,
    FieldPair,
)
from stockrecon.models.reconciled import (
    MatchStatus,
    ReconciledRecord,
    FieldTotals,
    AggregationResult,
    ReconciliationSummary,
)
from stockrecon.models.diagnostics import (
    Diagnostic,
    DiagnosticKind,
    DuplicateKeyWarning,
    TypeMismatchWarning,
    IndeterminateStatusWarning,
    UnmatchedFieldWarning,
)

__all__ = [
    # Record
    "FieldValue",
    "Number",
    "Record",
    "Key",
    "Side",
    "KeySpec",
    "FieldPair",
    # Reconciled
    "MatchStatus",
    "ReconciledRecord",
    "FieldTotals",
    "AggregationResult",
    "ReconciliationSummary",
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
    "DuplicateKeyWarning",
    "TypeMismatchWarning",
    "IndeterminateStatusWarning",
    "UnmatchedFieldWarning",
]
