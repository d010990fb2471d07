# stockrecon/routers/reconcile.py

"""
Reconciliation routes.

Thin HTTP wrapper around the engine: callers post already-extracted rows and
get reconciled records, diagnostics and optional aggregations back.
"""

from typing import Literal, Optional
import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from stockrecon.core import aggregate, reconcile
from stockrecon.errors import ReconciliationError
from stockrecon.models import FieldPair, KeySpec, Record, ReconciledRecord

logger = logging.getLogger(__name__)
router = APIRouter()


class ReconcileRequest(BaseModel):
    left: list[Record]
    right: list[Record]
    key: KeySpec
    compare: list[FieldPair] = Field(default_factory=list)
    carry: list[FieldPair] = Field(default_factory=list)
    keep: Optional[Literal["first", "last"]] = None
    uncomparable_as_match: Optional[bool] = None
    group_by: Optional[list[str]] = None
    grand_total: bool = False
    include_records: bool = True


class ReconcileResponse(BaseModel):
    success: bool
    summary: dict
    diagnostics_count: int
    diagnostics_by_kind: dict
    diagnostics: list[dict]
    records: Optional[list[dict]] = None
    aggregations: Optional[list[dict]] = None
    duration_ms: int


class AggregateRequest(BaseModel):
    records: list[ReconciledRecord]
    key_columns: list[str]
    group_by: list[str] = Field(default_factory=list)
    compare: list[FieldPair] = Field(default_factory=list)
    grand_total: bool = False


class AggregateResponse(BaseModel):
    success: bool
    aggregations: list[dict]


# ============================================
# Main Reconciliation Endpoint
# ============================================

@router.post("/reconcile", response_model=ReconcileResponse)
def run_reconciliation(request: ReconcileRequest):
    """
    Reconcile two posted record sets.

    1. Deduplicates each side
    2. Runs the full outer match and field comparison
    3. Optionally aggregates by ``group_by``
    """
    try:
        result = reconcile(
            request.left,
            request.right,
            request.key,
            request.compare,
            carry=request.carry,
            keep=request.keep,
            uncomparable_as_match=request.uncomparable_as_match,
        )
        aggregations = None
        if request.group_by is not None:
            rows = aggregate(result, request.group_by, request.compare, grand_total=request.grand_total)
            aggregations = [row.model_dump(mode="json") for row in rows]
    except (ReconciliationError, ValueError) as e:
        logger.warning(f"Reconciliation request rejected: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    payload = result.to_dict(include_records=request.include_records)

    return ReconcileResponse(
        success=True,
        summary=payload["summary"],
        diagnostics_count=payload["diagnostics_count"],
        diagnostics_by_kind=payload["diagnostics_by_kind"],
        diagnostics=payload["diagnostics"],
        records=payload.get("records"),
        aggregations=aggregations,
        duration_ms=payload["duration_ms"],
    )


# ============================================
# Aggregation of existing results
# ============================================

@router.post("/aggregate", response_model=AggregateResponse)
def run_aggregation(request: AggregateRequest):
    """Roll previously reconciled records up to the requested grouping."""
    try:
        rows = aggregate(
            request.records,
            request.group_by,
            request.compare,
            key_columns=request.key_columns,
            grand_total=request.grand_total,
        )
    except ReconciliationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return AggregateResponse(
        success=True,
        aggregations=[row.model_dump(mode="json") for row in rows],
    )
