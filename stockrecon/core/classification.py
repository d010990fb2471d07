# stockrecon/core/classification.py

"""
Match status classification.

Precedence is fixed:
1. LeftOnly   - right side absent
2. RightOnly  - left side absent
3. Match      - every existing difference is within tolerance (or no fields designated)
4. Mismatch   - at least one difference exceeds tolerance

Both sides present with designated fields but not a single comparable value is
Indeterminate, unless the caller explicitly folds that case into Match.
"""

from typing import Sequence

from stockrecon.models import FieldPair, MatchStatus, ReconciledRecord


def classify_status(
    record: ReconciledRecord,
    field_pairs: Sequence[FieldPair],
    *,
    uncomparable_as_match: bool = False,
) -> MatchStatus:
    """Assign the match status of a record whose differences are filled in."""

    # ============================================
    # One-sided records
    # ============================================
    if not record.has_right:
        return MatchStatus.LEFT_ONLY

    if not record.has_left:
        return MatchStatus.RIGHT_ONLY

    # ============================================
    # Both sides present
    # ============================================
    if not field_pairs:
        return MatchStatus.MATCH

    compared = 0
    for pair in field_pairs:
        delta = record.differences.get(pair.label)
        if delta is None:
            continue
        compared += 1
        if abs(delta) > pair.tolerance:
            return MatchStatus.MISMATCH

    if compared:
        return MatchStatus.MATCH

    return MatchStatus.MATCH if uncomparable_as_match else MatchStatus.INDETERMINATE
