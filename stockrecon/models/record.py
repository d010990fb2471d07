# stockrecon/models/record.py

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, StrictBool, model_validator

# ============================================
# Field values
# ============================================

# None is the only "missing" marker. It is never read as 0, "" or False.
# Booleans are kept as booleans (not 1/0) so the comparator can reject them.
FieldValue = Union[StrictBool, str, int, float, Decimal, datetime, date, None]
Number = Union[int, float, Decimal]

Record = dict[str, FieldValue]
Key = tuple[FieldValue, ...]

Side = Literal["left", "right"]


def json_value(value: Any) -> Any:
    """JSON form of a field value: Decimals become numbers, not strings."""
    if isinstance(value, Decimal):
        return float(value)
    return value


# ============================================
# Key specification
# ============================================

class KeySpec(BaseModel):
    """Ordered business key shared by both record sets."""

    columns: list[str] = Field(min_length=1, description="Key component names on the left side")
    right_columns: Optional[list[str]] = Field(
        default=None,
        description="Key component names on the right side, when they differ from the left",
    )
    trim: bool = Field(default=False, description="Strip surrounding whitespace from text components")
    case_insensitive: bool = Field(default=False, description="Casefold text components")

    @model_validator(mode="after")
    def _validate_columns(self) -> "KeySpec":
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Key columns must be unique: {self.columns}")
        if self.right_columns is not None and len(self.right_columns) != len(self.columns):
            raise ValueError(
                f"right_columns has {len(self.right_columns)} entries, expected {len(self.columns)}"
            )
        return self

    def columns_for(self, side: Side) -> list[str]:
        if side == "right" and self.right_columns is not None:
            return list(self.right_columns)
        return list(self.columns)


# ============================================
# Field alias table
# ============================================

class FieldPair(BaseModel):
    """A left-side field and the right-side field holding the same attribute."""

    left: str
    right: str
    name: Optional[str] = Field(default=None, description="Output label, defaults to the left name")
    tolerance: Decimal = Field(default=Decimal("0"), ge=0, description="Largest delta still counted as equal")

    @property
    def label(self) -> str:
        return self.name or self.left

    @classmethod
    def from_spec(cls, spec: str) -> "FieldPair":
        """Build a pair from ``"QTY"`` or ``"QTY:QUANTITY"`` notation."""
        left, _, right = spec.partition(":")
        left = left.strip()
        right = right.strip() or left
        if not left:
            raise ValueError(f"Invalid field pair: {spec!r}")
        return cls(left=left, right=right)
