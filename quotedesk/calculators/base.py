"""
Engine data shapes — Material, Task (with its material costing), QuoteTotals.

A task's materials are costed one of two ways and only the active one exists
on the task: LumpSumMaterials carries an estimate, ItemizedMaterials carries
material lines. There is no flat "mode + estimate + materials" record here;
the host layer converts its rows with build_costing().
"""

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar, Optional, Union

from .rounding import ZERO, Money

Number = Union[int, float, Decimal, str, None]


class CostingMode(str, enum.Enum):
    LUMP_SUM = "lump_sum"
    ITEMIZED = "itemized"


@dataclass(frozen=True)
class Material:
    """One priced line on an itemized task."""
    quantity: Number = 0
    unit_price: Number = 0


@dataclass(frozen=True)
class LumpSumMaterials:
    mode: ClassVar[CostingMode] = CostingMode.LUMP_SUM

    estimate: Number = 0


@dataclass(frozen=True)
class ItemizedMaterials:
    mode: ClassVar[CostingMode] = CostingMode.ITEMIZED

    materials: tuple = ()

    def __post_init__(self):
        # Accept any iterable of Material, store an immutable tuple
        object.__setattr__(self, "materials", tuple(self.materials))


MaterialCosting = Union[LumpSumMaterials, ItemizedMaterials]


@dataclass(frozen=True)
class Task:
    """
    One unit of work on a quote.

    price is the labor/service amount. costing is None when the task has no
    recognised material costing, in which case its materials cost nothing.
    """
    price: Number = 0
    costing: Optional[MaterialCosting] = None


@dataclass(frozen=True)
class QuoteTotals:
    subtotal_tasks: Money = ZERO
    subtotal_materials: Money = ZERO
    subtotal_combined: Money = ZERO
    complexity_charge: Money = ZERO
    markup_charge: Money = ZERO
    grand_total: Money = ZERO
    tax_charge: Money = ZERO
    total_with_tax: Money = ZERO

    def as_dict(self) -> dict:
        """Plain floats for JSON responses and the quote's Float summary columns."""
        return {
            "subtotal_tasks": float(self.subtotal_tasks),
            "subtotal_materials": float(self.subtotal_materials),
            "subtotal_combined": float(self.subtotal_combined),
            "complexity_charge": float(self.complexity_charge),
            "markup_charge": float(self.markup_charge),
            "grand_total": float(self.grand_total),
            "tax_charge": float(self.tax_charge),
            "total_with_tax": float(self.total_with_tax),
        }


def parse_costing_mode(mode) -> Optional[CostingMode]:
    """CostingMode from an enum member or its string value. Unknown -> None."""
    if isinstance(mode, CostingMode):
        return mode
    try:
        return CostingMode(str(mode).strip().lower())
    except ValueError:
        return None


def build_costing(mode, lump_sum_estimate: Number = None, materials=()) -> Optional[MaterialCosting]:
    """
    Build the active costing variant from a flat (mode, estimate, materials) shape.

    Only the data belonging to `mode` is carried over; the other field is
    dropped here and never reaches the calculators.
    """
    parsed = parse_costing_mode(mode)
    if parsed is CostingMode.LUMP_SUM:
        return LumpSumMaterials(estimate=lump_sum_estimate)
    if parsed is CostingMode.ITEMIZED:
        return ItemizedMaterials(materials=materials or ())
    return None
