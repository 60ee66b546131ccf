"""
Quote pricing engine.

Pure Python math. No database, no HTTP.
Given a quote's tasks (each with its labor price and material costing) and the
quote's percentage charges, produce the exact QuoteTotals that get shown in the
live preview and written to the quote's summary columns.

Layers, bottom-up: rounding -> material_cost -> task_cost -> quote_totals.
"""

from .base import (
    CostingMode,
    ItemizedMaterials,
    LumpSumMaterials,
    Material,
    QuoteTotals,
    Task,
    build_costing,
)
from .material_cost import material_total
from .quote_totals import aggregate
from .rounding import Money, Percentage, non_negative, round_currency, to_decimal
from .task_cost import switch_costing_mode, task_materials_total, task_total

__all__ = [
    "CostingMode",
    "ItemizedMaterials",
    "LumpSumMaterials",
    "Material",
    "Money",
    "Percentage",
    "QuoteTotals",
    "Task",
    "aggregate",
    "build_costing",
    "material_total",
    "non_negative",
    "round_currency",
    "switch_costing_mode",
    "task_materials_total",
    "task_total",
    "to_decimal",
]
