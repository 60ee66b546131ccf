"""
Task totals — labor price plus the task's materials.

The materials side branches on the task's costing variant:
- LumpSumMaterials: the estimate, rounded
- ItemizedMaterials: the sum of rounded material line totals, rounded
- no costing: 0
"""

import logging
from decimal import Decimal

from .base import CostingMode, ItemizedMaterials, LumpSumMaterials, Task, parse_costing_mode
from .material_cost import material_total
from .rounding import ZERO, Money, currency_context, non_negative, round_currency

logger = logging.getLogger(__name__)


@currency_context
def task_materials_total(task: Task) -> Money:
    costing = task.costing
    if isinstance(costing, LumpSumMaterials):
        return round_currency(non_negative(costing.estimate))
    if isinstance(costing, ItemizedMaterials):
        return round_currency(
            sum((material_total(m) for m in costing.materials), Decimal(0))
        )
    return ZERO


@currency_context
def task_total(task: Task) -> Money:
    """round(price + materials total)."""
    return round_currency(non_negative(task.price) + task_materials_total(task))


def switch_costing_mode(task: Task, mode) -> Task:
    """
    Return a copy of `task` costed with `mode`.

    The data of the variant being left is dropped, not kept around:
    switching to itemized discards the lump-sum estimate and starts with no
    material lines; switching to lump sum discards the material lines and
    starts with a zero estimate. Switching to the current mode is a no-op.
    An unrecognised mode leaves the task without material costing.
    """
    target = parse_costing_mode(mode)
    current = task.costing.mode if task.costing is not None else None
    if target is current:
        return task

    if target is CostingMode.ITEMIZED:
        costing = ItemizedMaterials()
    elif target is CostingMode.LUMP_SUM:
        costing = LumpSumMaterials()
    else:
        costing = None

    logger.debug(
        "Switching task costing %s -> %s",
        current.value if current else None,
        target.value if target else None,
    )
    return Task(price=task.price, costing=costing)
