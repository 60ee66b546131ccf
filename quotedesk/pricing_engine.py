"""
Quote pricing — where the host meets the calculation engine.

Two callers, one calculators.aggregate():
- preview_totals(): unsaved form state -> QuoteTotals. Nothing is written.
  Provisional; the form re-renders from the server's totals once it saves.
- recalculate_quote_totals(): after every persisted mutation (quote, charges,
  task, material), rebuild engine inputs from the stored rows and overwrite
  the quote's summary columns. This is the system of record.

Both go through build_costing(), so a task's inactive costing data never
reaches the engine regardless of where the task came from.
"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from . import models, schemas
from .calculators import Material, QuoteTotals, Task, aggregate, build_costing, round_currency

logger = logging.getLogger(__name__)

TOTAL_FIELDS = (
    "subtotal_tasks",
    "subtotal_materials",
    "subtotal_combined",
    "complexity_charge",
    "markup_charge",
    "grand_total",
    "tax_charge",
    "total_with_tax",
)


def resolve_material_fields(material: schemas.MaterialCreate, db: Session) -> dict:
    """
    Column values for a new material line.

    name and unit_price fall back to the referenced product's; an explicit
    unit_price always wins over the catalog price.
    """
    product: Optional[models.Product] = None
    if material.product_id is not None:
        product = db.query(models.Product).filter(models.Product.id == material.product_id).first()
        if not product:
            raise HTTPException(status_code=404, detail=f"Product {material.product_id} not found")

    name = material.name
    if not name:
        name = product.name if product else ""
    unit_price = material.unit_price
    if unit_price is None:
        unit_price = product.unit_price if product else 0.0

    return {
        "name": name,
        "product_id": material.product_id,
        "quantity": material.quantity,
        "unit_price": unit_price,
        "notes": material.notes,
    }


def task_from_row(task: models.Task) -> Task:
    """Engine Task from a stored task and its material rows."""
    return Task(
        price=task.price,
        costing=build_costing(
            task.material_costing_mode,
            task.lump_sum_estimate,
            # Generator: only consumed for itemized tasks
            (Material(quantity=m.quantity, unit_price=m.unit_price) for m in task.materials),
        ),
    )


def task_from_payload(task: schemas.TaskCreate, db: Session) -> Task:
    """Engine Task from unsaved form data."""
    return Task(
        price=task.price,
        costing=build_costing(
            task.material_costing_mode,
            task.lump_sum_estimate,
            (_material_from_payload(m, db) for m in task.materials),
        ),
    )


def _material_from_payload(material: schemas.MaterialCreate, db: Session) -> Material:
    fields = resolve_material_fields(material, db)
    return Material(quantity=fields["quantity"], unit_price=fields["unit_price"])


def preview_totals(request: schemas.QuotePreviewRequest, db: Session) -> QuoteTotals:
    """Totals for a quote that has not been saved. Nothing is persisted."""
    return aggregate(
        [task_from_payload(t, db) for t in request.tasks],
        request.complexity_percentage,
        request.markup_percentage,
        request.tax_percentage,
    )


def recalculate_quote_totals(quote: models.Quote, db: Session) -> QuoteTotals:
    """
    Recompute a quote's totals from scratch and commit them.

    Called after every mutation that could change a total. Pending changes
    are flushed and the session expired first so the computation reads what
    is actually stored, not stale relationship collections.
    """
    db.flush()
    db.expire_all()

    totals = aggregate(
        [task_from_row(t) for t in quote.tasks],
        quote.complexity_percentage,
        quote.markup_percentage,
        quote.tax_percentage,
    )
    for field, value in totals.as_dict().items():
        setattr(quote, field, value)
    db.commit()

    logger.info(
        "Recalculated %s: subtotal=%s complexity=%s markup=%s grand_total=%s",
        quote.quote_number,
        totals.subtotal_combined,
        totals.complexity_charge,
        totals.markup_charge,
        totals.grand_total,
    )
    return totals


def stored_totals(quote: models.Quote) -> dict:
    """The quote's persisted summary columns."""
    return {field: float(round_currency(getattr(quote, field))) for field in TOTAL_FIELDS}
