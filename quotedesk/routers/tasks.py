"""
Task endpoints — add, update (including a costing mode switch), delete.

Every mutation ends with recalculate_quote_totals() on the parent quote and
returns the task together with the quote's authoritative totals.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models, schemas
from ..calculators import CostingMode, ItemizedMaterials, switch_costing_mode, task_materials_total, task_total
from ..database import get_db
from ..pricing_engine import recalculate_quote_totals, resolve_material_fields, stored_totals, task_from_row
from .materials import _material_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def build_task(task_in: schemas.TaskCreate, position: int, db: Session) -> models.Task:
    """
    New Task row (not yet added to a session) from request data.

    Only the active costing variant's data is stored: a lump_sum task gets its
    estimate and no material rows, an itemized task gets material rows and a
    NULL estimate.
    """
    task = models.Task(
        description=task_in.description,
        price=task_in.price,
        position=task_in.position if task_in.position is not None else position,
        material_costing_mode=task_in.material_costing_mode,
    )
    if task_in.material_costing_mode == CostingMode.ITEMIZED:
        task.lump_sum_estimate = None
        for material_in in task_in.materials:
            task.materials.append(models.Material(**resolve_material_fields(material_in, db)))
    else:
        task.lump_sum_estimate = task_in.lump_sum_estimate
    return task


def _get_task_or_404(task_id: int, db: Session) -> models.Task:
    task = db.query(models.Task).filter(models.Task.id == task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def _apply_mode_switch(task: models.Task, mode: CostingMode):
    """Switch a stored task's costing mode, dropping the data of the mode being left."""
    switched = switch_costing_mode(task_from_row(task), mode)
    if switched.costing is None or switched.costing.mode == task.material_costing_mode:
        return
    logger.info(
        "Task %s costing %s -> %s",
        task.id, task.material_costing_mode.value, switched.costing.mode.value,
    )
    task.material_costing_mode = switched.costing.mode
    if isinstance(switched.costing, ItemizedMaterials):
        task.lump_sum_estimate = None
    else:
        task.materials.clear()  # delete-orphan removes the rows
        task.lump_sum_estimate = float(switched.costing.estimate)


def _task_to_dict(t: models.Task) -> dict:
    engine_task = task_from_row(t)
    is_itemized = t.material_costing_mode == CostingMode.ITEMIZED
    return {
        "id": t.id,
        "quote_id": t.quote_id,
        "description": t.description,
        "price": t.price,
        "position": t.position,
        "material_costing_mode": t.material_costing_mode.value if t.material_costing_mode else None,
        "lump_sum_estimate": None if is_itemized else t.lump_sum_estimate,
        "materials": [_material_to_dict(m) for m in t.materials] if is_itemized else [],
        "materials_total": float(task_materials_total(engine_task)),
        "task_total": float(task_total(engine_task)),
    }


def _task_response(task_id: int, quote: models.Quote, db: Session) -> dict:
    task = _get_task_or_404(task_id, db)
    return {"task": _task_to_dict(task), "totals": stored_totals(quote)}


# --- Endpoints ---

@router.post("/quotes/{quote_id}/tasks")
def add_task(quote_id: int, task_in: schemas.TaskCreate, db: Session = Depends(get_db)):
    quote = db.query(models.Quote).filter(models.Quote.id == quote_id).first()
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")

    task = build_task(task_in, position=len(quote.tasks), db=db)
    quote.tasks.append(task)
    db.flush()
    task_id = task.id

    recalculate_quote_totals(quote, db)
    return _task_response(task_id, quote, db)


@router.patch("/tasks/{task_id}")
def update_task(task_id: int, update: schemas.TaskUpdate, db: Session = Depends(get_db)):
    task = _get_task_or_404(task_id, db)
    changes = update.model_dump(exclude_unset=True, exclude_none=True)

    mode = changes.pop("material_costing_mode", None)
    if mode is not None:
        _apply_mode_switch(task, mode)

    if "lump_sum_estimate" in changes:
        if task.material_costing_mode != CostingMode.LUMP_SUM:
            raise HTTPException(
                status_code=400,
                detail="lump_sum_estimate only applies to lump_sum tasks",
            )

    for field, value in changes.items():
        setattr(task, field, value)

    quote = task.quote
    recalculate_quote_totals(quote, db)
    return _task_response(task_id, quote, db)


@router.delete("/tasks/{task_id}")
def delete_task(task_id: int, db: Session = Depends(get_db)):
    task = _get_task_or_404(task_id, db)
    quote = task.quote
    quote.tasks.remove(task)  # delete-orphan removes the task and its materials

    totals = recalculate_quote_totals(quote, db)
    return {"ok": True, "totals": totals.as_dict()}
