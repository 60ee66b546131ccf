from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from .. import models, schemas
from ..calculators import CostingMode, Material, material_total
from ..database import get_db
from ..pricing_engine import recalculate_quote_totals, resolve_material_fields, stored_totals

router = APIRouter(tags=["materials"])


def _get_material_or_404(material_id: int, db: Session) -> models.Material:
    material = db.query(models.Material).filter(models.Material.id == material_id).first()
    if not material:
        raise HTTPException(status_code=404, detail="Material not found")
    return material


def _material_to_dict(m: models.Material) -> dict:
    return {
        "id": m.id,
        "task_id": m.task_id,
        "product_id": m.product_id,
        "name": m.name,
        "quantity": m.quantity,
        "unit_price": m.unit_price,
        "line_total": float(material_total(Material(quantity=m.quantity, unit_price=m.unit_price))),
        "notes": m.notes,
    }


def _material_response(material_id: int, quote: models.Quote, db: Session) -> dict:
    material = _get_material_or_404(material_id, db)
    return {"material": _material_to_dict(material), "totals": stored_totals(quote)}


@router.post("/tasks/{task_id}/materials")
def add_material(task_id: int, material_in: schemas.MaterialCreate, db: Session = Depends(get_db)):
    task = db.query(models.Task).filter(models.Task.id == task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    if task.material_costing_mode != CostingMode.ITEMIZED:
        raise HTTPException(status_code=400, detail="Cannot add materials to a lump_sum task")

    material = models.Material(**resolve_material_fields(material_in, db))
    task.materials.append(material)
    db.flush()
    material_id = material.id

    quote = task.quote
    recalculate_quote_totals(quote, db)
    return _material_response(material_id, quote, db)


@router.patch("/materials/{material_id}")
def update_material(material_id: int, update: schemas.MaterialUpdate, db: Session = Depends(get_db)):
    material = _get_material_or_404(material_id, db)
    changes = update.model_dump(exclude_unset=True, exclude_none=True)

    if "product_id" in changes and changes["product_id"] != material.product_id:
        product = db.query(models.Product).filter(models.Product.id == changes["product_id"]).first()
        if not product:
            raise HTTPException(status_code=404, detail=f"Product {changes['product_id']} not found")
        # Re-linked: copy the new product's name and price unless the request sets them
        changes.setdefault("name", product.name)
        changes.setdefault("unit_price", product.unit_price)

    for field, value in changes.items():
        setattr(material, field, value)

    quote = material.task.quote
    recalculate_quote_totals(quote, db)
    return _material_response(material_id, quote, db)


@router.delete("/materials/{material_id}")
def delete_material(material_id: int, db: Session = Depends(get_db)):
    material = _get_material_or_404(material_id, db)
    task = material.task
    quote = task.quote
    task.materials.remove(material)

    totals = recalculate_quote_totals(quote, db)
    return {"ok": True, "totals": totals.as_dict()}
