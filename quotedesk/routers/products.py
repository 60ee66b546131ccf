from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional
from .. import models, schemas
from ..database import get_db

router = APIRouter(prefix="/products", tags=["products"])

# Changing a product price does not reprice existing material lines; name
# and unit price are copied onto a line when it is added or re-linked to a
# different product (see materials.update_material).


def _get_product_or_404(product_id: int, db: Session) -> models.Product:
    product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _check_category(category_id: Optional[int], db: Session):
    if category_id is None:
        return
    exists = db.query(models.ProductCategory.id).filter(models.ProductCategory.id == category_id).first()
    if not exists:
        raise HTTPException(status_code=404, detail=f"Product category {category_id} not found")

@router.post("/", response_model=schemas.Product)
def create_product(product: schemas.ProductCreate, db: Session = Depends(get_db)):
    _check_category(product.category_id, db)
    db_product = models.Product(**product.model_dump())
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    return db_product

@router.get("/", response_model=List[schemas.Product])
def list_products(
    category_id: Optional[int] = None,
    q: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    query = db.query(models.Product)
    if category_id is not None:
        query = query.filter(models.Product.category_id == category_id)
    if q:
        pattern = f"%{q}%"
        query = query.filter(or_(
            models.Product.name.ilike(pattern),
            models.Product.sku.ilike(pattern),
            models.Product.description.ilike(pattern),
        ))
    return query.order_by(models.Product.name).offset(skip).limit(limit).all()

@router.get("/{product_id}", response_model=schemas.Product)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _get_product_or_404(product_id, db)

@router.patch("/{product_id}", response_model=schemas.Product)
def update_product(product_id: int, update: schemas.ProductUpdate, db: Session = Depends(get_db)):
    product = _get_product_or_404(product_id, db)
    changes = update.model_dump(exclude_unset=True)
    _check_category(changes.get("category_id"), db)
    for field, value in changes.items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return product

@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    product = _get_product_or_404(product_id, db)
    # Material lines keep their copied name/price, they just lose the link
    db.query(models.Material).filter(
        models.Material.product_id == product_id
    ).update({models.Material.product_id: None}, synchronize_session=False)
    db.delete(product)
    db.commit()
    return {"ok": True}
