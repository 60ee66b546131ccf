from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional
from .. import models, schemas
from ..database import get_db

router = APIRouter(prefix="/product-categories", tags=["product-categories"])


def _get_category_or_404(category_id: int, db: Session) -> models.ProductCategory:
    category = db.query(models.ProductCategory).filter(models.ProductCategory.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Product category not found")
    return category


def _ensure_name_free(name: str, db: Session, exclude_id: Optional[int] = None):
    query = db.query(models.ProductCategory).filter(func.lower(models.ProductCategory.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(models.ProductCategory.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail=f"Product category '{name}' already exists")


def _with_product_counts(db: Session):
    return db.query(
        models.ProductCategory, func.count(models.Product.id),
    ).outerjoin(
        models.Product, models.Product.category_id == models.ProductCategory.id,
    ).group_by(models.ProductCategory.id)


def _category_to_dict(c: models.ProductCategory, product_count: int) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "description": c.description,
        "product_count": product_count,
        "created_at": c.created_at,
    }


def _category_response(category_id: int, db: Session) -> dict:
    row = _with_product_counts(db).filter(models.ProductCategory.id == category_id).first()
    if not row:
        raise HTTPException(status_code=404, detail="Product category not found")
    return _category_to_dict(*row)


@router.post("/", response_model=schemas.ProductCategory)
def create_category(category: schemas.ProductCategoryCreate, db: Session = Depends(get_db)):
    _ensure_name_free(category.name, db)
    db_category = models.ProductCategory(**category.model_dump())
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return _category_to_dict(db_category, 0)

@router.get("/", response_model=List[schemas.ProductCategory])
def list_categories(q: Optional[str] = None, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    query = _with_product_counts(db)
    if q:
        query = query.filter(models.ProductCategory.name.ilike(f"%{q}%"))
    rows = query.order_by(models.ProductCategory.name).offset(skip).limit(limit).all()
    return [_category_to_dict(c, count) for c, count in rows]

@router.get("/{category_id}", response_model=schemas.ProductCategory)
def get_category(category_id: int, db: Session = Depends(get_db)):
    return _category_response(category_id, db)

@router.patch("/{category_id}", response_model=schemas.ProductCategory)
def update_category(category_id: int, update: schemas.ProductCategoryUpdate, db: Session = Depends(get_db)):
    category = _get_category_or_404(category_id, db)
    changes = update.model_dump(exclude_unset=True)
    if changes.get("name"):
        _ensure_name_free(changes["name"], db, exclude_id=category_id)
    for field, value in changes.items():
        if field == "name" and value is None:
            continue
        setattr(category, field, value)
    db.commit()
    return _category_response(category_id, db)

@router.delete("/{category_id}")
def delete_category(category_id: int, db: Session = Depends(get_db)):
    """Delete a category. Its products stay in the catalog, uncategorized."""
    category = _get_category_or_404(category_id, db)
    unlinked = db.query(models.Product).filter(
        models.Product.category_id == category_id
    ).update({models.Product.category_id: None}, synchronize_session=False)
    db.delete(category)
    db.commit()
    return {"ok": True, "products_unlinked": unlinked}

@router.get("/{category_id}/products", response_model=List[schemas.Product])
def list_category_products(category_id: int, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    """Products in one category, newest first."""
    _get_category_or_404(category_id, db)
    return db.query(models.Product).filter(
        models.Product.category_id == category_id,
    ).order_by(models.Product.created_at.desc(), models.Product.id.desc()).offset(skip).limit(limit).all()
