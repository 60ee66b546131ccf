import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime, timedelta
from .. import models, schemas
from ..calculators import round_currency, task_materials_total, task_total
from ..config import settings
from ..database import get_db
from ..pricing_engine import preview_totals, recalculate_quote_totals, stored_totals, task_from_row
from .shop_settings import get_shop_settings
from .tasks import build_task, _task_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quotes", tags=["quotes"])

QUOTE_NUMBER_ATTEMPTS = 2


def generate_quote_number(db: Session) -> str:
    last_id = db.query(func.max(models.Quote.id)).scalar() or 0
    year = datetime.utcnow().year
    return f"{settings.QUOTE_NUMBER_PREFIX}-{year}-{str(last_id + 1).zfill(4)}"


def _get_quote_or_404(quote_id: int, db: Session) -> models.Quote:
    quote = db.query(models.Quote).filter(models.Quote.id == quote_id).first()
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")
    return quote


def _get_customer_or_404(customer_id: int, db: Session) -> models.Customer:
    customer = db.query(models.Customer).filter(models.Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


# --- Endpoints ---

def _build_quote(quote: schemas.QuoteCreate, db: Session) -> models.Quote:
    defaults = get_shop_settings(db)

    def _pct(value, default):
        return default if value is None else value

    db_quote = models.Quote(
        quote_number=generate_quote_number(db),
        customer_id=quote.customer_id,
        title=quote.title,
        notes=quote.notes,
        valid_until=quote.valid_until or datetime.utcnow() + timedelta(days=settings.QUOTE_VALID_DAYS),
        complexity_percentage=_pct(quote.complexity_percentage, defaults.default_complexity_percentage),
        markup_percentage=_pct(quote.markup_percentage, defaults.default_markup_percentage),
        tax_percentage=_pct(quote.tax_percentage, defaults.default_tax_percentage),
    )
    for position, task_in in enumerate(quote.tasks):
        db_quote.tasks.append(build_task(task_in, position=position, db=db))
    return db_quote


@router.post("/")
def create_quote(quote: schemas.QuoteCreate, db: Session = Depends(get_db)):
    _get_customer_or_404(quote.customer_id, db)

    # A concurrent create can take the same number between generate and
    # insert; the unique constraint catches it and the number is regenerated.
    for attempt in range(QUOTE_NUMBER_ATTEMPTS):
        db_quote = _build_quote(quote, db)
        quote_number = db_quote.quote_number
        db.add(db_quote)
        try:
            db.flush()
            break
        except IntegrityError:
            db.rollback()
            logger.warning("Quote number %s already taken (attempt %d)", quote_number, attempt + 1)
    else:
        raise HTTPException(status_code=409, detail="Could not allocate a quote number, try again")

    recalculate_quote_totals(db_quote, db)
    db.refresh(db_quote)
    return _quote_to_dict(db_quote)


@router.post("/preview", response_model=schemas.QuoteTotals)
def preview_quote(request: schemas.QuotePreviewRequest, db: Session = Depends(get_db)):
    """
    Totals for unsaved quote state — same engine as the persisted totals.

    Nothing is written; the editor replaces these with the server's totals
    as soon as the change is saved.
    """
    return preview_totals(request, db).as_dict()


@router.get("/")
def list_quotes(
    status: Optional[models.QuoteStatus] = None,
    customer_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    query = db.query(models.Quote)
    if status is not None:
        query = query.filter(models.Quote.status == status)
    if customer_id is not None:
        query = query.filter(models.Quote.customer_id == customer_id)
    quotes = query.order_by(models.Quote.created_at.desc(), models.Quote.id.desc()).offset(skip).limit(limit).all()
    return [_quote_summary(q) for q in quotes]


@router.get("/{quote_id}")
def get_quote(quote_id: int, db: Session = Depends(get_db)):
    return _quote_to_dict(_get_quote_or_404(quote_id, db))


@router.patch("/{quote_id}")
def update_quote(quote_id: int, update: schemas.QuoteUpdate, db: Session = Depends(get_db)):
    quote = _get_quote_or_404(quote_id, db)
    changes = update.model_dump(exclude_unset=True, exclude_none=True)
    if "customer_id" in changes:
        _get_customer_or_404(changes["customer_id"], db)
    for field, value in changes.items():
        setattr(quote, field, value)

    recalculate_quote_totals(quote, db)
    return _quote_to_dict(quote)


@router.delete("/{quote_id}")
def delete_quote(quote_id: int, db: Session = Depends(get_db)):
    quote = _get_quote_or_404(quote_id, db)
    db.delete(quote)
    db.commit()
    return {"ok": True}


@router.put("/{quote_id}/status")
def update_status(quote_id: int, request: schemas.StatusUpdate, db: Session = Depends(get_db)):
    quote = _get_quote_or_404(quote_id, db)
    quote.status = request.status
    db.commit()
    db.refresh(quote)
    return _quote_summary(quote)


@router.put("/{quote_id}/charges")
def update_charges(quote_id: int, request: schemas.ChargesUpdate, db: Session = Depends(get_db)):
    """
    Update complexity / markup / tax percentages and recompute the totals.

    Only the percentages sent are changed.
    """
    quote = _get_quote_or_404(quote_id, db)
    for field, value in request.model_dump(exclude_unset=True).items():
        if value is None and field != "tax_percentage":
            continue
        setattr(quote, field, value)

    totals = recalculate_quote_totals(quote, db)
    return {
        "quote_id": quote.id,
        "quote_number": quote.quote_number,
        "complexity_percentage": quote.complexity_percentage,
        "markup_percentage": quote.markup_percentage,
        "tax_percentage": quote.tax_percentage,
        "totals": totals.as_dict(),
    }


@router.get("/{quote_id}/breakdown")
def get_quote_breakdown(quote_id: int, db: Session = Depends(get_db)):
    """Per-task cost lines plus the charge chain that produced the grand total."""
    quote = _get_quote_or_404(quote_id, db)
    totals = stored_totals(quote)

    lines = []
    for t in quote.tasks:
        engine_task = task_from_row(t)
        lines.append({
            "task_id": t.id,
            "description": t.description,
            "material_costing_mode": t.material_costing_mode.value,
            "price": float(round_currency(t.price)),
            "materials_total": float(task_materials_total(engine_task)),
            "task_total": float(task_total(engine_task)),
        })

    markup_base = round_currency(totals["subtotal_combined"]) + round_currency(totals["complexity_charge"])
    return {
        "quote_number": quote.quote_number,
        "tasks": lines,
        "complexity_percentage": quote.complexity_percentage,
        "markup_percentage": quote.markup_percentage,
        "tax_percentage": quote.tax_percentage,
        "markup_base": float(markup_base),
        **totals,
    }


def _quote_summary(q: models.Quote) -> dict:
    return {
        "id": q.id,
        "quote_number": q.quote_number,
        "title": q.title,
        "status": q.status.value if q.status else "draft",
        "customer_id": q.customer_id,
        "customer_name": q.customer.name if q.customer else None,
        "grand_total": q.grand_total,
        "total_with_tax": q.total_with_tax,
        "created_at": q.created_at.isoformat() if q.created_at else None,
    }


def _quote_to_dict(q: models.Quote) -> dict:
    return {
        "id": q.id,
        "quote_number": q.quote_number,
        "title": q.title,
        "status": q.status.value if q.status else "draft",
        "notes": q.notes,
        "valid_until": q.valid_until.isoformat() if q.valid_until else None,
        "complexity_percentage": q.complexity_percentage,
        "markup_percentage": q.markup_percentage,
        "tax_percentage": q.tax_percentage,
        "totals": stored_totals(q),
        "created_at": q.created_at.isoformat() if q.created_at else None,
        "updated_at": q.updated_at.isoformat() if q.updated_at else None,
        "customer": {
            "id": q.customer.id,
            "name": q.customer.name,
            "company": q.customer.company,
            "email": q.customer.email,
            "phone": q.customer.phone,
        } if q.customer else None,
        "customer_id": q.customer_id,
        "tasks": [_task_to_dict(t) for t in q.tasks],
    }
