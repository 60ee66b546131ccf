from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
from .. import models
from ..calculators import round_currency
from ..database import get_db

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

RECENT_QUOTES = 5


@router.get("/stats")
def get_stats(db: Session = Depends(get_db)):
    """
    Quote counts by status, customers with quotes, accepted revenue and the
    most recent quotes.

    Revenue is the sum of accepted quotes' grand totals — the figures the
    pricing engine last persisted, never recomputed here.
    """
    from .quotes import _quote_summary

    counts = dict(
        db.query(models.Quote.status, func.count(models.Quote.id))
        .group_by(models.Quote.status)
        .all()
    )
    by_status = {s.value: counts.get(s, 0) for s in models.QuoteStatus}

    customers_with_quotes = db.query(func.count(func.distinct(models.Quote.customer_id))).scalar() or 0

    accepted = db.query(models.Quote.grand_total).filter(
        models.Quote.status == models.QuoteStatus.ACCEPTED
    ).all()
    accepted_revenue = round_currency(sum((round_currency(row[0]) for row in accepted), 0))

    recent = db.query(models.Quote).order_by(
        models.Quote.created_at.desc(), models.Quote.id.desc()
    ).limit(RECENT_QUOTES).all()

    return {
        "total_quotes": sum(by_status.values()),
        "quotes_by_status": by_status,
        "customers_with_quotes": customers_with_quotes,
        "accepted_revenue": float(accepted_revenue),
        "recent_quotes": [_quote_summary(q) for q in recent],
    }
