"""
Shop settings — currency and the defaults new quotes and lines start from.

One row. It is created from the environment defaults in config.Settings the
first time anything reads it; after that, edits go through PUT /settings.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas
from ..config import settings
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


def get_shop_settings(db: Session) -> models.ShopSettings:
    row = db.query(models.ShopSettings).order_by(models.ShopSettings.id).first()
    if row:
        return row

    logger.info("No shop settings yet, creating defaults")
    row = models.ShopSettings(
        currency=settings.DEFAULT_CURRENCY,
        currency_symbol=settings.DEFAULT_CURRENCY_SYMBOL,
        default_complexity_percentage=settings.DEFAULT_COMPLEXITY_PCT,
        default_markup_percentage=settings.DEFAULT_MARKUP_PCT,
        default_tax_percentage=settings.DEFAULT_TAX_PCT,
        default_task_price=settings.DEFAULT_TASK_PRICE,
        default_material_price=settings.DEFAULT_MATERIAL_PRICE,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@router.get("/", response_model=schemas.ShopSettings)
def read_settings(db: Session = Depends(get_db)):
    return get_shop_settings(db)


@router.put("/", response_model=schemas.ShopSettings)
def update_settings(update: schemas.ShopSettingsUpdate, db: Session = Depends(get_db)):
    """Only the fields sent are changed. Existing quotes keep their percentages."""
    row = get_shop_settings(db)
    for field, value in update.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(row, field, value)
    db.commit()
    db.refresh(row)
    return row
