"""Material line totals."""

from .base import Material
from .rounding import Money, currency_context, non_negative, round_currency


@currency_context
def material_total(material: Material) -> Money:
    """round(quantity × unit_price). Negative or missing inputs count as 0."""
    quantity = non_negative(material.quantity)
    unit_price = non_negative(material.unit_price)
    return round_currency(quantity * unit_price)
