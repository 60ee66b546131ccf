"""
Quote totals — folds a quote's tasks into subtotals and applies its charges.

Order matters and is fixed:
    subtotal_tasks      = round(Σ task price)
    subtotal_materials  = round(Σ task materials total)
    subtotal_combined   = round(subtotal_tasks + subtotal_materials)
    complexity_charge   = round(subtotal_combined × complexity% / 100)
    markup_charge       = round((subtotal_combined + complexity_charge) × markup% / 100)
    grand_total         = round(subtotal_combined + complexity_charge + markup_charge)
    tax_charge          = round(grand_total × tax% / 100)        (optional, last)
    total_with_tax      = round(grand_total + tax_charge)

Markup is charged on cost plus complexity, not on the bare subtotal.
Every figure is rounded where it is produced; no fractional cents carry over
from one step to the next.

This is the only implementation of quote totals. The preview endpoint and
the post-mutation recompute both call aggregate().
"""

from decimal import Decimal
from typing import Iterable, Optional

from .base import QuoteTotals, Task
from .rounding import Percentage, currency_context, non_negative, round_currency
from .task_cost import task_materials_total

_HUNDRED = Decimal(100)


def _percentage(value) -> Percentage:
    return Percentage(non_negative(value))


@currency_context
def aggregate(
    tasks: Iterable[Task],
    complexity_percentage=0,
    markup_percentage=0,
    tax_percentage: Optional[float] = None,
) -> QuoteTotals:
    """
    Compute QuoteTotals for a quote. Never raises.

    Negative, NaN or missing prices and percentages count as 0.
    tax_percentage=None skips tax (tax_charge 0, total_with_tax == grand_total).
    """
    tasks = list(tasks or ())
    complexity_pct = _percentage(complexity_percentage)
    markup_pct = _percentage(markup_percentage)
    tax_pct = _percentage(tax_percentage)

    subtotal_tasks = round_currency(
        sum((non_negative(t.price) for t in tasks), Decimal(0))
    )
    subtotal_materials = round_currency(
        sum((task_materials_total(t) for t in tasks), Decimal(0))
    )
    subtotal_combined = round_currency(subtotal_tasks + subtotal_materials)

    complexity_charge = round_currency(subtotal_combined * complexity_pct / _HUNDRED)
    markup_base = subtotal_combined + complexity_charge
    markup_charge = round_currency(markup_base * markup_pct / _HUNDRED)
    grand_total = round_currency(subtotal_combined + complexity_charge + markup_charge)

    tax_charge = round_currency(grand_total * tax_pct / _HUNDRED)
    total_with_tax = round_currency(grand_total + tax_charge)

    return QuoteTotals(
        subtotal_tasks=subtotal_tasks,
        subtotal_materials=subtotal_materials,
        subtotal_combined=subtotal_combined,
        complexity_charge=complexity_charge,
        markup_charge=markup_charge,
        grand_total=grand_total,
        tax_charge=tax_charge,
        total_with_tax=total_with_tax,
    )
