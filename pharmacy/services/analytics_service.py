"""Revenue and profit aggregation over sales history.

Sales carry a snapshot of the medicine name and a plain reference to the
medicine row. Both can drift: the row may be deleted, renamed, or duplicated
across clinics. Purchase prices are resolved in this order:

1. the referenced medicine, if it still exists;
2. medicines with the same name (trimmed, case-insensitive);
3. the same, after dropping a trailing "new"/"old"/"latest"/"updated" qualifier;

choosing among candidates by exact clinic, then clinic prefix, then any
candidate with a price. A sale whose price cannot be resolved still counts
toward quantity and revenue but never toward profit, and its medicine group
reports profit as unknown.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy.orm import Session

from pharmacy.config import settings
from pharmacy.exceptions import InvalidInputError
from pharmacy.models.medicine import Medicine
from pharmacy.models.sale import Sale
from pharmacy.services import timeutil

logger = logging.getLogger(__name__)

_QUALIFIER_RE = re.compile(r"\s*[\(\[\-]?\s*\b(?:new|old|latest|updated)\b\s*[\)\]]?\s*$", re.IGNORECASE)


def normalize_name(name: str | None) -> str:
    return (name or "").strip().lower()


def strip_qualifier(name: str | None) -> str:
    """'Panadol (New)' -> 'panadol'. Names that are only a qualifier are left alone."""
    normalized = normalize_name(name)
    stripped = _QUALIFIER_RE.sub("", normalized).strip()
    return stripped or normalized


class MedicineIndex:
    """Lookup tables over medicine rows for purchase-price resolution."""

    def __init__(self, medicines: Iterable[Medicine]):
        self.by_id: dict[str, Medicine] = {}
        self.by_name: dict[str, list[Medicine]] = {}
        self.by_base_name: dict[str, list[Medicine]] = {}
        for m in medicines:
            self.by_id[m.id] = m
            self.by_name.setdefault(normalize_name(m.name), []).append(m)
            self.by_base_name.setdefault(strip_qualifier(m.name), []).append(m)

    def candidates(self, medicine_name: str | None) -> list[Medicine]:
        exact = self.by_name.get(normalize_name(medicine_name))
        if exact:
            return exact
        return self.by_base_name.get(strip_qualifier(medicine_name), [])

    def purchase_price(self, sale: Sale) -> Decimal | None:
        medicine = self.by_id.get(sale.medicine_id)
        if medicine is not None and medicine.purchase_price is not None:
            return Decimal(medicine.purchase_price)

        candidates = [m for m in self.candidates(sale.medicine_name) if m.purchase_price is not None]
        if not candidates:
            return None

        sale_clinic = (sale.clinic or "").strip()
        for m in candidates:
            if m.clinic == sale_clinic:
                return Decimal(m.purchase_price)
        sale_clinic_lower = sale_clinic.lower()
        for m in candidates:
            medicine_clinic = (m.clinic or "").strip().lower()
            if medicine_clinic and sale_clinic_lower.startswith(medicine_clinic):
                return Decimal(m.purchase_price)
        return Decimal(candidates[0].purchase_price)


@dataclass
class MedicineSales:
    name: str
    quantity: int = 0
    revenue: Decimal = Decimal("0")
    # None unless every sale in the group has a known purchase price
    profit: Decimal | None = None
    # profit over the priced sales only; None when nothing in the group resolved
    priced_profit: Decimal | None = None
    unpriced_quantity: int = 0


@dataclass
class AggregateResult:
    total_sales: int = 0
    total_revenue: Decimal = Decimal("0")
    total_profit: Decimal | None = Decimal("0")
    top_medicines: list[MedicineSales] = field(default_factory=list)


def aggregate(sales: Iterable[Sale], index: MedicineIndex, limit: int | None = None) -> AggregateResult:
    """Totals plus per-medicine buckets keyed by the sale's snapshot name."""
    limit = settings.TOP_MEDICINES_LIMIT if limit is None else limit
    buckets: dict[str, MedicineSales] = {}
    total_sales = 0
    total_revenue = Decimal("0")
    total_profit: Decimal | None = None
    any_sales = False

    for sale in sales:
        any_sales = True
        total_sales += sale.quantity
        total_revenue += Decimal(sale.total)

        bucket = buckets.get(sale.medicine_name)
        if bucket is None:
            bucket = buckets[sale.medicine_name] = MedicineSales(name=sale.medicine_name)
        bucket.quantity += sale.quantity
        bucket.revenue += Decimal(sale.total)

        purchase_price = index.purchase_price(sale)
        if purchase_price is None:
            bucket.unpriced_quantity += sale.quantity
            continue

        sale_profit = (Decimal(sale.rate) - purchase_price) * sale.quantity
        bucket.priced_profit = (bucket.priced_profit or Decimal("0")) + sale_profit
        total_profit = (total_profit or Decimal("0")) + sale_profit

    if not any_sales:
        total_profit = Decimal("0")

    for bucket in buckets.values():
        bucket.profit = None if bucket.unpriced_quantity else bucket.priced_profit

    top = sorted(buckets.values(), key=lambda b: b.quantity, reverse=True)[:limit]
    return AggregateResult(
        total_sales=total_sales,
        total_revenue=total_revenue,
        total_profit=total_profit,
        top_medicines=top,
    )


def _build_index(db: Session) -> MedicineIndex:
    return MedicineIndex(db.query(Medicine).all())


def analytics(db: Session, clinic: str, start: date | None = None, end: date | None = None) -> AggregateResult:
    """Aggregate a clinic's sales between two UTC dates, both inclusive."""
    if not clinic:
        raise InvalidInputError("Clinic is required")
    if start and end and start > end:
        raise InvalidInputError("'from' must not be after 'to'")
    lo, hi = timeutil.range_bounds(start, end)

    q = db.query(Sale).filter(Sale.clinic == clinic)
    if lo:
        q = q.filter(Sale.sold_at >= lo)
    if hi:
        q = q.filter(Sale.sold_at <= hi)
    sales = q.order_by(Sale.sold_at, Sale.created_at).all()

    result = aggregate(sales, _build_index(db))
    logger.debug("Analytics for %s (%s..%s): %d sales", clinic, start, end, len(sales))
    return result


def monthly_analytics(db: Session, clinic: str, month: str) -> AggregateResult:
    if not clinic or not month:
        raise InvalidInputError("Clinic and month are required")
    year, mon = timeutil.parse_month(month)
    lo, hi = timeutil.month_bounds(year, mon)
    sales = (
        db.query(Sale)
        .filter(Sale.clinic == clinic, Sale.sold_at >= lo, Sale.sold_at < hi)
        .order_by(Sale.sold_at, Sale.created_at)
        .all()
    )
    return aggregate(sales, _build_index(db))
