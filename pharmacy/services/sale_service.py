import logging
from datetime import date, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from pharmacy.database import atomic
from pharmacy.exceptions import InsufficientStockError, InvalidInputError, NotFoundError
from pharmacy.models.medicine import Medicine
from pharmacy.models.sale import Sale
from pharmacy.schemas.sale import SaleCreate, SaleUpdate
from pharmacy.services import stock_service, timeutil

logger = logging.getLogger(__name__)


def record_sale(db: Session, data: SaleCreate) -> Sale:
    """Decrement stock and write the sale in one transaction."""
    with atomic(db):
        medicine = db.query(Medicine).filter(Medicine.id == data.medicine_id).first()
        if not medicine:
            raise NotFoundError("Medicine not found")
        if data.quantity > medicine.quantity:
            raise InsufficientStockError(
                f"Not enough stock. Available: {medicine.quantity}, requested: {data.quantity}",
                available=medicine.quantity,
                requested=data.quantity,
            )

        stock_service.adjust(db, medicine.id, -data.quantity)

        sale = Sale(
            medicine_id=medicine.id,
            medicine_name=data.medicine_name or medicine.name,
            clinic=data.clinic,
            quantity=data.quantity,
            rate=data.rate,
            total=data.quantity * data.rate,
            sold_by=data.sold_by,
            sold_by_name=data.sold_by_name,
            sold_at=timeutil.to_naive_utc(data.sold_at) if data.sold_at else timeutil.utcnow(),
        )
        db.add(sale)

    db.refresh(sale)
    logger.info(
        "Sale recorded: %d x %s at %s (rate %s, sold_at %s UTC)",
        sale.quantity, sale.medicine_name, sale.clinic, sale.rate, sale.sold_at.isoformat(),
    )
    return sale


def get_sale(db: Session, sale_id: str) -> Sale | None:
    return db.query(Sale).filter(Sale.id == sale_id).first()


def _restore_stock(db: Session, medicine_id: str, quantity: int) -> bool:
    """Give ``quantity`` back to a medicine. A deleted medicine is a no-op, not an error."""
    try:
        stock_service.adjust(db, medicine_id, quantity)
    except NotFoundError:
        logger.info("Medicine %s no longer exists, skipping stock restoration of %d", medicine_id, quantity)
        return False
    return True


def edit_sale(db: Session, sale_id: str, data: SaleUpdate) -> Sale:
    """Re-point, re-price or re-quantify a sale, reconciling stock.

    The old quantity is restored before the new one is taken, so an edit that
    keeps the same medicine only needs the difference to be available. The
    ledger refuses to go below zero on either branch; when it does, the whole
    edit (including the restoration) is rolled back.
    """
    with atomic(db):
        sale = db.query(Sale).filter(Sale.id == sale_id).with_for_update().first()
        if not sale:
            raise NotFoundError("Sale not found")

        old_medicine_alive = _restore_stock(db, sale.medicine_id, sale.quantity)

        if data.medicine_id and data.medicine_id != sale.medicine_id:
            new_medicine = db.query(Medicine).filter(Medicine.id == data.medicine_id).first()
            if not new_medicine:
                raise NotFoundError("New medicine not found")
            stock_service.adjust(db, new_medicine.id, -data.quantity)
            sale.medicine_id = new_medicine.id
            sale.medicine_name = data.medicine_name or new_medicine.name
        elif old_medicine_alive:
            stock_service.adjust(db, sale.medicine_id, -data.quantity)

        sale.quantity = data.quantity
        sale.rate = data.rate
        sale.total = data.quantity * data.rate
        if data.sold_at:
            sale.sold_at = timeutil.to_naive_utc(data.sold_at)

    db.refresh(sale)
    logger.info("Sale %s updated: %d x %s at rate %s", sale.id, sale.quantity, sale.medicine_name, sale.rate)
    return sale


def delete_sale(db: Session, sale_id: str) -> None:
    with atomic(db):
        sale = db.query(Sale).filter(Sale.id == sale_id).with_for_update().first()
        if not sale:
            raise NotFoundError("Sale not found")
        quantity, medicine_name = sale.quantity, sale.medicine_name
        _restore_stock(db, sale.medicine_id, quantity)
        db.delete(sale)
    logger.info("Sale %s deleted, %d units of %s returned", sale_id, quantity, medicine_name)


def _sales_between(db: Session, clinic: str, start: datetime, end: datetime) -> list[Sale]:
    return (
        db.query(Sale)
        .filter(Sale.clinic == clinic, Sale.sold_at >= start, Sale.sold_at < end)
        .order_by(Sale.sold_at.desc())
        .all()
    )


def sales_today(db: Session, clinic: str) -> list[Sale]:
    start, end = timeutil.today_bounds()
    return _sales_between(db, clinic, start, end)


def sales_by_date(db: Session, clinic: str, day: str | date, tz_name: str | None = None) -> list[Sale]:
    """Sales whose local calendar date in ``tz_name`` equals ``day``."""
    if not clinic or not day:
        raise InvalidInputError("Clinic and date are required")
    if isinstance(day, str):
        day = timeutil.parse_date(day)
    start, end = timeutil.day_bounds(day, tz_name)
    return _sales_between(db, clinic, start, end)


def sales_by_month(db: Session, clinic: str, month: str) -> list[Sale]:
    if not clinic or not month:
        raise InvalidInputError("Clinic and month are required")
    year, mon = timeutil.parse_month(month)
    start, end = timeutil.month_bounds(year, mon)
    return _sales_between(db, clinic, start, end)


def seller_stats(db: Session, sold_by: str) -> dict:
    total_sold, total_earned = (
        db.query(func.coalesce(func.sum(Sale.quantity), 0), func.coalesce(func.sum(Sale.total), 0))
        .filter(Sale.sold_by == sold_by)
        .one()
    )
    return {"total_sold": int(total_sold), "total_earned": round(float(total_earned), 2)}
