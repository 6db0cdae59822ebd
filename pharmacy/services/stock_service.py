import logging

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from pharmacy.database import atomic
from pharmacy.exceptions import InsufficientStockError, InvalidInputError, NotFoundError
from pharmacy.models.medicine import Medicine
from pharmacy.schemas.medicine import MedicineCreate, MedicineUpdate

logger = logging.getLogger(__name__)


def adjust(db: Session, medicine_id: str, delta: int) -> Medicine:
    """Apply ``delta`` to a medicine's quantity as one conditional UPDATE.

    The non-negativity check and the write happen in the same statement, so
    concurrent sellers cannot both pass the check on a stale read. Does not
    commit: the caller owns the transaction.
    """
    stmt = (
        update(Medicine)
        .where(Medicine.id == medicine_id)
        .values(quantity=Medicine.quantity + delta, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    if delta < 0:
        stmt = stmt.where(Medicine.quantity + delta >= 0)

    result = db.execute(stmt)
    if result.rowcount == 0:
        medicine = db.get(Medicine, medicine_id, populate_existing=True)
        if not medicine:
            raise NotFoundError("Medicine not found")
        raise InsufficientStockError(
            f"Not enough stock. Current: {medicine.quantity}, requested change: {delta}",
            available=medicine.quantity,
            requested=-delta,
        )
    return db.get(Medicine, medicine_id, populate_existing=True)


def create_medicine(db: Session, data: MedicineCreate) -> Medicine:
    medicine = Medicine(
        name=data.name.strip(),
        description=data.description,
        quantity=data.quantity,
        purchase_price=data.purchase_price,
        clinic=data.clinic.strip(),
        expiry_date=data.expiry_date,
    )
    db.add(medicine)
    db.commit()
    db.refresh(medicine)
    logger.info("Medicine %s added to %s with %d units", medicine.name, medicine.clinic, medicine.quantity)
    return medicine


def get_medicine(db: Session, medicine_id: str) -> Medicine | None:
    return db.query(Medicine).filter(Medicine.id == medicine_id).first()


def list_medicines(db: Session, clinic: str | None = None, search: str | None = None) -> list[Medicine]:
    q = db.query(Medicine)
    if clinic:
        q = q.filter(Medicine.clinic == clinic)
    if search:
        q = q.filter(Medicine.name.ilike(f"%{search}%"))
    return q.order_by(Medicine.name).all()


def update_medicine(db: Session, medicine_id: str, data: MedicineUpdate) -> Medicine:
    medicine = get_medicine(db, medicine_id)
    if not medicine:
        raise NotFoundError("Medicine not found")
    update_data = data.model_dump(exclude_unset=True)
    for field in ("name", "clinic", "quantity", "purchase_price"):
        if field in update_data and update_data[field] is None:
            raise InvalidInputError(f"{field} cannot be empty")
    if "description" in update_data and update_data["description"] is None:
        update_data["description"] = ""
    for field, value in update_data.items():
        setattr(medicine, field, value)
    db.commit()
    db.refresh(medicine)
    return medicine


def delete_medicine(db: Session, medicine_id: str) -> None:
    medicine = get_medicine(db, medicine_id)
    if not medicine:
        raise NotFoundError("Medicine not found")
    db.delete(medicine)
    db.commit()
    logger.info("Medicine %s deleted from %s", medicine.name, medicine.clinic)


def adjust_inventory(db: Session, medicine_id: str, delta: int) -> Medicine:
    with atomic(db):
        medicine = adjust(db, medicine_id, delta)
    db.refresh(medicine)
    logger.info("Stock of %s at %s adjusted by %+d to %d", medicine.name, medicine.clinic, delta, medicine.quantity)
    return medicine
