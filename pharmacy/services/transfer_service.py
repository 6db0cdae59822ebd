import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from pharmacy.database import atomic
from pharmacy.exceptions import InsufficientStockError, InvalidInputError, NotFoundError
from pharmacy.models.medicine import Medicine
from pharmacy.models.transfer import TransferRecord
from pharmacy.schemas.transfer import TransferCreate, TransferRecordUpdate
from pharmacy.services import stock_service, timeutil
from pharmacy.services.directory_service import normalize_clinic

logger = logging.getLogger(__name__)


def _validate(data: TransferCreate) -> tuple[str, str]:
    from_clinic = normalize_clinic(data.from_clinic)
    to_clinic = normalize_clinic(data.to_clinic)
    if not from_clinic or not to_clinic or not data.medicine_id or not data.medicine_name or data.quantity <= 0:
        raise InvalidInputError("Invalid transfer data")
    if from_clinic == to_clinic:
        raise InvalidInputError("Cannot transfer to the same clinic")
    return from_clinic, to_clinic


def transfer(db: Session, data: TransferCreate) -> TransferRecord:
    """Move stock of one medicine from one clinic to another.

    Source decrement, destination increment (or creation) and the history row
    are one transaction; any failure leaves both clinics untouched.
    """
    from_clinic, to_clinic = _validate(data)

    try:
        with atomic(db):
            source = (
                db.query(Medicine)
                .filter(Medicine.id == data.medicine_id, Medicine.clinic == from_clinic)
                .with_for_update()
                .first()
            )
            if not source:
                raise NotFoundError("Source medicine not found")
            if source.quantity < data.quantity:
                raise InsufficientStockError(
                    f"Not enough quantity in source clinic. Available: {source.quantity}, requested: {data.quantity}",
                    available=source.quantity,
                    requested=data.quantity,
                )
            source = stock_service.adjust(db, source.id, -data.quantity)

            dest = (
                db.query(Medicine)
                .filter(Medicine.name == data.medicine_name, Medicine.clinic == to_clinic)
                .with_for_update()
                .first()
            )
            if dest:
                stock_service.adjust(db, dest.id, data.quantity)
            else:
                dest = Medicine(
                    name=source.name,
                    description=source.description,
                    quantity=data.quantity,
                    purchase_price=source.purchase_price,
                    clinic=to_clinic,
                    expiry_date=source.expiry_date,
                )
                db.add(dest)

            record = TransferRecord(
                medicine_name=source.name,
                quantity=data.quantity,
                from_clinic=from_clinic,
                to_clinic=to_clinic,
                date=timeutil.utcnow(),
            )
            db.add(record)
    except (NotFoundError, InsufficientStockError) as e:
        logger.warning("Transfer %s -> %s of %s rejected: %s", from_clinic, to_clinic, data.medicine_id, e)
        raise

    db.refresh(record)
    logger.info("Transferred %d x %s from %s to %s", record.quantity, record.medicine_name, from_clinic, to_clinic)
    return record


def transfer_history(db: Session, clinic: str | None) -> list[TransferRecord]:
    clinic = normalize_clinic(clinic)
    if not clinic:
        return []
    return (
        db.query(TransferRecord)
        .filter(or_(TransferRecord.from_clinic == clinic, TransferRecord.to_clinic == clinic))
        .order_by(TransferRecord.date.desc())
        .all()
    )


def get_transfer_record(db: Session, record_id: str) -> TransferRecord | None:
    return db.query(TransferRecord).filter(TransferRecord.id == record_id).first()


def update_transfer_record(db: Session, record_id: str, data: TransferRecordUpdate) -> TransferRecord:
    """Correct a history row. Stock is not replayed: history is an audit log."""
    record = get_transfer_record(db, record_id)
    if not record:
        raise NotFoundError("Transfer record not found")
    update_data = data.model_dump(exclude_unset=True)
    if any(v is None for v in update_data.values()):
        raise InvalidInputError("Transfer record fields cannot be empty")
    if "quantity" in update_data and update_data["quantity"] <= 0:
        raise InvalidInputError("Quantity must be positive")
    for key in ("from_clinic", "to_clinic"):
        if key in update_data:
            update_data[key] = normalize_clinic(update_data[key])
            if not update_data[key]:
                raise InvalidInputError("Transfer record fields cannot be empty")
    if "date" in update_data:
        update_data["date"] = timeutil.to_naive_utc(update_data["date"])
    for field, value in update_data.items():
        setattr(record, field, value)
    db.commit()
    db.refresh(record)
    return record


def delete_transfer_record(db: Session, record_id: str) -> None:
    record = get_transfer_record(db, record_id)
    if not record:
        raise NotFoundError("Transfer record not found")
    db.delete(record)
    db.commit()
