from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pharmacy.api.auth import get_current_user, require_admin
from pharmacy.database import get_db
from pharmacy.models.user import User
from pharmacy.schemas.transfer import TransferCreate, TransferRecordOut, TransferRecordUpdate
from pharmacy.services import transfer_service

router = APIRouter(prefix="/transfers", tags=["Transfers"])


@router.post("", response_model=TransferRecordOut)
def transfer(data: TransferCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return transfer_service.transfer(db, data)


@router.get("/history", response_model=list[TransferRecordOut])
def transfer_history(clinic: str | None = None, db: Session = Depends(get_db)):
    return transfer_service.transfer_history(db, clinic)


@router.put("/history/{record_id}", response_model=TransferRecordOut)
def update_transfer_record(
    record_id: str, data: TransferRecordUpdate, user: User = Depends(require_admin), db: Session = Depends(get_db)
):
    return transfer_service.update_transfer_record(db, record_id, data)


@router.delete("/history/{record_id}")
def delete_transfer_record(record_id: str, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    transfer_service.delete_transfer_record(db, record_id)
    return {"message": "Transfer record deleted"}
