from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pharmacy.api.auth import get_current_user, require_admin
from pharmacy.database import get_db
from pharmacy.models.user import User
from pharmacy.schemas.medicine import InventoryAdjust, MedicineCreate, MedicineOut, MedicineUpdate
from pharmacy.services import directory_service, stock_service

router = APIRouter(prefix="/medicines", tags=["Medicines"])


@router.get("", response_model=list[MedicineOut])
def list_medicines(clinic: str | None = None, search: str | None = None, db: Session = Depends(get_db)):
    return stock_service.list_medicines(db, clinic=clinic, search=search)


@router.post("", response_model=MedicineOut, status_code=201)
def create_medicine(data: MedicineCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return stock_service.create_medicine(db, data)


@router.get("/clinics", response_model=list[str])
def list_clinics(db: Session = Depends(get_db)):
    return directory_service.list_clinics(db)


@router.get("/{medicine_id}", response_model=MedicineOut)
def get_medicine(medicine_id: str, db: Session = Depends(get_db)):
    medicine = stock_service.get_medicine(db, medicine_id)
    if not medicine:
        raise HTTPException(404, "Medicine not found")
    return medicine


@router.put("/{medicine_id}", response_model=MedicineOut)
def update_medicine(
    medicine_id: str, data: MedicineUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    return stock_service.update_medicine(db, medicine_id, data)


@router.delete("/{medicine_id}")
def delete_medicine(medicine_id: str, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    stock_service.delete_medicine(db, medicine_id)
    return {"message": "Medicine deleted"}


@router.post("/{medicine_id}/inventory", response_model=MedicineOut)
def adjust_inventory(
    medicine_id: str, data: InventoryAdjust, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    return stock_service.adjust_inventory(db, medicine_id, data.quantity)
