from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmacy.api.auth import get_current_user
from pharmacy.database import get_db
from pharmacy.models.user import User
from pharmacy.schemas.analytics import AnalyticsOut
from pharmacy.schemas.sale import SaleCreate, SaleOut, SaleUpdate, SellerStats
from pharmacy.services import analytics_service, sale_service

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.post("", response_model=SaleOut, status_code=201)
def record_sale(data: SaleCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not data.sold_by:
        data.sold_by = user.email
        data.sold_by_name = data.sold_by_name or user.name
    return sale_service.record_sale(db, data)


@router.get("/today", response_model=list[SaleOut])
def sales_today(clinic: str, db: Session = Depends(get_db)):
    return sale_service.sales_today(db, clinic)


@router.get("/stats", response_model=SellerStats)
def seller_stats(sold_by: str, db: Session = Depends(get_db)):
    return sale_service.seller_stats(db, sold_by)


@router.get("/by-date", response_model=list[SaleOut])
def sales_by_date(
    clinic: str = "",
    day: str = Query("", alias="date"),
    timezone: str | None = None,
    db: Session = Depends(get_db),
):
    return sale_service.sales_by_date(db, clinic, day, timezone)


@router.get("/by-month", response_model=list[SaleOut])
def sales_by_month(clinic: str = "", month: str = "", db: Session = Depends(get_db)):
    return sale_service.sales_by_month(db, clinic, month)


@router.get("/analytics", response_model=AnalyticsOut)
def analytics(
    clinic: str = "",
    start: date | None = Query(None, alias="from"),
    end: date | None = Query(None, alias="to"),
    db: Session = Depends(get_db),
):
    return analytics_service.analytics(db, clinic, start, end)


@router.get("/monthly-analytics", response_model=AnalyticsOut)
def monthly_analytics(clinic: str = "", month: str = "", db: Session = Depends(get_db)):
    return analytics_service.monthly_analytics(db, clinic, month)


@router.put("/{sale_id}", response_model=SaleOut)
def edit_sale(sale_id: str, data: SaleUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return sale_service.edit_sale(db, sale_id, data)


@router.delete("/{sale_id}")
def delete_sale(sale_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    sale_service.delete_sale(db, sale_id)
    return {"message": "Sale deleted"}
