# supergains/api/routers/dashboard.py
from typing import List, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from supergains.api.deps import rate_limit, require_admin
from supergains.api.errors import SERVICE_ERRORS, to_http
from supergains.data.database import get_db
from supergains.domain.schemas import DashboardSummary, SalesPeriod, TopProduct
from supergains.services.dashboard_service import DashboardService

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(rate_limit("admin")), Depends(require_admin)],
)


@router.get("/summary", response_model=DashboardSummary)
def summary(db: Session = Depends(get_db)):
    return DashboardService(db).summary()


@router.get("/top-products", response_model=List[TopProduct])
def top_products(limit: int = Query(5, ge=1, le=50), db: Session = Depends(get_db)):
    return DashboardService(db).top_products(limit)


@router.get("/sales", response_model=List[SalesPeriod])
def sales(group_by: Literal["day", "month"] = "day", db: Session = Depends(get_db)):
    try:
        return DashboardService(db).sales_by_period(group_by)
    except SERVICE_ERRORS as e:
        raise to_http(e)
