from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlmodel import Session

from app.database import get_session
from app.models.user import User
from app.services import report_service
from app.utils.token import get_current_admin

router = APIRouter()


@router.get("/stats")
def dashboard_stats(
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    return report_service.dashboard_stats(session)


@router.get("/sales")
def sales_report(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    return report_service.sales_report(session, start_date, end_date, page, limit)


@router.get("/sales/export")
def export_sales(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    stream = report_service.export_sales_report(session, start_date, end_date)
    filename = f"laporan_penjualan_{datetime.utcnow().strftime('%Y%m%d')}.xlsx"
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
