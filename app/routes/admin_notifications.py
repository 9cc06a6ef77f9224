from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.database import get_session
from app.models.user import User
from app.services import notification_service
from app.utils.pagination import paginate
from app.utils.token import get_current_staff

router = APIRouter()


@router.get("")
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = False,
    trigger_source: Optional[str] = None,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_staff),
):
    query = notification_service.admin_feed_query(unread_only, trigger_source)
    return paginate(session=session, query=query, page=page, limit=limit)


@router.get("/unread-count")
def unread_count(
    session: Session = Depends(get_session),
    _: User = Depends(get_current_staff),
):
    return {"count": notification_service.unread_admin_count(session)}


@router.post("/{notification_id}/read")
def mark_read(
    notification_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_staff),
):
    notification_service.mark_admin_read(session, notification_id)
    return {"message": "OK"}


@router.post("/read-all")
def mark_all_read(
    session: Session = Depends(get_session),
    _: User = Depends(get_current_staff),
):
    return {"updated": notification_service.mark_all_admin_read(session)}
