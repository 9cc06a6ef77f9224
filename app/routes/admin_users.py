from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlmodel import Session, select

from app.database import get_session
from app.models.base import LifecycleState
from app.models.user import User, UserRole
from app.schemas.user_schemas import AdminUserCreate, AdminUserUpdate, UserOut
from app.utils.hash import hash_password
from app.utils.pagination import paginate
from app.utils.token import get_current_admin

router = APIRouter()


def _get_active_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(404, "Pengguna tidak ditemukan")
    return user


def _email_taken(session: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    # the unique index also covers soft-deleted rows
    query = select(User).where(User.email == email)
    if exclude_id:
        query = query.where(User.id != exclude_id)
    return session.exec(query).first() is not None


@router.get("/")
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    query = select(User).where(User.lifecycle == LifecycleState.ACTIVE)
    if search:
        term = f"%{search}%"
        query = query.where(or_(User.name.ilike(term), User.email.ilike(term)))
    if role:
        query = query.where(User.role == role)

    data = paginate(
        session=session,
        query=query.order_by(User.created_at.desc()),
        page=page,
        limit=limit,
    )
    data["results"] = [UserOut.model_validate(u) for u in data["results"]]
    return data


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    return _get_active_user(session, user_id)


@router.post("/", response_model=UserOut, status_code=201)
def create_user(
    payload: AdminUserCreate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    if _email_taken(session, payload.email):
        raise HTTPException(400, "Email sudah digunakan")

    user = User(
        name=payload.name.strip(),
        email=payload.email,
        password=hash_password(payload.password),
        role=payload.role,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    payload: AdminUserUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    user = _get_active_user(session, user_id)

    if payload.email and payload.email.lower() != user.email:
        if _email_taken(session, payload.email.lower(), exclude_id=user.id):
            raise HTTPException(400, "Email sudah digunakan oleh pengguna lain")
        user.email = payload.email.lower()
    if payload.name:
        user.name = payload.name.strip()
    if payload.role:
        user.role = payload.role
    if payload.password:
        user.password = hash_password(payload.password)

    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    if user_id == current_admin.id:
        raise HTTPException(400, "Tidak dapat menghapus akun sendiri")

    user = _get_active_user(session, user_id)
    user.lifecycle = LifecycleState.DELETED
    user.updated_at = datetime.utcnow()
    session.add(user)
    session.commit()
    return {"message": "Pengguna berhasil dihapus"}
