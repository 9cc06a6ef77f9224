from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from app.database import get_session
from app.models.base import LifecycleState
from app.models.category import Category
from app.schemas.category_schemas import CategoryResponse

router = APIRouter()


@router.get("/", response_model=list[CategoryResponse])
def list_categories(session: Session = Depends(get_session)):
    return session.exec(
        select(Category)
        .where(Category.lifecycle == LifecycleState.ACTIVE)
        .order_by(Category.id.asc())
    ).all()


@router.get("/{slug}", response_model=CategoryResponse)
def get_category(slug: str, session: Session = Depends(get_session)):
    category = session.exec(
        select(Category)
        .where(Category.slug == slug)
        .where(Category.lifecycle == LifecycleState.ACTIVE)
    ).first()
    if not category:
        raise HTTPException(404, "Kategori tidak ditemukan")
    return category
