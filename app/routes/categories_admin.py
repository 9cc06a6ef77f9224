from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from slugify import slugify
from sqlmodel import Session, func, select

from app.database import get_session
from app.models.base import LifecycleState
from app.models.category import Category
from app.models.product import Product
from app.models.user import User
from app.schemas.category_schemas import CategoryCreate, CategoryResponse, CategoryUpdate
from app.utils.token import get_current_admin

router = APIRouter()


def _get_category(session: Session, category_id: int) -> Category:
    category = session.get(Category, category_id)
    if not category or category.lifecycle != LifecycleState.ACTIVE:
        raise HTTPException(404, "Kategori tidak ditemukan")
    return category


def _slug_taken(session: Session, slug: str, exclude_id: int | None = None) -> bool:
    query = select(Category.id).where(Category.slug == slug)
    if exclude_id:
        query = query.where(Category.id != exclude_id)
    return session.exec(query).first() is not None


@router.get("/")
def list_categories_admin(
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    rows = session.exec(
        select(Category, func.count(Product.id))
        .join(
            Product,
            (Product.category_id == Category.id) & (Product.lifecycle == LifecycleState.ACTIVE),
            isouter=True,
        )
        .where(Category.lifecycle == LifecycleState.ACTIVE)
        .group_by(Category.id)
        .order_by(Category.id.asc())
    ).all()
    return [
        {**CategoryResponse.model_validate(c).model_dump(), "product_count": count}
        for c, count in rows
    ]


@router.post("/", response_model=CategoryResponse, status_code=201)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    slug = slugify(payload.name)
    if _slug_taken(session, slug):
        raise HTTPException(400, "Kategori dengan nama serupa sudah ada")

    category = Category(name=payload.name.strip(), slug=slug, image=payload.image)
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    category = _get_category(session, category_id)

    if payload.name:
        slug = slugify(payload.name)
        if _slug_taken(session, slug, exclude_id=category.id):
            raise HTTPException(400, "Kategori dengan nama serupa sudah ada")
        category.name = payload.name.strip()
        category.slug = slug
    if payload.image is not None:
        category.image = payload.image or None

    category.updated_at = datetime.utcnow()
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    category = _get_category(session, category_id)

    active_products = session.exec(
        select(func.count(Product.id))
        .where(Product.category_id == category.id)
        .where(Product.lifecycle == LifecycleState.ACTIVE)
    ).one()
    if active_products:
        raise HTTPException(400, "Tidak dapat menghapus kategori yang memiliki produk")

    category.lifecycle = LifecycleState.DELETED
    category.updated_at = datetime.utcnow()
    session.add(category)
    session.commit()
    return {"message": "Kategori berhasil dihapus"}
