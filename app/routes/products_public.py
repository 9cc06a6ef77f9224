from enum import Enum
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, func, select

from app.database import get_session
from app.models.base import LifecycleState
from app.models.category import Category
from app.models.order_item import OrderItem
from app.models.product import Product
from app.utils.pagination import paginate

router = APIRouter()


class SortOption(str, Enum):
    newest = "newest"
    price_asc = "price-asc"
    price_desc = "price-desc"
    name_asc = "name-asc"


SORT_COLUMNS = {
    SortOption.newest: Product.created_at.desc(),
    SortOption.price_asc: Product.price.asc(),
    SortOption.price_desc: Product.price.desc(),
    SortOption.name_asc: Product.name.asc(),
}


def _serialize(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "price": product.price,
        "weight": product.weight,
        "stock": product.stock,
        "in_stock": product.in_stock,
        "image": product.image,
        "category": {
            "id": product.category.id,
            "name": product.category.name,
            "slug": product.category.slug,
        } if product.category else None,
    }


def _active_products():
    return select(Product).where(Product.lifecycle == LifecycleState.ACTIVE)


@router.get("/")
def list_products(
    page: int = 1,
    limit: int = 12,
    category_id: Optional[int] = None,
    sort: SortOption = SortOption.newest,
    search: Optional[str] = None,
    session: Session = Depends(get_session),
):
    query = _active_products().where(Product.stock > 0)
    if category_id:
        query = query.where(Product.category_id == category_id)
    if search and search.strip():
        query = query.where(Product.name.ilike(f"%{search.strip()}%"))

    data = paginate(
        session=session,
        query=query.order_by(SORT_COLUMNS[sort]),
        page=page,
        limit=limit,
    )
    data["results"] = [_serialize(p) for p in data["results"]]
    return data


@router.get("/landing")
def landing_data(session: Session = Depends(get_session)):
    # popular categories ranked by how many units were ordered from them
    popular = session.exec(
        select(Category, func.coalesce(func.sum(OrderItem.quantity), 0).label("ordered"))
        .join(Product, Product.category_id == Category.id)
        .join(OrderItem, OrderItem.product_id == Product.id, isouter=True)
        .where(Category.lifecycle == LifecycleState.ACTIVE)
        .group_by(Category.id)
        .order_by(func.coalesce(func.sum(OrderItem.quantity), 0).desc(), Category.id.asc())
        .limit(3)
    ).all()

    featured = session.exec(
        _active_products()
        .where(Product.stock > 0)
        .order_by(Product.price.desc())
        .limit(4)
    ).all()

    return {
        "popular_categories": [
            {"id": c.id, "name": c.name, "slug": c.slug, "image": c.image, "ordered": int(ordered)}
            for c, ordered in popular
        ],
        "featured_products": [_serialize(p) for p in featured],
    }


@router.get("/{slug}")
def get_product_by_slug(slug: str, session: Session = Depends(get_session)):
    product = session.exec(_active_products().where(Product.slug == slug)).first()
    if not product:
        raise HTTPException(404, "Produk tidak ditemukan")
    return _serialize(product)


@router.get("/{slug}/related")
def related_products(
    slug: str,
    limit: int = Query(4, ge=1, le=12),
    session: Session = Depends(get_session),
):
    product = session.exec(_active_products().where(Product.slug == slug)).first()
    if not product:
        raise HTTPException(404, "Produk tidak ditemukan")

    related = session.exec(
        _active_products()
        .where(Product.category_id == product.category_id)
        .where(Product.id != product.id)
        .where(Product.stock > 0)
        .order_by(Product.created_at.desc())
        .limit(limit)
    ).all()
    return [_serialize(p) for p in related]
