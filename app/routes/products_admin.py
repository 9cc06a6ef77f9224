from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from slugify import slugify
from sqlmodel import Session, select

from app.database import get_session
from app.models.base import LifecycleState
from app.models.category import Category
from app.models.product import Product
from app.models.user import User
from app.routes.products_public import _serialize
from app.schemas.product_schemas import ProductCreate, ProductUpdate
from app.utils.pagination import paginate
from app.utils.token import get_current_admin
from app.utils.uploads import save_image

router = APIRouter()


def unique_product_slug(session: Session, name: str, exclude_id: Optional[int] = None) -> str:
    base = slugify(name)
    slug = base
    suffix = 2
    while True:
        query = select(Product.id).where(Product.slug == slug)
        if exclude_id:
            query = query.where(Product.id != exclude_id)
        if not session.exec(query).first():
            return slug
        slug = f"{base}-{suffix}"
        suffix += 1


def _get_product(session: Session, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if not product or not product.is_active:
        raise HTTPException(404, "Produk tidak ditemukan")
    return product


def _check_category(session: Session, category_id: int):
    category = session.get(Category, category_id)
    if not category or category.lifecycle != LifecycleState.ACTIVE:
        raise HTTPException(400, "Kategori tidak ditemukan")


@router.get("/")
def list_products_admin(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    query = select(Product).where(Product.lifecycle == LifecycleState.ACTIVE)
    if search:
        query = query.where(Product.name.ilike(f"%{search}%"))
    if category_id:
        query = query.where(Product.category_id == category_id)

    data = paginate(
        session=session,
        query=query.order_by(Product.created_at.desc()),
        page=page,
        limit=limit,
    )
    data["results"] = [_serialize(p) for p in data["results"]]
    return data


@router.post("/", status_code=201)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    _check_category(session, payload.category_id)

    product = Product(
        **payload.model_dump(),
        slug=unique_product_slug(session, payload.name),
    )
    session.add(product)
    session.commit()
    session.refresh(product)
    return _serialize(product)


@router.put("/{product_id}")
def update_product(
    product_id: int,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    product = _get_product(session, product_id)
    data = payload.model_dump(exclude_unset=True)

    if "category_id" in data:
        _check_category(session, data["category_id"])
    if data.get("name") and data["name"] != product.name:
        product.slug = unique_product_slug(session, data["name"], exclude_id=product.id)

    for key, value in data.items():
        setattr(product, key, value)

    product.updated_at = datetime.utcnow()
    session.add(product)
    session.commit()
    session.refresh(product)
    return _serialize(product)


@router.post("/{product_id}/image")
def upload_product_image(
    product_id: int,
    image: UploadFile = File(...),
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    product = _get_product(session, product_id)
    product.image = save_image(image, "products")
    product.updated_at = datetime.utcnow()
    session.add(product)
    session.commit()
    return {"image": product.image}


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
    _: User = Depends(get_current_admin),
):
    product = _get_product(session, product_id)
    # order items keep their captured name and price
    product.lifecycle = LifecycleState.DELETED
    product.updated_at = datetime.utcnow()
    session.add(product)
    session.commit()
    return {"message": "Produk berhasil dihapus"}
