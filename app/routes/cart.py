from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, func, select

from app.database import get_session
from app.models.base import LifecycleState
from app.models.cart import CartItem
from app.models.product import Product
from app.models.user import User
from app.schemas.cart_schemas import CartAddRequest, CartUpdateRequest
from app.utils.token import get_current_user  # JWT dependency


router = APIRouter()


def _user_item(session: Session, user: User, item_id: int) -> CartItem:
    item = session.get(CartItem, item_id)
    if not item or item.user_id != user.id:
        raise HTTPException(404, "Item keranjang tidak ditemukan")
    return item


# View Cart

@router.get("/")
def get_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    cart_items = session.exec(
        select(CartItem)
        .where(CartItem.user_id == current_user.id)
        .order_by(CartItem.created_at)
    ).all()

    items_response = []
    subtotal = Decimal("0")
    total_weight = 0

    for item in cart_items:
        product = item.product
        # deleted products silently drop out of the cart
        if not product or not product.is_active:
            continue

        line_total = product.price * item.quantity
        subtotal += line_total
        total_weight += product.weight * item.quantity

        items_response.append({
            "item_id": item.id,
            "product_id": product.id,
            "name": product.name,
            "slug": product.slug,
            "image": product.image,
            "price": product.price,
            "weight": product.weight,
            "stock": product.stock,
            "quantity": item.quantity,
            "total": line_total,
        })

    return {
        "items": items_response,
        "summary": {
            "subtotal": subtotal,
            "total_weight": total_weight,
            "item_count": sum(i["quantity"] for i in items_response),
        },
    }


@router.get("/count")
def cart_count(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    count = session.exec(
        select(func.coalesce(func.sum(CartItem.quantity), 0))
        .join(Product, Product.id == CartItem.product_id)
        .where(CartItem.user_id == current_user.id)
        .where(Product.lifecycle == LifecycleState.ACTIVE)
    ).one()
    return {"count": int(count)}


# Add to Cart

@router.post("/add")
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    product = session.get(Product, data.product_id)
    if not product or not product.is_active:
        raise HTTPException(status_code=404, detail="Produk tidak ditemukan")

    existing_item = session.exec(
        select(CartItem).where(
            CartItem.user_id == current_user.id,
            CartItem.product_id == data.product_id
        )
    ).first()

    in_cart = existing_item.quantity if existing_item else 0
    if in_cart + data.quantity > product.stock:
        raise HTTPException(
            400,
            f"Stok tidak mencukupi. Tersedia {product.stock}, di keranjang {in_cart}",
        )

    if existing_item:
        existing_item.quantity += data.quantity
        session.add(existing_item)
        session.commit()
        session.refresh(existing_item)
        return {"message": "Keranjang diperbarui", "item_id": existing_item.id, "quantity": existing_item.quantity}

    new_item = CartItem(
        user_id=current_user.id,
        product_id=product.id,
        quantity=data.quantity,
    )
    session.add(new_item)
    session.commit()
    session.refresh(new_item)

    return {"message": "Ditambahkan ke keranjang", "item_id": new_item.id, "quantity": new_item.quantity}


# Update Cart
@router.put("/update/{item_id}")
def update_cart_item(
    item_id: int,
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    item = _user_item(session, current_user, item_id)

    if data.quantity < 1:
        session.delete(item)
        session.commit()
        return {"message": "Item dihapus"}

    if not item.product or data.quantity > item.product.stock:
        raise HTTPException(400, "Stok tidak mencukupi")

    item.quantity = data.quantity
    session.add(item)
    session.commit()
    return {"message": "Keranjang diperbarui", "item_id": item.id, "quantity": item.quantity}


@router.delete("/remove/{item_id}")
def remove_cart_item(
    item_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    item = _user_item(session, current_user, item_id)
    session.delete(item)
    session.commit()
    return {"message": "Item dihapus"}


@router.delete("/clear")
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    items = session.exec(select(CartItem).where(CartItem.user_id == current_user.id)).all()
    for item in items:
        session.delete(item)
    session.commit()
    return {"message": "Keranjang dikosongkan"}
