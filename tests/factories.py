import hashlib
from decimal import Decimal

from app.constants.order_status import ActorRole
from app.exceptions import GatewayError, ShippingProviderError
from app.models.cart import CartItem
from app.models.category import Category
from app.models.product import Product
from app.models.user import User, UserRole
from app.schemas.checkout_schemas import CheckoutRequest
from app.services.actor import Actor
from app.services.midtrans_gateway import MidtransGateway
from app.utils.hash import hash_password
from app.utils.token import create_access_token

SERVER_KEY = "test-server-key"


class FakeGateway(MidtransGateway):
    """Real signature checks, no network."""

    def __init__(self, fail=False):
        super().__init__(server_key=SERVER_KEY, client_key="test-client-key")
        self.calls = []
        self.fail = fail

    def create_transaction(self, order_id, gross_amount, customer_details):
        self.calls.append(order_id)
        if self.fail:
            raise GatewayError()
        return {"token": f"snap-token-{order_id}-{len(self.calls)}", "redirect_url": "https://app.sandbox.midtrans.com"}


class FakeLogistics:
    def __init__(self, fail=False):
        self.created = []
        self.rate_requests = []
        self.fail = fail

    def search_areas(self, query):
        if len(query) < 3:
            return []
        return [{"id": "IDNP6", "name": f"{query}, Jakarta Selatan"}]

    def get_rates(self, origin_area_id, destination_area_id, items):
        self.rate_requests.append(items)
        return [
            {"company": "jne", "courier_service_code": "reg", "price": 20000},
            {"company": "sicepat", "courier_service_code": "reg", "price": 35000},
        ]

    def create_order(self, payload):
        self.created.append(payload)
        if self.fail:
            raise ShippingProviderError()
        n = len(self.created)
        return {"id": f"bs-{n}", "waybill_id": f"JNE{n:08d}", "price": 15000, "status": "confirmed"}

    def get_order_detail(self, biteship_order_id):
        return {
            "id": biteship_order_id,
            "status": "picking_up",
            "courier": {"company": "jne"},
            "origin": {},
            "destination": {},
            "history": [{"note": "Kurir menjemput paket", "status": "picking_up"}],
        }


def signature_for(order_id, status_code, gross_amount):
    raw = f"{order_id}{status_code}{gross_amount}{SERVER_KEY}"
    return hashlib.sha512(raw.encode("utf-8")).hexdigest()


def notification_payload(order_id, gross_amount, transaction_status="settlement", status_code="200", **extra):
    gross = f"{int(gross_amount)}.00"
    payload = {
        "order_id": str(order_id),
        "status_code": status_code,
        "gross_amount": gross,
        "signature_key": signature_for(order_id, status_code, gross),
        "transaction_status": transaction_status,
        "transaction_id": f"trx-{order_id}",
        "payment_type": "bank_transfer",
    }
    payload.update(extra)
    return payload


def make_user(session, email="budi@example.com", role=UserRole.CUSTOMER, name="Budi", password="rahasia123"):
    user = User(name=name, email=email, password=hash_password(password), role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_category(session, name="Gitar Akustik"):
    category = Category(name=name, slug=name.lower().replace(" ", "-"))
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


def make_product(session, category, name="Yamaha F310", price="1500000", stock=5, weight=2500):
    product = Product(
        name=name,
        slug=name.lower().replace(" ", "-"),
        price=Decimal(price),
        stock=stock,
        weight=weight,
        category_id=category.id,
    )
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def add_to_cart(session, user, product, quantity):
    session.add(CartItem(user_id=user.id, product_id=product.id, quantity=quantity))
    session.commit()


def checkout_request(shipping_cost="20000", **overrides):
    data = {
        "recipient_name": "Budi Santoso",
        "recipient_phone": "081234567890",
        "area_id": "IDNP6IDNC148IDND836IDZ12410",
        "area_name": "Kebayoran Baru, Jakarta Selatan",
        "postal_code": "12410",
        "address_detail": "Jl. Melawai No. 10",
        "courier": "JNE",
        "service": "reg",
        "shipping_cost": Decimal(shipping_cost),
    }
    data.update(overrides)
    return CheckoutRequest(**data)


def checkout_json(shipping_cost=20000, **overrides):
    data = checkout_request(str(shipping_cost), **overrides).model_dump()
    data["shipping_cost"] = str(data["shipping_cost"])
    return data


def actor_for(user):
    return Actor(user_id=user.id, role=ActorRole(user.role.value))


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'user_id': user.id})}"}
