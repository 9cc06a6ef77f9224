from app.models.user import User
from app.models.category import Category
from app.models.product import Product
from app.models.cart import CartItem
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.shipment import Shipment
from app.models.payment import Payment
from app.models.order_event import OrderEvent
from app.models.notifications import Notification
from app.models.password_reset import PasswordReset

# add ALL models here
