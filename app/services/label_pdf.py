from io import BytesIO

from reportlab.lib.pagesizes import A6
from reportlab.pdfgen import canvas

from app.config import settings
from app.models.order import Order
from app.models.shipment import Shipment


def render_label_pdf(order: Order, shipment: Shipment) -> bytes:
    """Printable A6 shipping label for the warehouse."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A6)
    width, height = A6
    x = 20
    y = height - 30

    c.setFont("Helvetica-Bold", 14)
    c.drawString(x, y, settings.STORE_NAME)
    y -= 18
    c.setFont("Helvetica", 9)
    c.drawString(x, y, f"{shipment.courier.upper()} - {shipment.service.upper()}")
    y -= 24

    c.setFont("Helvetica-Bold", 12)
    c.drawString(x, y, f"Resi: {shipment.resi or '-'}")
    y -= 22

    c.setFont("Helvetica-Bold", 10)
    c.drawString(x, y, "Penerima:")
    y -= 14
    c.setFont("Helvetica", 9)
    for line in (
        shipment.recipient_name,
        shipment.recipient_phone,
        shipment.address_detail,
        f"{shipment.area_name} {shipment.postal_code}",
    ):
        c.drawString(x, y, line[:60])
        y -= 12

    y -= 10
    c.setFont("Helvetica-Bold", 10)
    c.drawString(x, y, "Pengirim:")
    y -= 14
    c.setFont("Helvetica", 9)
    c.drawString(x, y, f"{settings.BITESHIP_SHIPPER_NAME} ({settings.BITESHIP_SHIPPER_PHONE})")
    y -= 12
    c.drawString(x, y, settings.BITESHIP_ORIGIN_ADDRESS[:60])
    y -= 22

    c.setFont("Helvetica-Bold", 10)
    c.drawString(x, y, f"Pesanan #{order.id}  Berat: {order.total_weight} g")
    y -= 14
    c.setFont("Helvetica", 8)
    for item in order.items:
        c.drawString(x, y, f"{item.quantity} x {item.product_name}"[:70])
        y -= 11

    c.showPage()
    c.save()
    return buffer.getvalue()
