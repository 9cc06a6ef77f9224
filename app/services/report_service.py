import io
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from sqlmodel import Session, func, select

from app.constants.order_status import OrderStatus
from app.models.base import LifecycleState
from app.models.order import Order
from app.models.order_item import OrderItem
from app.models.product import Product
from app.models.user import User, UserRole
from app.utils.pagination import paginate

# orders whose money has been captured
PAID_STATUSES = (
    OrderStatus.DIBAYAR,
    OrderStatus.DIKEMAS,
    OrderStatus.DIKIRIM,
    OrderStatus.SELESAI,
)

LOW_STOCK_THRESHOLD = 5


def _completed_filter(query, start_date: Optional[date], end_date: Optional[date]):
    query = query.where(Order.status == OrderStatus.SELESAI)
    if start_date:
        query = query.where(Order.created_at >= datetime.combine(start_date, time.min))
    if end_date:
        # end date is inclusive
        query = query.where(Order.created_at <= datetime.combine(end_date, time.max))
    return query


def dashboard_stats(session: Session) -> dict:
    revenue = session.exec(
        select(func.sum(Order.total_amount)).where(Order.status.in_(PAID_STATUSES))
    ).one()
    paid_orders = session.exec(
        select(func.count(Order.id)).where(Order.status.in_(PAID_STATUSES))
    ).one()
    pending_orders = session.exec(
        select(func.count(Order.id)).where(Order.status == OrderStatus.PENDING)
    ).one()
    to_ship = session.exec(
        select(func.count(Order.id)).where(
            Order.status.in_((OrderStatus.DIBAYAR, OrderStatus.DIKEMAS))
        )
    ).one()
    products = session.exec(
        select(func.count(Product.id)).where(Product.lifecycle == LifecycleState.ACTIVE)
    ).one()
    low_stock = session.exec(
        select(func.count(Product.id))
        .where(Product.lifecycle == LifecycleState.ACTIVE)
        .where(Product.stock <= LOW_STOCK_THRESHOLD)
    ).one()
    customers = session.exec(
        select(func.count(User.id))
        .where(User.role == UserRole.CUSTOMER)
        .where(User.lifecycle == LifecycleState.ACTIVE)
    ).one()

    return {
        "revenue": revenue or Decimal("0"),
        "paid_orders": paid_orders or 0,
        "pending_orders": pending_orders or 0,
        "orders_to_ship": to_ship or 0,
        "active_products": products or 0,
        "low_stock_products": low_stock or 0,
        "customers": customers or 0,
    }


def top_products(session: Session, start_date: Optional[date] = None, end_date: Optional[date] = None, limit: int = 5):
    query = (
        select(
            OrderItem.product_id,
            OrderItem.product_name,
            func.sum(OrderItem.quantity).label("sold"),
        )
        .join(Order, Order.id == OrderItem.order_id)
        .group_by(OrderItem.product_id, OrderItem.product_name)
        .order_by(func.sum(OrderItem.quantity).desc())
        .limit(limit)
    )
    rows = session.exec(_completed_filter(query, start_date, end_date)).all()
    return [
        {"product_id": pid, "product_name": name, "total_sold": int(sold or 0)}
        for pid, name, sold in rows
    ]


def sales_report(
    session: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    orders_query = _completed_filter(select(Order), start_date, end_date).order_by(Order.created_at.desc())
    page_data = paginate(session=session, query=orders_query, page=page, limit=limit)

    count, revenue, shipping = session.exec(
        _completed_filter(
            select(
                func.count(Order.id),
                func.sum(Order.total_amount),
                func.sum(Order.shipping_cost),
            ),
            start_date,
            end_date,
        )
    ).one()

    return {
        "orders": [
            {
                "id": o.id,
                "customer": o.user.name if o.user else None,
                "email": o.user.email if o.user else None,
                "items": sum(i.quantity for i in o.items),
                "subtotal": o.subtotal,
                "shipping_cost": o.shipping_cost,
                "total_amount": o.total_amount,
                "created_at": o.created_at,
            }
            for o in page_data["results"]
        ],
        "pagination": {
            "page": page_data["current_page"],
            "limit": page_data["limit"],
            "total": page_data["total_items"],
            "total_pages": page_data["total_pages"],
        },
        "summary": {
            "total_orders": count or 0,
            "total_revenue": revenue or Decimal("0"),
            "total_shipping": shipping or Decimal("0"),
        },
        "top_products": top_products(session, start_date, end_date),
    }


def export_sales_report(session: Session, start_date: Optional[date] = None, end_date: Optional[date] = None) -> io.BytesIO:
    orders = session.exec(
        _completed_filter(select(Order), start_date, end_date).order_by(Order.created_at.desc())
    ).all()

    wb = Workbook()
    thin = Border(
        left=Side(style="thin"),
        right=Side(style="thin"),
        top=Side(style="thin"),
        bottom=Side(style="thin"),
    )
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill("solid", fgColor="18181B")
    center = Alignment(horizontal="center")
    currency = '"Rp"#,##0'

    # =========================
    # Sheet 1: orders
    # =========================
    ws = wb.active
    ws.title = "Penjualan"
    ws.append(["No. Pesanan", "Tanggal", "Pelanggan", "Email", "Jumlah Item", "Subtotal", "Ongkir", "Total"])
    for cell in ws[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.border = thin
        cell.alignment = center

    for o in orders:
        ws.append([
            o.id,
            o.created_at.strftime("%Y-%m-%d %H:%M"),
            o.user.name if o.user else "-",
            o.user.email if o.user else "-",
            sum(i.quantity for i in o.items),
            float(o.subtotal),
            float(o.shipping_cost),
            float(o.total_amount),
        ])

    for row in ws.iter_rows(min_row=2, min_col=6, max_col=8):
        for cell in row:
            cell.number_format = currency

    total_row = ws.max_row + 2
    ws.cell(row=total_row, column=7, value="Total").font = Font(bold=True)
    total_cell = ws.cell(row=total_row, column=8, value=float(sum(o.total_amount for o in orders)))
    total_cell.font = Font(bold=True)
    total_cell.number_format = currency

    for column, width in zip("ABCDEFGH", (12, 18, 24, 30, 12, 16, 14, 16)):
        ws.column_dimensions[column].width = width

    # =========================
    # Sheet 2: top products
    # =========================
    ws2 = wb.create_sheet("Produk Terlaris")
    ws2.append(["Produk", "Terjual"])
    for cell in ws2[1]:
        cell.font = header_font
        cell.fill = header_fill
        cell.border = thin
        cell.alignment = center
    for product in top_products(session, start_date, end_date):
        ws2.append([product["product_name"], product["total_sold"]])
    ws2.column_dimensions["A"].width = 40

    stream = io.BytesIO()
    wb.save(stream)
    stream.seek(0)
    return stream
