from typing import Optional

from app.config import settings
from app.services.email_service import send_email
from app.utils.template import render_template


def email_customer(template: str, subject: str, user, order, **ctx) -> bool:
    html = render_template(template, user=user, order=order, store_name=settings.STORE_NAME, **ctx)
    return send_email(to=user.email, subject=subject, html=html)


def email_admin(subject: str, order, admin_title: Optional[str] = None, **ctx) -> bool:
    if not settings.ADMIN_EMAIL:
        return False
    html = render_template(
        "emails/admin_order_update.html",
        order=order,
        admin_title=admin_title or subject,
        store_name=settings.STORE_NAME,
        **ctx,
    )
    return send_email(to=settings.ADMIN_EMAIL, subject=subject, html=html)
