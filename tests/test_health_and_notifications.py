from app.models.notifications import Notification, RecipientRole
from app.utils.template import rupiah
from tests.factories import auth_headers


def _notify(session, title, related_id=1):
    session.add(
        Notification(
            recipient_role=RecipientRole.admin,
            trigger_source="order_placed",
            related_id=related_id,
            title=title,
            content=f"Pesanan #{related_id}",
        )
    )
    session.commit()


def test_health(client):
    data = client.get("/health/check").json()

    assert data["database"] == "ok"
    assert data["integrations"]["midtrans"] == "configured"
    assert data["integrations"]["brevo"] == "missing"


def test_admin_feed_read_flow(client, session, gudang):
    headers = auth_headers(gudang)
    _notify(session, "Pesanan Baru", 1)
    _notify(session, "Pesanan Baru", 2)

    assert client.get("/admin/notifications/unread-count", headers=headers).json() == {"count": 2}

    first_id = client.get("/admin/notifications", headers=headers).json()["results"][0]["id"]
    client.post(f"/admin/notifications/{first_id}/read", headers=headers)
    assert client.get("/admin/notifications/unread-count", headers=headers).json() == {"count": 1}

    assert client.post("/admin/notifications/read-all", headers=headers).json() == {"updated": 1}
    assert client.post("/admin/notifications/999/read", headers=headers).status_code == 404


def test_feed_is_staff_only(client, customer):
    assert client.get("/admin/notifications", headers=auth_headers(customer)).status_code == 403


def test_rupiah_filter():
    assert rupiah(1520000) == "Rp1.520.000"
    assert rupiah(None) == "Rp0"
