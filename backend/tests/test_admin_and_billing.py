"""Admin dashboard and billing links."""
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlsplit

from models import User
from services.billing_service import build_checkout_url, build_customer_portal_url, get_billing_info

CHECKOUT = "https://docuhaul.lemonsqueezy.com/buy/abc-123"
PORTAL = "https://docuhaul.lemonsqueezy.com/billing"


def _user(**claims):
    return User(email="driver@example.com", password_hash="x", claims=claims)


class TestBilling:

    def test_checkout_url_carries_user_id_and_email(self, monkeypatch):
        monkeypatch.setenv("LEMON_SQUEEZY_SUBSCRIPTION_URL", CHECKOUT)
        user = _user()

        url = build_checkout_url(user)

        assert url.startswith(CHECKOUT + "?checkout_data[custom][user_id]=")
        query = parse_qs(urlsplit(url).query)
        assert query["checkout_data[custom][user_id]"] == [user.user_id]
        assert query["checkout_data[email]"] == ["driver@example.com"]

    def test_unconfigured_links_are_none(self, monkeypatch):
        monkeypatch.delenv("LEMON_SQUEEZY_SUBSCRIPTION_URL", raising=False)
        monkeypatch.delenv("LEMON_SQUEEZY_CUSTOMER_PORTAL_URL", raising=False)
        assert build_checkout_url(_user()) is None
        assert build_customer_portal_url(_user()) is None

    def test_premium_users_get_portal_not_checkout(self, monkeypatch):
        monkeypatch.setenv("LEMON_SQUEEZY_SUBSCRIPTION_URL", CHECKOUT)
        monkeypatch.setenv("LEMON_SQUEEZY_CUSTOMER_PORTAL_URL", PORTAL)

        info = get_billing_info(_user(premium=True))

        assert info.plan == "premium"
        assert info.checkout_url is None
        assert info.customer_portal_url == PORTAL + "?email=driver%40example.com"

    def test_billing_route(self, client, make_user, monkeypatch):
        monkeypatch.setenv("LEMON_SQUEEZY_SUBSCRIPTION_URL", CHECKOUT)
        _, headers = make_user()
        body = client.get("/api/billing", headers=headers).json()
        assert body["plan"] == "free"
        assert body["checkout_url"].startswith(CHECKOUT)


class TestAdmin:

    def test_list_users_newest_first_without_password_hash(self, client, memory_db, make_user):
        _, admin_headers = make_user(email="admin@example.com", admin=True)
        newer, _ = make_user(
            email="newer@example.com",
            premium=True,
            created_at=datetime.now(timezone.utc) + timedelta(seconds=5),
        )

        response = client.get("/api/admin/users", headers=admin_headers)

        assert response.status_code == 200
        users = response.json()
        assert users[0]["uid"] == newer.user_id
        assert users[0]["is_premium"] is True
        assert users[1]["is_admin"] is True
        assert all("password_hash" not in u for u in users)

    def test_stats(self, client, memory_db, make_user):
        _, admin_headers = make_user(email="admin@example.com", admin=True)
        make_user(email="p@example.com", premium=True)
        memory_db.generated_documents.docs.append({"document_id": "GD-1", "user_id": "u"})

        stats = client.get("/api/admin/stats", headers=admin_headers).json()

        assert stats == {"total_users": 2, "total_documents": 1, "premium_users": 1}

    def test_grant_premium(self, client, memory_db, make_user):
        _, admin_headers = make_user(email="admin@example.com", admin=True)
        target, _ = make_user(email="target@example.com")

        response = client.put(f"/api/admin/users/{target.user_id}/claims", json={"premium": True}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"premium": True, "admin": False}
        assert memory_db.users.docs[1]["claims"]["premium"] is True

    def test_admin_cannot_drop_own_admin(self, client, make_user):
        admin, admin_headers = make_user(email="admin@example.com", admin=True)
        response = client.put(f"/api/admin/users/{admin.user_id}/claims", json={"admin": False}, headers=admin_headers)
        assert response.status_code == 400

    def test_unknown_user(self, client, make_user):
        _, admin_headers = make_user(email="admin@example.com", admin=True)
        response = client.put("/api/admin/users/ghost/claims", json={"premium": True}, headers=admin_headers)
        assert response.status_code == 404
