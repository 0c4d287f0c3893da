"""
Lemon Squeezy webhook: signed order_created/paid grants the premium claim;
ignored events, unpaid orders and missing user_id are answered without a
grant; a redelivered order is acknowledged without granting twice.
"""
import hashlib
import hmac
import json
from unittest.mock import AsyncMock, patch

import pytest
from pymongo.errors import DuplicateKeyError

SECRET = "whsec_lemon_test"
URL = "/api/webhooks/lemonsqueezy"


@pytest.fixture(autouse=True)
def webhook_secret(monkeypatch):
    monkeypatch.setenv("LEMONSQUEEZY_WEBHOOK_SECRET", SECRET)


def _order_event(user_id="user-1", event_name="order_created", status="paid", order_id="1001"):
    custom_data = {"user_id": user_id} if user_id else {}
    return {
        "meta": {"event_name": event_name, "test_mode": True, "custom_data": custom_data},
        "data": {"id": order_id, "type": "orders", "attributes": {"status": status}},
    }


def _post(client, event, secret=SECRET, raw=None):
    body = raw if raw is not None else json.dumps(event).encode("utf-8")
    signature = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return client.post(
        URL,
        content=body,
        headers={"X-Signature": signature, "Content-Type": "application/json"},
    )


def test_paid_order_grants_premium(client, memory_db, make_user):
    user, _ = make_user()

    response = _post(client, _order_event(user_id=user.user_id))

    assert response.status_code == 200
    assert response.text == "Webhook processed successfully."
    stored = memory_db.users.docs[0]
    assert stored["claims"]["premium"] is True
    assert stored["claims"]["admin"] is False
    assert memory_db.webhook_events.docs[0]["status"] == "PROCESSED"


def test_redelivery_is_acknowledged_once(client, memory_db, make_user):
    user, _ = make_user()
    event = _order_event(user_id=user.user_id)

    assert _post(client, event).text == "Webhook processed successfully."
    second = _post(client, event)

    assert second.status_code == 200
    assert second.text == "Already processed"
    assert len(memory_db.webhook_events.docs) == 1


def test_bad_signature_is_rejected_before_parsing(client, memory_db):
    response = _post(client, None, secret="wrong-secret", raw=b"not json at all")

    assert response.status_code == 401
    assert response.text == "Invalid signature."
    assert memory_db.webhook_events.docs == []


def test_missing_signature_header_is_rejected(client, memory_db):
    response = client.post(URL, content=json.dumps(_order_event()).encode())
    assert response.status_code == 401


def test_other_events_are_ignored(client, memory_db, make_user):
    user, _ = make_user()

    response = _post(client, _order_event(user_id=user.user_id, event_name="subscription_created"))

    assert response.status_code == 200
    assert response.text == "OK (event ignored)"
    assert memory_db.users.docs[0]["claims"]["premium"] is False
    assert memory_db.webhook_events.docs == []


def test_unpaid_order_is_not_granted(client, memory_db, make_user):
    user, _ = make_user()

    response = _post(client, _order_event(user_id=user.user_id, status="pending"))

    assert response.status_code == 200
    assert response.text == "OK (status not paid)"
    assert memory_db.users.docs[0]["claims"]["premium"] is False
    assert memory_db.webhook_events.docs == []


def test_missing_user_id_is_bad_request(client, memory_db):
    response = _post(client, _order_event(user_id=None))

    assert response.status_code == 400
    assert response.text == "Missing user_id in custom_data."


def test_unknown_user_fails_and_is_recorded(client, memory_db):
    response = _post(client, _order_event(user_id="ghost"))

    assert response.status_code == 500
    assert response.text.startswith("Webhook handler failed:")
    assert memory_db.webhook_events.docs[0]["status"] == "FAILED"


def test_invalid_json_with_valid_signature_fails(client, memory_db):
    response = _post(client, None, raw=b"{broken")

    assert response.status_code == 500
    assert response.text.startswith("Webhook handler failed:")


def test_get_is_not_allowed(client):
    assert client.get(URL).status_code == 405


def test_unset_secret_rejects_everything(client, memory_db, monkeypatch):
    monkeypatch.delenv("LEMONSQUEEZY_WEBHOOK_SECRET")
    response = _post(client, _order_event(), secret="")
    assert response.status_code == 401


def test_concurrent_delivery_losing_the_insert_is_already_processed(client, memory_db, make_user):
    user, _ = make_user()
    with patch.object(
        memory_db.webhook_events,
        "insert_one",
        new_callable=AsyncMock,
        side_effect=DuplicateKeyError("E11000 duplicate key error"),
    ):
        response = _post(client, _order_event(user_id=user.user_id))

    assert response.status_code == 200
    assert response.text == "Already processed"
    assert memory_db.users.docs[0]["claims"]["premium"] is False
