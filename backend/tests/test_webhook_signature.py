"""Unit tests for verify_webhook_signature (HMAC-SHA256 hex over the raw body)."""
import hashlib
import hmac

import pytest

from services.lemonsqueezy_webhook_service import verify_webhook_signature

SECRET = "whsec_lemon_test"
BODY = b'{"meta":{"event_name":"order_created"}}'


def _sign(body: bytes, secret: str = SECRET) -> str:
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def test_matching_signature_is_accepted():
    assert verify_webhook_signature(BODY, SECRET, _sign(BODY)) is True


def test_repeated_calls_agree():
    signature = _sign(BODY)
    assert verify_webhook_signature(BODY, SECRET, signature) == verify_webhook_signature(BODY, SECRET, signature)


def test_empty_header_is_rejected():
    assert verify_webhook_signature(BODY, SECRET, "") is False


def test_missing_header_is_rejected():
    assert verify_webhook_signature(BODY, SECRET, None) is False


def test_signature_for_other_body_is_rejected():
    assert verify_webhook_signature(BODY, SECRET, _sign(b"{}")) is False


def test_signature_with_other_secret_is_rejected():
    assert verify_webhook_signature(BODY, SECRET, _sign(BODY, "another-secret")) is False


@pytest.mark.parametrize("header", ["abc", _sign(BODY) + "00", "é" * 64])
def test_malformed_headers_never_raise(header):
    assert verify_webhook_signature(BODY, SECRET, header) is False


@pytest.mark.parametrize("secret", ["", SECRET, "ünïcode-secret"])
def test_round_trip_holds_for_any_secret(secret):
    assert verify_webhook_signature(BODY, secret, _sign(BODY, secret)) is True


def test_non_bytes_body_is_rejected():
    assert verify_webhook_signature("not bytes", SECRET, _sign(BODY)) is False
