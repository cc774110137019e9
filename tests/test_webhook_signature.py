import hashlib
import hmac

import pytest

import revolut
from revolut.resources import signature_valid, verify_signature
from revolut.resources.webhooks import Webhooks

SECRET = "wsk_r59a4HfWVAKycbCaNO1RvgCJec02gRd8"
TIMESTAMP = "1683650202360"
PAYLOAD = '{"data":{"id":"645a7696-22f3-aa47-9c74-cbae0449cc46","new_state":"completed"},"event":"TransactionStateChanged"}'
NOW = int(TIMESTAMP) / 1000 + 30


def _sign(payload=PAYLOAD, timestamp=TIMESTAMP, secret=SECRET):
    digest = hmac.new(secret.encode(), f"v1.{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"v1={digest}"


def test_valid_signature():
    assert signature_valid(PAYLOAD, _sign(), TIMESTAMP, SECRET, now=NOW)


def test_bytes_payload_and_int_timestamp():
    assert signature_valid(PAYLOAD.encode(), _sign(), int(TIMESTAMP), SECRET, now=NOW)


def test_any_of_several_signatures_during_rotation():
    header = f"{_sign(secret='wsk_old')},{_sign()}"

    assert signature_valid(PAYLOAD, header, TIMESTAMP, SECRET, now=NOW)


@pytest.mark.parametrize(
    "payload, signature, timestamp",
    [
        (PAYLOAD + " ", _sign(), TIMESTAMP),
        (PAYLOAD, _sign(secret="wsk_other"), TIMESTAMP),
        (PAYLOAD, _sign(), str(int(TIMESTAMP) + 1)),
        (PAYLOAD, "", TIMESTAMP),
        (PAYLOAD, _sign(), "not-a-timestamp"),
    ],
)
def test_tampered_or_malformed(payload, signature, timestamp):
    assert not signature_valid(payload, signature, timestamp, SECRET, now=NOW)


def test_stale_timestamp_rejected():
    six_minutes_later = int(TIMESTAMP) / 1000 + 6 * 60

    assert not signature_valid(PAYLOAD, _sign(), TIMESTAMP, SECRET, now=six_minutes_later)
    assert signature_valid(PAYLOAD, _sign(), TIMESTAMP, SECRET, now=six_minutes_later, tolerance=None)


def test_verify_signature_raises():
    assert verify_signature(PAYLOAD, _sign(), TIMESTAMP, SECRET, now=NOW) is True

    with pytest.raises(revolut.SignatureVerificationError):
        verify_signature(PAYLOAD, _sign(secret="wsk_other"), TIMESTAMP, SECRET, now=NOW)


def test_available_on_resource():
    assert Webhooks.signature_valid(PAYLOAD, _sign(), TIMESTAMP, SECRET, now=NOW)


def test_non_utf8_body_is_checked_as_raw_bytes():
    body = b"\xff\xfe" + PAYLOAD.encode()
    digest = hmac.new(SECRET.encode(), f"v1.{TIMESTAMP}.".encode() + body, hashlib.sha256).hexdigest()

    assert signature_valid(body, f"v1={digest}", TIMESTAMP, SECRET, now=NOW)
    assert not signature_valid(b"\xff\xfe", "v1=00", TIMESTAMP, SECRET, now=NOW)
    with pytest.raises(revolut.SignatureVerificationError):
        verify_signature(b"\xff\xfe", "v1=00", TIMESTAMP, SECRET, now=NOW)


def test_non_ascii_signature_header_is_rejected():
    assert not signature_valid(PAYLOAD, "v1=é", TIMESTAMP, SECRET, now=NOW)
