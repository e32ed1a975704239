import time

import pytest

from csrf_utils import (
    CsrfTokenService,
    Expired,
    InvalidSignature,
    Malformed,
    create_secret,
    sign,
    verify,
)

SECRET = b"k" * 32
NOW = 1_700_000_000


def service_at(now, secret=SECRET, **kwargs):
    return CsrfTokenService(secret, clock=lambda: now, **kwargs)


def signed_token(timestamp, nonce="abc123", secret=SECRET):
    payload = f"{timestamp}:{nonce}"
    return f"{payload}:{sign(secret, payload.encode()).hex()}"


# ----------------------------
# secret + signer
# ----------------------------
def test_create_secret_is_random_and_long_enough():
    a, b = create_secret(), create_secret()
    assert len(a) >= 32
    assert a != b


@pytest.mark.parametrize("message", [b"", b"123:abc", b"\x00\xff" * 50])
def test_verify_accepts_own_signature(message):
    assert verify(SECRET, message, sign(SECRET, message))


def test_sign_is_deterministic_and_keyed():
    assert sign(SECRET, b"m") == sign(SECRET, b"m")
    assert sign(SECRET, b"m") != sign(b"x" * 32, b"m")


def test_any_single_bit_flip_fails_verification():
    message = b"1700000000:deadbeef"
    mac = sign(SECRET, message)
    for i in range(len(mac) * 8):
        mutated = bytearray(mac)
        mutated[i // 8] ^= 1 << (i % 8)
        assert not verify(SECRET, message, bytes(mutated))


def test_verify_rejects_truncated_mac():
    mac = sign(SECRET, b"m")
    assert not verify(SECRET, b"m", mac[:-1])


# ----------------------------
# token service
# ----------------------------
def test_short_secret_rejected():
    with pytest.raises(ValueError):
        CsrfTokenService(b"short")


def test_generated_token_shape():
    token = service_at(NOW).generate()
    timestamp, nonce, signature = token.split(":")
    assert timestamp == str(NOW)
    assert len(nonce) == 32 and int(nonce, 16) >= 0
    assert len(signature) == 64


def test_generate_then_validate_succeeds():
    svc = CsrfTokenService(SECRET)
    svc.validate(svc.generate())


def test_tokens_are_unique_within_same_second():
    svc = service_at(NOW)
    assert svc.generate() != svc.generate()


def test_token_is_reusable_within_window():
    svc = service_at(NOW)
    token = svc.generate()
    svc.validate(token)
    svc.validate(token)


def test_token_from_other_secret_rejected():
    token = service_at(NOW, secret=b"o" * 32).generate()
    with pytest.raises(InvalidSignature):
        service_at(NOW).validate(token)


@pytest.mark.parametrize(
    "token",
    [
        "",
        "justonefield",
        "1700000000:nonce",
        "1700000000:nonce:sig:extra",
        "::",
        "1700000000::abcd",
        ":nonce:abcd",
        "notanumber:nonce:abcd",
        "-5:nonce:abcd",
        "+5:nonce:abcd",
        " 5:nonce:abcd",
        "1_000:nonce:abcd",
        "1.5:nonce:abcd",
        "1" * 21 + ":nonce:abcd",
        "1" * 5000 + ":nonce:abcd",
    ],
)
def test_malformed_tokens(token):
    with pytest.raises(Malformed):
        service_at(NOW).validate(token)


def test_non_string_token_is_malformed():
    with pytest.raises(Malformed):
        service_at(NOW).validate(None)


def test_tampered_signature_character():
    token = service_at(NOW).generate()
    timestamp, nonce, signature = token.split(":")
    flipped = ("0" if signature[0] != "0" else "1") + signature[1:]
    with pytest.raises(InvalidSignature):
        service_at(NOW).validate(f"{timestamp}:{nonce}:{flipped}")


def test_tampered_timestamp_invalidates_signature():
    token = service_at(NOW).generate()
    _, nonce, signature = token.split(":")
    with pytest.raises(InvalidSignature):
        service_at(NOW).validate(f"{NOW + 1}:{nonce}:{signature}")


def test_non_hex_signature_is_invalid():
    with pytest.raises(InvalidSignature):
        service_at(NOW).validate(f"{NOW}:nonce:zzzz")


@pytest.mark.parametrize("age", [3601, 7200, 10**6])
def test_expired_tokens(age):
    with pytest.raises(Expired):
        service_at(NOW).validate(signed_token(NOW - age))


def test_token_valid_at_exactly_max_age():
    service_at(NOW).validate(signed_token(NOW - 3600))


def test_generated_token_expires_after_an_hour():
    token = service_at(NOW).generate()
    service_at(NOW + 3600).validate(token)
    with pytest.raises(Expired):
        service_at(NOW + 3601).validate(token)


def test_small_clock_skew_tolerated():
    service_at(NOW).validate(signed_token(NOW + 30))


def test_future_token_beyond_skew_expired():
    with pytest.raises(Expired):
        service_at(NOW).validate(signed_token(NOW + 61))


def test_custom_max_age():
    svc = service_at(NOW, max_age=10)
    svc.validate(signed_token(NOW - 10))
    with pytest.raises(Expired):
        svc.validate(signed_token(NOW - 11))


def test_signature_checked_before_expiry():
    # a forged old token reports the forgery, not the age
    with pytest.raises(InvalidSignature):
        service_at(NOW).validate(signed_token(NOW - 7200, secret=b"o" * 32))


def test_default_clock_is_wall_time():
    svc = CsrfTokenService(SECRET)
    timestamp = int(svc.generate().split(":")[0])
    assert abs(timestamp - time.time()) < 5


def test_repr_does_not_leak_secret():
    assert "kkkk" not in repr(CsrfTokenService(SECRET))
