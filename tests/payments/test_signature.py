import pytest

from infrastructure.external.payments.signature import WebhookVerifier, canonicalize, sign


SECRET = "whsec_test"
PAYLOAD = {"orderId": "ord_1", "status": "success", "amount": 3000}


def test_canonical_form_is_sorted_and_compact():
    assert canonicalize({"b": 1, "a": "ש"}) == '{"a":"ש","b":1}'.encode("utf-8")


def test_valid_signature_verifies():
    verifier = WebhookVerifier(SECRET)
    assert verifier.verify(PAYLOAD, sign(PAYLOAD, SECRET))


def test_key_order_does_not_matter():
    reordered = {"amount": 3000, "status": "success", "orderId": "ord_1"}
    assert WebhookVerifier(SECRET).verify(reordered, sign(PAYLOAD, SECRET))


def test_every_single_byte_mutation_is_rejected():
    verifier = WebhookVerifier(SECRET)
    signature = sign(PAYLOAD, SECRET)
    for i, ch in enumerate(signature):
        for replacement in "0aF ":
            if replacement == ch:
                continue
            mutated = signature[:i] + replacement + signature[i + 1:]
            assert not verifier.verify(PAYLOAD, mutated)


def test_truncated_or_extended_signature_is_rejected():
    verifier = WebhookVerifier(SECRET)
    signature = sign(PAYLOAD, SECRET)
    assert not verifier.verify(PAYLOAD, signature[:-1])
    assert not verifier.verify(PAYLOAD, signature + "0")
    assert not verifier.verify(PAYLOAD, signature.upper())


def test_payload_tampering_is_rejected():
    signature = sign(PAYLOAD, SECRET)
    assert not WebhookVerifier(SECRET).verify({**PAYLOAD, "amount": 1}, signature)


def test_wrong_secret_is_rejected():
    assert not WebhookVerifier("other").verify(PAYLOAD, sign(PAYLOAD, SECRET))


@pytest.mark.parametrize("signature", [None, "", 123])
def test_missing_signature_is_rejected(signature):
    assert not WebhookVerifier(SECRET).verify(PAYLOAD, signature)


def test_missing_secret_rejects_everything():
    verifier = WebhookVerifier(None)
    assert not verifier.verify(PAYLOAD, sign(PAYLOAD, SECRET))
    assert verifier.verify(PAYLOAD, sign(PAYLOAD, SECRET), secret=SECRET)


def test_unserializable_payload_is_rejected_without_raising():
    assert not WebhookVerifier(SECRET).verify({"x": object()}, "00")


def test_non_ascii_signature_is_rejected_without_raising():
    assert not WebhookVerifier(SECRET).verify(PAYLOAD, "é" * 64)


def test_comparison_is_constant_time(monkeypatch):
    from infrastructure.external.payments import signature as signature_module

    real_compare = signature_module.hmac.compare_digest
    calls = []

    def spy(a, b):
        calls.append((a, b))
        return real_compare(a, b)

    monkeypatch.setattr(signature_module.hmac, "compare_digest", spy)
    verifier = WebhookVerifier(SECRET)
    good = sign(PAYLOAD, SECRET)
    # 前缀正确与完全错误的签名都必须走同一个比较函数
    almost = good[:-1] + ("0" if good[-1] != "0" else "1")

    assert verifier.verify(PAYLOAD, good)
    assert not verifier.verify(PAYLOAD, almost)
    assert not verifier.verify(PAYLOAD, "f" * len(good))
    assert len(calls) == 3
    assert all(a == good.encode("ascii") for a, _ in calls)
