"""
Payment specific codes and gateway response-code mapping.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # 网关/回调（6xxxx）
    UNSUPPORTED_PROVIDER = 60005


TRANZILA_APPROVED = "000"
TRANZILA_CANCELLED = "036"

# Tranzila `Response` field -> (is_success, human readable message)
TRANZILA_RESPONSE_CODES: dict[str, tuple[bool, str]] = {
    "000": (True, "Transaction approved"),
    "001": (False, "Blocked card"),
    "002": (False, "Stolen card"),
    "003": (False, "Contact credit card company"),
    "004": (False, "Transaction refused"),
    "005": (False, "Forged card"),
    "006": (False, "CVV or ID verification failed"),
    "010": (False, "Partial amount approved"),
    "014": (False, "Invalid card number"),
    "033": (False, "Card expired"),
    "036": (False, "Transaction cancelled"),
    "039": (False, "Invalid card number"),
    "057": (False, "Service not available"),
    "058": (False, "Technical problem"),
    "059": (False, "Communication error"),
    "060": (False, "3D Secure authentication required"),
    "061": (False, "Credit limit exceeded"),
    "062": (False, "Transaction limit exceeded"),
    "063": (False, "Number of transactions exceeded"),
    "064": (False, "Amount exceeds credit limit"),
}


def describe_tranzila_response(code: str | None) -> tuple[bool, str]:
    """Return (is_success, message) for a Tranzila response code."""
    key = code or "999"
    return TRANZILA_RESPONSE_CODES.get(key, (False, f"Unknown error (code: {key})"))
