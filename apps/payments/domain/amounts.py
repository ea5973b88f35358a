from __future__ import annotations

import secrets
import string
import time
from decimal import ROUND_HALF_UP, Decimal

MINOR_UNITS_PER_MAJOR = 100
RECEIPT_MAX_LENGTH = 40

_RECEIPT_ALPHABET = string.ascii_lowercase + string.digits


def chargeable_minor_units(amount: Decimal, tax_rate: Decimal) -> int:
    """
    Applies the tax surcharge and converts to minor units, rounding half away
    from zero on the multiplied value: 1000 at 18% is 118000.
    """
    gross = Decimal(amount) * (Decimal(1) + Decimal(tax_rate)) * MINOR_UNITS_PER_MAJOR
    return int(gross.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def new_receipt() -> str:
    millis = str(int(time.time() * 1000))[-8:]
    suffix = "".join(secrets.choice(_RECEIPT_ALPHABET) for _ in range(6))
    return f"rcpt_{millis}_{suffix}"
