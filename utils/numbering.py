# utils/numbering.py
"""
Document number generation for invoices and payments.

Format: PREFIX-<microsecond timestamp, base 36>-<4 random base-36 chars>.
Collisions are very unlikely; the unique constraints on
invoices.invoice_number and payments.payment_number are the real guarantee.
"""
import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_uppercase


def _to_base36(number: int) -> str:
     if number == 0:
          return "0"
     digits = []
     while number:
          number, rem = divmod(number, 36)
          digits.append(_ALPHABET[rem])
     return "".join(reversed(digits))


def generate_document_number(prefix: str) -> str:
     timestamp = _to_base36(time.time_ns() // 1000)
     suffix = "".join(secrets.choice(_ALPHABET) for _ in range(4))
     return f"{prefix}-{timestamp}-{suffix}"


def generate_invoice_number(prefix: str = "INV") -> str:
     return generate_document_number(prefix)


def generate_payment_number(prefix: str = "PAY") -> str:
     return generate_document_number(prefix)
