from __future__ import annotations

from datetime import datetime


def generate_certificate_code(now: datetime | None = None) -> str:
    """Return a ``DD/MM/YYYY-NNNNNN`` display code.

    The suffix is the epoch-millisecond timestamp modulo one million, so two
    codes issued a multiple of 1,000,000 ms apart on the same day collide.
    """
    now = now or datetime.now()
    millis = int(now.timestamp() * 1000)
    return f"{now:%d/%m/%Y}-{millis % 1_000_000:06d}"
