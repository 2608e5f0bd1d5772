"""
Receipt number generation.

Format: prefix + last 10 digits of a nanosecond timestamp + 2 random
alphanumerics, e.g. REC4827193650K7. Records written by one allocation get a
suffix: the installment ordinal, or SUR for the surplus.
"""

import secrets
import string
import time
from typing import Optional

from scolarite.core.config import settings

_ALPHABET = string.ascii_uppercase + string.digits


def generate_receipt_number(suffix: Optional[str] = None) -> str:
    stamp = str(time.time_ns())[-10:]
    random_part = "".join(secrets.choice(_ALPHABET) for _ in range(2))
    number = f"{settings.receipt_prefix}{stamp}{random_part}"
    return f"{number}-{suffix}" if suffix else number
