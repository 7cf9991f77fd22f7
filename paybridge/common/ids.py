"""Transaction identifiers for outbound gateway requests."""

import itertools
import time
from datetime import datetime, timezone

_sequence = itertools.count()


def _unique_token() -> str:
    """Hex token that trends upward with the clock and differs per call."""

    micros = time.time_ns() // 1000
    return f"{micros:x}{next(_sequence) % 16:x}"


def generate_transaction_id(now: datetime | None = None) -> str:
    """Return `TX` + month/day/hour/minute/second + a 4 character suffix.

    Not cryptographically unique: two calls collide only when they share the
    second, the low 12 bits of the microsecond clock and the counter nibble.
    """

    moment = now or datetime.now(timezone.utc)
    return f"TX{moment:%m%d%H%M%S}{_unique_token()[-4:]}"
