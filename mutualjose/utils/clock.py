"""Epoch-second helpers for the JWS ``exp`` header."""

from __future__ import annotations

import math
import time
from typing import Callable

Clock = Callable[[], float]

MILLISECONDS_IN_SECOND = 1000
MILLISECONDS_IN_MINUTE = 60000


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def now_ms(clock: Clock = time.time) -> float:
    return clock() * MILLISECONDS_IN_SECOND


def current_time(clock: Clock = time.time) -> int:
    """Return the current time in whole epoch seconds."""
    return round_half_up(now_ms(clock) / MILLISECONDS_IN_SECOND)


def expiration_time(validity_minutes: float, clock: Clock = time.time) -> int:
    """Return the epoch second at which a signature made now stops being valid."""
    expires_ms = now_ms(clock) + validity_minutes * MILLISECONDS_IN_MINUTE
    return round_half_up(expires_ms / MILLISECONDS_IN_SECOND)
