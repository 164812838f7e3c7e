from __future__ import annotations

import math
from typing import Iterable, List

from taskalloc.core.errors import DomainError
from taskalloc.domain.schema import RawNumber


def normalize_number(field: str, raw: RawNumber) -> float:
    """
    Parse one caller-supplied value into a finite float.

    Text is stripped before parsing so form input like " 4.5 " is accepted.
    """
    if isinstance(raw, bool):
        raise DomainError(f"{field} must be a number, got a boolean.")

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            raise DomainError(f"{field} is empty; enter a number.")
        try:
            value = float(text)
        except ValueError:
            raise DomainError(f"{field} is not a number: {raw!r}.") from None
    else:
        try:
            value = float(raw)
        except OverflowError:
            raise DomainError(f"{field} must be finite (too large for a float).") from None
        except (TypeError, ValueError):
            raise DomainError(f"{field} is not a number: {raw!r}.") from None

    if not math.isfinite(value):
        raise DomainError(f"{field} must be finite (got {value}).")
    return value


def normalize_values(field: str, raw: Iterable[RawNumber]) -> List[float]:
    return [normalize_number(f"{field}[{i}]", v) for i, v in enumerate(raw)]
