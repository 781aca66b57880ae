"""Batch identifier generation and validation.

Generated IDs look like ``COFFEE-1718035200123-K3X9QZ``. The validator checks
the older display format ``VRT-2024-123456``; the two do not agree and
generated IDs fail `is_valid_batch_id`.
"""

from __future__ import annotations

import random
import re
import string
import time
from dataclasses import dataclass
from typing import Callable, Optional

DEFAULT_PREFIX = "PRODUCT"
MAX_PREFIX_LEN = 10
SUFFIX_LEN = 6

_BASE36 = string.digits + string.ascii_uppercase
_VALID_RE = re.compile(r"^[A-Z]{3}-\d{4}-\d{6}$")
_GENERATED_RE = re.compile(r"^([A-Z0-9]+)-(\d+)-([A-Z0-9]{6})$")


@dataclass(frozen=True)
class BatchIdParts:
    prefix: str
    timestamp_ms: int
    suffix: str


def extract_prefix(product_name: Optional[str]) -> str:
    """First word of the product name, upper-cased and cleaned."""
    if not product_name or not product_name.strip():
        return DEFAULT_PREFIX
    first = product_name.split()[0].upper()
    cleaned = re.sub(r"[^A-Z0-9]", "", first)[:MAX_PREFIX_LEN]
    return cleaned or DEFAULT_PREFIX


def _random_suffix(rand: random.Random | None = None) -> str:
    rng = rand or random
    return "".join(rng.choice(_BASE36) for _ in range(SUFFIX_LEN))


def generate_batch_id(
    prefix: Optional[str],
    now_ms: Callable[[], int] | None = None,
    rand: random.Random | None = None,
) -> str:
    """
    Build ``{PREFIX}-{epochMillis}-{random6}``.

    No uniqueness check happens here; the unique constraint on
    ``products.batch_id`` is the backstop.
    """
    head = (prefix or "").strip().upper() or DEFAULT_PREFIX
    millis = now_ms() if now_ms else int(time.time() * 1000)
    return f"{head}-{millis}-{_random_suffix(rand)}"


def is_valid_batch_id(batch_id: Optional[str]) -> bool:
    if not batch_id or not isinstance(batch_id, str):
        return False
    return _VALID_RE.match(batch_id) is not None


def parse_batch_id(batch_id: Optional[str]) -> BatchIdParts | None:
    """Split a generated batch ID into its parts, or None if it is not one."""
    if not batch_id:
        return None
    m = _GENERATED_RE.match(batch_id)
    if not m:
        return None
    return BatchIdParts(prefix=m.group(1), timestamp_ms=int(m.group(2)), suffix=m.group(3))
