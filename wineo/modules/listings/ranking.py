"""Promotion-aware listing order shared by search, homepage and latest feeds.

Paid promotions surface first in a fixed tier order; within a tier the
requested sort mode applies, and recency always breaks the remaining ties.
A promotion only counts while it has not expired, evaluated against the
`now` passed in by the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import IntEnum
from functools import cmp_to_key
from typing import Any, Iterable, List, Mapping, Optional

log = logging.getLogger(__name__)

SORT_NEWEST = "newest"
SORT_PRICE_ASC = "price_asc"
SORT_PRICE_DESC = "price_desc"
SORT_FEATURED = "featured"

SORT_OPTIONS = [
    {"value": SORT_NEWEST, "label": "Newest"},
    {"value": SORT_PRICE_ASC, "label": "Price: low to high"},
    {"value": SORT_PRICE_DESC, "label": "Price: high to low"},
    {"value": SORT_FEATURED, "label": "Recommended"},
]
SORT_VALUES = frozenset(o["value"] for o in SORT_OPTIONS)


class Tier(IntEnum):
    HOMEPAGE_TOP = 0
    FEATURED = 1
    HIGHLIGHTED = 2
    NONE = 3


PROMOTION_TIERS = {
    "homepageTop": Tier.HOMEPAGE_TOP,
    "featured": Tier.FEATURED,
    "highlighted": Tier.HIGHLIGHTED,
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO string or datetime to an aware UTC datetime; None when unusable.

    Naive values are taken to be UTC (that is how the database stores them).
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            log.debug("Unparseable timestamp %r", value)
            return None
    else:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _field(listing: Any, name: str) -> Any:
    """Read `name` from a mapping (snake_case or camelCase key) or an object."""
    if isinstance(listing, Mapping):
        if name in listing:
            return listing[name]
        return listing.get(_camel(name))
    return getattr(listing, name, None)


def _resolve_now(now: Optional[datetime]) -> datetime:
    return parse_timestamp(now) or utcnow()


def is_promotion_active(listing: Any, now: Optional[datetime] = None) -> bool:
    promotion_type = _field(listing, "promotion_type") or "none"
    if promotion_type == "none":
        return False
    expires_at = parse_timestamp(_field(listing, "promotion_expires_at"))
    if expires_at is None:
        return False
    return expires_at > _resolve_now(now)


def effective_tier(listing: Any, now: Optional[datetime] = None) -> Tier:
    tier = PROMOTION_TIERS.get(_field(listing, "promotion_type") or "none", Tier.NONE)
    if tier is Tier.NONE or not is_promotion_active(listing, now):
        return Tier.NONE
    return tier


def effective_promotion_type(listing: Any, now: Optional[datetime] = None) -> str:
    tier = effective_tier(listing, now)
    for name, value in PROMOTION_TIERS.items():
        if value is tier:
            return name
    return "none"


def _created_key(listing: Any) -> float:
    created = parse_timestamp(_field(listing, "created_at"))
    return created.timestamp() if created else float("-inf")


def _price_key(listing: Any) -> Optional[float]:
    try:
        price = float(_field(listing, "price"))
    except (TypeError, ValueError):
        return None
    return None if price != price else price  # NaN


def _cmp(x, y) -> int:
    return (x > y) - (x < y)


def compare(a: Any, b: Any, sort: Optional[str] = None, now: Optional[datetime] = None) -> int:
    now = _resolve_now(now)
    result = _cmp(effective_tier(a, now), effective_tier(b, now))
    if result:
        return result

    if sort in (SORT_PRICE_ASC, SORT_PRICE_DESC):
        pa, pb = _price_key(a), _price_key(b)
        if pa is None or pb is None:
            # unpriced listings go last in both directions
            result = _cmp(pa is None, pb is None)
        elif sort == SORT_PRICE_ASC:
            result = _cmp(pa, pb)
        else:
            result = _cmp(pb, pa)
        if result:
            return result

    return _cmp(_created_key(b), _created_key(a))


def rank_listings(listings: Iterable[Any], sort: Optional[str] = None, now: Optional[datetime] = None) -> List[Any]:
    """Return a new list in display order. The clock is read once per call."""
    now = _resolve_now(now)
    return sorted(listings, key=cmp_to_key(lambda a, b: compare(a, b, sort, now)))
