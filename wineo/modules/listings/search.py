from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import urlencode

from wineo.modules.listings.ranking import SORT_NEWEST, Tier, effective_tier, rank_listings, utcnow

DEFAULT_PAGE_SIZE = 12
ATTR_PREFIX = "attr_"

_TRUE = ("1", "true")
_FALSE = ("0", "false")
_RANGE = re.compile(r"^\s*(\d+(?:\.\d+)?)?\s*-\s*(\d+(?:\.\d+)?)?\s*$")


@dataclass
class ListingSearchState:
    """Search state read from the query string; the category comes from the path."""

    type: str
    category_slug: Optional[str] = None
    price_min: Optional[str] = None
    price_max: Optional[str] = None
    region: Optional[str] = None
    sort: Optional[str] = None
    page: Optional[str] = None
    keyword: Optional[str] = None
    attributes: Dict[str, List[str]] = field(default_factory=dict)  # filter slug -> accepted values

    def to_dict(self):
        return asdict(self)


def _first(args: Mapping[str, Any], key: str) -> Optional[str]:
    value = args.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value == "":
        return None
    return value


def parse_listing_search_params(
    type: str,
    args: Optional[Mapping[str, Any]],
    category_slug: Optional[str] = None,
) -> ListingSearchState:
    state = ListingSearchState(type=type, category_slug=category_slug)
    if not args:
        return state
    state.price_min = _first(args, "priceMin")
    state.price_max = _first(args, "priceMax")
    state.region = _first(args, "region")
    state.sort = _first(args, "sort")
    state.page = _first(args, "page")
    state.keyword = _first(args, "q")
    state.attributes = parse_attribute_params(args)
    return state


def parse_attribute_params(args: Mapping[str, Any]) -> Dict[str, List[str]]:
    """Collect repeated `attr_<filter slug>=<value>` params; empty values are dropped."""
    out: Dict[str, List[str]] = {}
    for key, value in args.items():
        if not key.startswith(ATTR_PREFIX):
            continue
        slug = key[len(ATTR_PREFIX):]
        values = value if isinstance(value, (list, tuple)) else [value]
        values = [v for v in values if v]
        if slug and values:
            out[slug] = list(values)
    return out


def listing_base_path(type: str, category_slug: Optional[str] = None) -> str:
    base = "/buy" if type == "buy" else "/rent"
    if category_slug:
        return f"{base}/{category_slug}"
    return base


def build_listing_search_string(
    price_min=None,
    price_max=None,
    region: Optional[str] = None,
    sort: Optional[str] = None,
    page=None,
    keyword: Optional[str] = None,
    attributes: Optional[Mapping[str, Any]] = None,
) -> str:
    """Query string for client-side navigation (no category, that lives in the path)."""
    params = []
    if price_min is not None and price_min != "":
        params.append(("priceMin", str(price_min)))
    if price_max is not None and price_max != "":
        params.append(("priceMax", str(price_max)))
    if region:
        params.append(("region", region))
    if sort:
        params.append(("sort", sort))
    if page is not None and page != "":
        try:
            if int(page) > 1:
                params.append(("page", str(page)))
        except (TypeError, ValueError):
            pass
    if keyword:
        params.append(("q", keyword))
    for slug, values in (attributes or {}).items():
        if isinstance(values, str):
            values = [values]
        params.extend((f"{ATTR_PREFIX}{slug}", v) for v in values if v)
    return f"?{urlencode(params)}" if params else ""


def _as_float(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def attribute_matches(value: Any, wanted: str) -> bool:
    """Does a stored attribute value satisfy one `attr_` query value?

    "1"/"true" and "0"/"false" match booleans, "a-b" is an inclusive
    numeric range (either bound may be left out), numbers compare as
    numbers and anything else compares as text ignoring case. A list
    value matches when any element does.
    """
    if value is None:
        return False
    if isinstance(value, (list, tuple)):
        return any(attribute_matches(v, wanted) for v in value)

    wanted = wanted.strip()
    lowered = wanted.lower()
    if isinstance(value, bool):
        if lowered in _TRUE:
            return value
        if lowered in _FALSE:
            return not value
        return False

    number = _as_float(value)
    match = _RANGE.match(wanted)
    if match and any(match.groups()):
        if number is None:
            return False
        low, high = match.groups()
        return (low is None or number >= float(low)) and (high is None or number <= float(high))

    wanted_number = _as_float(wanted)
    if number is not None and wanted_number is not None:
        return number == wanted_number
    return str(value).strip().lower() == lowered


def filter_listings(
    listings: Iterable[Any],
    keyword: Optional[str] = None,
    region_slug: Optional[str] = None,
    price_min: Optional[float] = None,
    price_max: Optional[float] = None,
    attributes: Optional[Mapping[str, Sequence[str]]] = None,
) -> List[Any]:
    result = list(listings)

    if region_slug:
        needle = region_slug.lower()
        result = [
            l for l in result
            if l.region_slug == region_slug or needle in (l.location or "").lower()
        ]

    if keyword:
        q = keyword.lower()
        result = [
            l for l in result
            if q in (l.title or "").lower()
            or q in (l.excerpt or "").lower()
            or q in (l.description or "").lower()
        ]

    if price_min is not None or price_max is not None:
        # an unpriced listing never satisfies a price bound
        priced = [(l, _as_float(l.price)) for l in result]
        result = [
            l for l, price in priced
            if price is not None
            and (price_min is None or price >= price_min)
            and (price_max is None or price <= price_max)
        ]

    # any value within one filter, every filter across them
    for slug, wanted in (attributes or {}).items():
        if isinstance(wanted, str):
            wanted = [wanted]
        if not wanted:
            continue
        result = [
            l for l in result
            if any(attribute_matches((l.attributes or {}).get(slug), w) for w in wanted)
        ]

    return result


def paginate(items: Sequence[Any], page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Tuple[List[Any], int]:
    page = max(1, page)
    limit = max(1, limit)
    offset = (page - 1) * limit
    return list(items[offset:offset + limit]), len(items)


def search_listings(
    listings: Iterable[Any],
    state: ListingSearchState,
    now: Optional[datetime] = None,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[Any], int]:
    """Filter, rank and page listings for one search state.

    Numeric parameters in `state` are expected to have been validated by
    the caller; anything unparseable is ignored here.
    """
    filtered = filter_listings(
        listings,
        keyword=state.keyword,
        region_slug=state.region,
        price_min=_as_float(state.price_min),
        price_max=_as_float(state.price_max),
        attributes=state.attributes,
    )
    ranked = rank_listings(filtered, sort=state.sort, now=now)
    try:
        page = int(state.page) if state.page else 1
    except ValueError:
        page = 1
    return paginate(ranked, page, limit)


def latest_listings(
    listings: Iterable[Any],
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    now: Optional[datetime] = None,
) -> Tuple[List[Any], int]:
    ranked = rank_listings(listings, sort=SORT_NEWEST, now=now)
    offset = max(0, offset)
    return ranked[offset:offset + limit], len(ranked)


def featured_listings(listings: Iterable[Any], limit: int = 6, now: Optional[datetime] = None) -> List[Any]:
    now = now or utcnow()
    promoted = [l for l in listings if effective_tier(l, now) is not Tier.NONE]
    return rank_listings(promoted, now=now)[:limit]
