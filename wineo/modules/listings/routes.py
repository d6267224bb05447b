from __future__ import annotations

import logging
from typing import Dict, List, Optional

from flask import Blueprint, current_app, request

from wineo.app.models import Category, Product, Region
from wineo.app.common.errors import abort_json
from wineo.app.common.validation import int_arg, number_arg
from wineo.modules.catalog.routes import load_category_tree
from wineo.modules.catalog.tree import find_node, subtree_slugs
from wineo.modules.filters.routes import filter_slugs
from wineo.modules.listings.mapping import Listing, listing_from_product, product_type
from wineo.modules.listings.ranking import SORT_OPTIONS, utcnow
from wineo.modules.listings.search import (
    featured_listings,
    latest_listings,
    listing_base_path,
    parse_listing_search_params,
    search_listings,
)

log = logging.getLogger(__name__)

bp = Blueprint("listings", __name__)

LISTING_TYPE = "<any(buy, rent):listing_type>"


def _region_slugs() -> Dict[str, str]:
    return {r.label.lower(): r.slug for r in Region.query.all()}


def load_listings(listing_type: Optional[str] = None, now=None) -> List[Listing]:
    """Active products in active categories, mapped to listings."""
    q = Product.query.join(Category, Product.category_id == Category.id).filter(
        Product.status == "active",
        Category.active.is_(True),
    )
    if listing_type:
        q = q.filter(Product.type == product_type(listing_type))

    regions = _region_slugs()
    filters = filter_slugs()
    return [
        listing_from_product(p, region_slug=regions.get((p.region or "").lower()), now=now, filter_slugs=filters)
        for p in q.all()
    ]


def _page_size() -> int:
    return int_arg(
        "limit",
        current_app.config["DEFAULT_PAGE_SIZE"],
        minimum=1,
        maximum=current_app.config["MAX_PAGE_SIZE"],
    )


def _search(listing_type: str, category_slug: Optional[str] = None):
    # validate numeric params up front; the search core ignores bad values silently
    number_arg("priceMin")
    number_arg("priceMax")
    page = int_arg("page", 1, minimum=1)
    limit = _page_size()

    state = parse_listing_search_params(listing_type, request.args.to_dict(flat=False), category_slug)

    now = utcnow()
    listings = load_listings(listing_type, now=now)

    if category_slug:
        node = find_node(load_category_tree(), category_slug)
        if node is None:
            abort_json(404, "not_found", "Category not found")
        slugs = subtree_slugs(node)
        listings = [l for l in listings if l.category_slug in slugs]

    items, total = search_listings(listings, state, now=now, limit=limit)
    log.debug("search type=%s category=%s total=%d", listing_type, category_slug, total)

    return {
        "items": [l.to_dict() for l in items],
        "total": total,
        "page": page,
        "page_size": limit,
        "base_path": listing_base_path(listing_type, category_slug),
        "state": state.to_dict(),
        "sort_options": SORT_OPTIONS,
    }, 200


@bp.get(f"/listings/{LISTING_TYPE}")
def search(listing_type: str):
    """GET /api/listings/<buy|rent> - Search listings.

    Query params:
      - priceMin, priceMax, region, sort, q
      - attr_<filter slug> (repeatable)
      - page, limit
    """
    return _search(listing_type)


@bp.get(f"/listings/{LISTING_TYPE}/<category_slug>")
def search_in_category(listing_type: str, category_slug: str):
    """GET /api/listings/<buy|rent>/<category> - Search within a category and its sub-categories."""
    return _search(listing_type, category_slug.strip().lower())


@bp.get(f"/listings/{LISTING_TYPE}/item/<slug>")
def get_listing(listing_type: str, slug: str):
    """GET /api/listings/<buy|rent>/item/<slug> - One active listing."""
    normalized = slug.strip().lower()
    p = (
        Product.query.join(Category, Product.category_id == Category.id)
        .filter(
            Product.slug == normalized,
            Product.type == product_type(listing_type),
            Product.status == "active",
            Category.active.is_(True),
        )
        .first()
    )
    if not p:
        abort_json(404, "not_found", "Listing not found")

    listing = listing_from_product(
        p,
        region_slug=_region_slugs().get((p.region or "").lower()),
        filter_slugs=filter_slugs(),
    )
    payload = listing.to_dict()
    payload["specifications"] = p.specifications or {}
    payload["images"] = list(p.images or [])
    return payload, 200


@bp.get("/listings/latest")
def latest():
    """GET /api/listings/latest - Newest listings of both types."""
    limit = _page_size()
    offset = int_arg("offset", 0, minimum=0)
    items, total = latest_listings(load_listings(), limit=limit, offset=offset)
    return {
        "items": [l.to_dict() for l in items],
        "pagination": {"limit": limit, "offset": offset, "total": total},
    }, 200


@bp.get("/listings/featured")
def featured():
    """GET /api/listings/featured - Listings with a running promotion."""
    limit = int_arg("limit", 6, minimum=1, maximum=current_app.config["MAX_PAGE_SIZE"])
    now = utcnow()
    items = featured_listings(load_listings(now=now), limit=limit, now=now)
    return {"items": [l.to_dict() for l in items]}, 200
