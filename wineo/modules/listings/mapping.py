from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from wineo.modules.listings.ranking import Tier, effective_tier, parse_timestamp

EXCERPT_LENGTH = 150
PLACEHOLDER_IMAGE = "/static/placeholder.svg"
RENT_UNITS = ("day", "week", "month")


@dataclass
class Listing:
    """Display view of a product, as used by cards, grids and the ranker."""

    id: str
    slug: str
    type: str  # buy | rent
    title: str
    description: str
    excerpt: str
    price: Any
    currency: str = "GEL"
    price_unit: Optional[str] = None
    image_url: str = PLACEHOLDER_IMAGE
    image_alt: str = ""
    category: Dict[str, str] = field(default_factory=dict)
    category_slug: Optional[str] = None
    location: Optional[str] = None
    region_slug: Optional[str] = None
    created_at: Any = None
    condition: Optional[str] = None
    featured: bool = False
    promotion_type: str = "none"
    promotion_expires_at: Any = None
    attributes: Dict[str, Any] = field(default_factory=dict)  # filter slug -> value

    def to_dict(self) -> Dict[str, Any]:
        created = parse_timestamp(self.created_at)
        expires = parse_timestamp(self.promotion_expires_at)
        return {
            "id": self.id,
            "slug": self.slug,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "excerpt": self.excerpt,
            "price": float(self.price) if self.price is not None else None,
            "currency": self.currency,
            "price_unit": self.price_unit,
            "image_url": self.image_url,
            "image_alt": self.image_alt,
            "category": self.category,
            "category_slug": self.category_slug,
            "location": self.location,
            "region_slug": self.region_slug,
            "created_at": created.isoformat() if created else None,
            "condition": self.condition,
            "featured": self.featured,
            "promotion_type": self.promotion_type,
            "promotion_expires_at": expires.isoformat() if expires else None,
            "attributes": dict(self.attributes),
        }


def make_excerpt(description: str) -> str:
    description = description or ""
    if len(description) > EXCERPT_LENGTH:
        return description[:EXCERPT_LENGTH].strip() + "…"
    return description


def listing_type(product_type: str) -> str:
    return "buy" if product_type == "sell" else "rent"


def product_type(listing_type_: str) -> str:
    return "sell" if listing_type_ == "buy" else "rent"


def _price_unit(product) -> Optional[str]:
    if product.type != "rent" or not product.rent_period:
        return None
    return product.rent_period if product.rent_period in RENT_UNITS else "day"


def product_attributes(product, filter_slugs: Mapping[str, str]) -> Dict[str, Any]:
    """Stored `{filter_id, value}` pairs keyed by filter slug; unknown filters are skipped."""
    out: Dict[str, Any] = {}
    for entry in product.attributes or []:
        if not isinstance(entry, Mapping):
            continue
        slug = filter_slugs.get(entry.get("filter_id") or entry.get("filterId"))
        if slug:
            out[slug] = entry.get("value")
    return out


def listing_from_product(
    product,
    region_slug: Optional[str] = None,
    now: Optional[datetime] = None,
    filter_slugs: Optional[Mapping[str, str]] = None,
) -> Listing:
    """Map a stored product onto its display listing.

    The stored promotion is kept as-is for ranking; `featured` is only a
    display hint evaluated at `now`. `filter_slugs` maps filter ids to slugs
    for the attribute values.
    """
    category = product.category
    images = product.images or []
    location = None
    if product.city and product.region:
        location = f"{product.city}, {product.region}"
    elif product.region:
        location = product.region

    specs = product.specifications or {}
    return Listing(
        id=product.id,
        slug=product.slug,
        type=listing_type(product.type),
        title=product.title,
        description=product.description or "",
        excerpt=make_excerpt(product.description),
        price=product.price,
        currency=product.currency or "GEL",
        price_unit=_price_unit(product),
        image_url=product.thumbnail or (images[0] if images else PLACEHOLDER_IMAGE),
        image_alt=product.title,
        category={"name": category.name, "slug": category.slug} if category else {},
        category_slug=category.slug if category else None,
        location=location,
        region_slug=region_slug,
        created_at=product.created_at,
        condition=specs.get("condition") if isinstance(specs, dict) else None,
        featured=effective_tier(product, now) is not Tier.NONE,
        promotion_type=product.promotion_type or "none",
        promotion_expires_at=product.promotion_expires_at,
        attributes=product_attributes(product, filter_slugs or {}),
    )
