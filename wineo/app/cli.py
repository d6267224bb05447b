from __future__ import annotations

from datetime import datetime, timedelta

from flask import Blueprint

from wineo.app.extensions import db
from wineo.app.models import Category, City, Filter, Product, Region

cli_bp = Blueprint("cli", __name__)

REGIONS = {
    "kakheti": ("Kakheti", ["Telavi", "Sighnaghi", "Kvareli"]),
    "imereti": ("Imereti", ["Kutaisi", "Zestaponi"]),
    "racha": ("Racha", ["Ambrolauri", "Oni"]),
    "kartli": ("Kartli", ["Gori", "Kaspi"]),
    "adjara": ("Adjara", ["Batumi", "Kobuleti"]),
}

# (slug, name, parent slug)
CATEGORIES = [
    ("wine-bottles", "Wine Bottles", None),
    ("winery-machinery", "Winery Machinery", None),
    ("wine-press-crusher", "Wine Press / Crusher", "winery-machinery"),
    ("pumps", "Pumps", "winery-machinery"),
    ("fermentation-tanks", "Fermentation Tanks", "winery-machinery"),
    ("vineyard-land", "Vineyard Land", None),
    ("barrels", "Barrels", None),
    ("qvevri", "Qvevri", "barrels"),
    ("agricultural-equipment", "Agricultural Equipment", None),
]

# (category slug, slug, name, type, options, unit, applies to children)
FILTERS = [
    ("winery-machinery", "capacity", "Capacity", "range", None, "L", True),
    ("winery-machinery", "material", "Material", "select", ["stainless steel", "aluminium", "plastic"], "", True),
    ("wine-press-crusher", "electric", "Electric", "checkbox", None, "", False),
    ("barrels", "wood", "Wood", "select", ["oak", "chestnut", "acacia"], "", True),
    ("barrels", "volume", "Volume", "number", None, "L", True),
]


def seed_regions() -> None:
    for slug, (label, cities) in REGIONS.items():
        region = Region(slug=slug, label=label)
        db.session.add(region)
        db.session.flush()
        for city in cities:
            db.session.add(City(region_id=region.id, slug=city.lower(), label=city))


def seed_categories() -> dict:
    by_slug: dict = {}
    for slug, name, parent_slug in CATEGORIES:
        parent = by_slug.get(parent_slug)
        cat = Category(
            slug=slug,
            name=name,
            parent_id=parent.id if parent else None,
            level=(parent.level + 1) if parent else 0,
            path=(list(parent.path or []) + [parent.id]) if parent else [],
            active=True,
        )
        db.session.add(cat)
        db.session.flush()
        by_slug[slug] = cat
    return by_slug


def seed_filters(categories: dict) -> dict:
    by_slug: dict = {}
    for order, (category_slug, slug, name, type_, options, unit, inherit) in enumerate(FILTERS):
        f = Filter(
            slug=slug,
            name=name,
            type=type_,
            options=options,
            unit=unit,
            category_id=categories[category_slug].id,
            apply_to_children=inherit,
            sort_order=order,
        )
        db.session.add(f)
        db.session.flush()
        by_slug[slug] = f
    return by_slug


@cli_bp.cli.command("seed")
def seed_data() -> None:
    """Seed regions, the category tree, attribute filters and a handful of listings.

    Safe to run multiple times; it will no-op if data exists.
    """

    if Region.query.count() == 0:
        seed_regions()

    if Category.query.count() == 0:
        categories = seed_categories()
        filters = seed_filters(categories)
        now = datetime.utcnow()
        db.session.add_all([
            Product(
                title="Hydraulic grape press 200L", slug="hydraulic-grape-press-200l",
                description="Stainless steel hydraulic press, used two seasons.",
                type="sell", category_id=categories["wine-press-crusher"].id, price=2400,
                region="Kakheti", city="Telavi", specifications={"condition": "used"},
                attributes=[
                    {"filter_id": filters["capacity"].id, "value": 200},
                    {"filter_id": filters["material"].id, "value": "stainless steel"},
                    {"filter_id": filters["electric"].id, "value": True},
                ],
                promotion_type="homepageTop", promotion_expires_at=now + timedelta(days=14),
                created_at=now - timedelta(days=3),
            ),
            Product(
                title="Oak barrel 225L", slug="oak-barrel-225l",
                description="French oak barrique, medium toast.",
                type="sell", category_id=categories["barrels"].id, price=650,
                region="Imereti", city="Kutaisi", specifications={"condition": "new"},
                attributes=[
                    {"filter_id": filters["wood"].id, "value": "oak"},
                    {"filter_id": filters["volume"].id, "value": 225},
                ],
                promotion_type="featured", promotion_expires_at=now + timedelta(days=7),
                created_at=now - timedelta(days=10),
            ),
            Product(
                title="Qvevri 1000L", slug="qvevri-1000l",
                description="Traditional clay vessel, lined with beeswax.",
                type="sell", category_id=categories["qvevri"].id, price=1800,
                region="Kakheti", city="Kvareli",
                attributes=[{"filter_id": filters["volume"].id, "value": 1000}],
                created_at=now - timedelta(days=1),
            ),
            Product(
                title="Must pump for rent", slug="must-pump-for-rent",
                description="Peristaltic must pump, 20 t/h.",
                type="rent", rent_period="day", category_id=categories["pumps"].id, price=80,
                region="Kartli", city="Gori", created_at=now - timedelta(days=2),
            ),
            Product(
                title="Vineyard tractor", slug="vineyard-tractor",
                description="Narrow-track tractor for vineyard rows.",
                type="rent", rent_period="week", category_id=categories["agricultural-equipment"].id,
                price=500, region="Racha", city="Ambrolauri",
                promotion_type="highlighted", promotion_expires_at=now - timedelta(days=1),
                created_at=now - timedelta(days=5),
            ),
        ])

    db.session.commit()
    print("Seed complete.")
