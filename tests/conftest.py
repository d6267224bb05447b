import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from wineo.app.config import TestConfig
from wineo.app.extensions import db
from wineo.app.factory import create_app
from wineo.app.models import Category, City, Filter, Product, Region
from wineo.modules.listings.mapping import Listing, make_excerpt

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def make_listing():
    """Build a Listing with sensible defaults; only ranking fields usually matter."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        fields = dict(
            id=f"l{n}",
            slug=f"listing-{n}",
            type="buy",
            title=f"Listing {n}",
            description="",
            excerpt="",
            price=100,
            created_at="2024-01-01T00:00:00Z",
        )
        fields.update(overrides)
        if "excerpt" not in overrides:
            fields["excerpt"] = make_excerpt(fields["description"])
        return Listing(**fields)

    return _make


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture()
def seeded(app):
    """Small catalog: machinery > presses, an inactive branch, attribute filters and a few products.

    Naive datetimes, as the database stores them (UTC).
    """
    now = datetime.utcnow()

    kakheti = Region(slug="kakheti", label="Kakheti")
    imereti = Region(slug="imereti", label="Imereti")
    db.session.add_all([kakheti, imereti])
    db.session.flush()
    db.session.add_all([
        City(region_id=kakheti.id, slug="telavi", label="Telavi"),
        City(region_id=imereti.id, slug="kutaisi", label="Kutaisi"),
    ])

    machinery = Category(id="c-machinery", name="Winery Machinery", slug="winery-machinery", active=True)
    presses = Category(id="c-presses", name="Presses", slug="presses", parent_id="c-machinery", active=True, level=1)
    barrels = Category(id="c-barrels", name="Barrels", slug="barrels", active=True)
    retired = Category(id="c-retired", name="Retired", slug="retired", active=False)
    hidden = Category(id="c-hidden", name="Hidden Child", slug="hidden-child", parent_id="c-retired", active=True)
    db.session.add_all([machinery, presses, barrels, retired, hidden])
    db.session.flush()

    db.session.add_all([
        Filter(id="f-material", name="Material", slug="material", type="select", options=["steel", "aluminium"],
               category_id="c-machinery", sort_order=1),
        Filter(id="f-capacity", name="Capacity", slug="capacity", type="range", unit="L",
               category_id="c-machinery", apply_to_children=True, sort_order=2),
        Filter(id="f-electric", name="Electric", slug="electric", type="checkbox", category_id="c-presses"),
        Filter(id="f-old", name="Legacy", slug="legacy", type="text", category_id="c-presses", is_active=False),
        Filter(id="f-wood", name="Wood", slug="wood", type="select", options=["oak", "chestnut"],
               category_id="c-barrels", apply_to_children=True),
    ])

    db.session.add_all([
        Product(
            id="p-press", title="Hydraulic press", slug="hydraulic-press",
            description="Stainless hydraulic press", type="sell", category_id="c-presses",
            price=2400, region="Kakheti", city="Telavi",
            attributes=[{"filter_id": "f-capacity", "value": 200}, {"filter_id": "f-electric", "value": True}],
            created_at=now - timedelta(days=5),
        ),
        Product(
            id="p-barrel", title="Oak barrel", slug="oak-barrel",
            description="French oak barrel", type="sell", category_id="c-barrels",
            price=650, region="Imereti", city="Kutaisi",
            attributes=[{"filterId": "f-wood", "value": "Oak"}],
            promotion_type="featured", promotion_expires_at=now + timedelta(days=3),
            created_at=now - timedelta(days=10),
        ),
        Product(
            id="p-crusher", title="Crusher destemmer", slug="crusher-destemmer",
            description="Electric crusher", type="sell", category_id="c-machinery",
            price=900, region="Kakheti", city="Telavi",
            attributes=[
                {"filter_id": "f-capacity", "value": "50"},
                {"filter_id": "f-material", "value": ["steel", "aluminium"]},
            ],
            promotion_type="homepageTop", promotion_expires_at=now - timedelta(days=1),
            created_at=now - timedelta(days=1),
        ),
        Product(
            id="p-pump", title="Must pump", slug="must-pump",
            description="Pump for rent", type="rent", rent_period="day", category_id="c-machinery",
            price=80, region="Kakheti", city="Telavi",
            created_at=now - timedelta(days=2),
        ),
        Product(
            id="p-draft", title="Draft tank", slug="draft-tank",
            description="Not published", type="sell", category_id="c-machinery",
            price=100, status="draft", created_at=now,
        ),
        Product(
            id="p-retired", title="Old thing", slug="old-thing",
            description="In an inactive category", type="sell", category_id="c-retired",
            price=10, created_at=now,
        ),
    ])
    db.session.commit()
    return app
