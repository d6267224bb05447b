from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Index

from wineo.app.extensions import db


def _new_id() -> str:
    return uuid.uuid4().hex


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    name = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    active = db.Column(db.Boolean, nullable=False, default=True)
    # No FK on purpose: the upstream catalog may reference parents we never received.
    parent_id = db.Column(db.String(32), nullable=True, index=True)
    level = db.Column(db.Integer, nullable=True)
    path = db.Column(db.JSON, nullable=True)  # ancestor ids, root first
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_record(self) -> dict:
        """Flat record in the shape the tree builder consumes."""
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "active": self.active,
            "parent_id": self.parent_id,
            "level": self.level,
            "path": list(self.path or []),
        }


class Region(db.Model):
    __tablename__ = "regions"

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    slug = db.Column(db.String(100), nullable=False, unique=True)
    label = db.Column(db.String(100), nullable=False)

    cities = db.relationship("City", backref="region", lazy=True, cascade="all, delete-orphan")


class City(db.Model):
    __tablename__ = "cities"

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    region_id = db.Column(db.String(32), db.ForeignKey("regions.id"), nullable=False, index=True)
    slug = db.Column(db.String(100), nullable=False)
    label = db.Column(db.String(100), nullable=False)


class Filter(db.Model):
    """Per-category attribute filter (capacity, material, ...)."""

    __tablename__ = "filters"

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    name = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False, default="select")  # select | range | checkbox | number | text
    options = db.Column(db.JSON, nullable=True)
    unit = db.Column(db.String(50), nullable=False, default="")
    category_id = db.Column(db.String(32), db.ForeignKey("categories.id"), nullable=False, index=True)
    apply_to_children = db.Column(db.Boolean, nullable=False, default=False)
    is_required = db.Column(db.Boolean, nullable=False, default=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    title = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=False, default="")
    type = db.Column(db.String(10), nullable=False)  # sell | rent
    category_id = db.Column(db.String(32), db.ForeignKey("categories.id"), nullable=True, index=True)

    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    currency = db.Column(db.String(3), nullable=False, default="GEL")  # GEL | USD
    price_type = db.Column(db.String(20), nullable=False, default="fixed")  # fixed | negotiable
    rent_period = db.Column(db.String(10), nullable=True)  # hour | day | week | month

    thumbnail = db.Column(db.String(1024), nullable=True)
    images = db.Column(db.JSON, nullable=True)
    region = db.Column(db.String(100), nullable=True)
    city = db.Column(db.String(100), nullable=True)

    status = db.Column(db.String(20), nullable=False, default="active")  # active | draft | archived
    promotion_type = db.Column(db.String(20), nullable=False, default="none")
    promotion_expires_at = db.Column(db.DateTime, nullable=True)
    specifications = db.Column(db.JSON, nullable=True)
    attributes = db.Column(db.JSON, nullable=True)  # [{"filter_id": ..., "value": ...}]
    views = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = db.relationship("Category", lazy="joined")

    __table_args__ = (
        Index("ix_products_status_type", "status", "type"),
        Index("ix_products_created", "created_at"),
    )
