from __future__ import annotations

from flask import Blueprint, request

from wineo.app.models import City, Region

bp = Blueprint("regions", __name__)


@bp.get("/regions")
def list_regions():
    """GET /api/regions - All regions (filters, location pages)."""
    items = Region.query.order_by(Region.label.asc()).all()
    return {"items": [{"id": r.id, "slug": r.slug, "label": r.label} for r in items]}, 200


@bp.get("/cities")
def list_cities():
    """GET /api/cities?regionId= - Cities, optionally for one region."""
    region_id = (request.args.get("regionId") or "").strip()
    q = City.query
    if region_id:
        q = q.filter_by(region_id=region_id)
    items = q.order_by(City.label.asc()).all()
    return {
        "items": [
            {
                "id": c.id,
                "slug": c.slug,
                "label": c.label,
                "region_id": c.region_id,
                "region": {"id": c.region.id, "slug": c.region.slug, "label": c.region.label},
            }
            for c in items
        ]
    }, 200
