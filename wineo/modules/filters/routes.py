from __future__ import annotations

from typing import Dict, List

from flask import Blueprint

from wineo.app.models import Filter
from wineo.app.common.errors import abort_json
from wineo.modules.catalog.routes import load_category_tree
from wineo.modules.catalog.tree import name_sort_key, path_to_id

bp = Blueprint("filters", __name__)


def _filter_json(f: Filter) -> dict:
    return {
        "id": f.id,
        "name": f.name,
        "slug": f.slug,
        "type": f.type,
        "options": list(f.options or []),
        "unit": f.unit or "",
        "category_id": f.category_id,
        "apply_to_children": f.apply_to_children,
        "is_required": f.is_required,
        "sort_order": f.sort_order,
        "is_active": f.is_active,
    }


def filter_slugs() -> Dict[str, str]:
    """Filter id -> slug, for turning stored product attributes into listing attributes."""
    return {f.id: f.slug for f in Filter.query.all()}


def filters_for_path(category_ids: List[str]) -> List[Filter]:
    """Active filters of the last category in `category_ids` plus inherited ones.

    `category_ids` runs root first. Ancestor filters only count when they
    apply to children.
    """
    if not category_ids:
        return []
    own, ancestors = category_ids[-1], set(category_ids[:-1])
    candidates = Filter.query.filter(
        Filter.is_active.is_(True),
        Filter.category_id.in_(category_ids),
    ).all()
    applicable = [
        f for f in candidates
        if f.category_id == own or (f.category_id in ancestors and f.apply_to_children)
    ]
    applicable.sort(key=lambda f: (f.sort_order or 0, name_sort_key(f.name)))
    return applicable


@bp.get("/filters/by-category/<category_id>")
def filters_by_category(category_id: str):
    """GET /api/filters/by-category/<category_id> - Own and inherited filters of a category."""
    path = path_to_id(load_category_tree(), category_id.strip())
    if not path:
        abort_json(404, "not_found", "Category not found")
    items = filters_for_path([n.id for n in path])
    return {"items": [_filter_json(f) for f in items]}, 200
