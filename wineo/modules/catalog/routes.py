from __future__ import annotations

from typing import List

from flask import Blueprint, request

from wineo.app.models import Category
from wineo.app.common.errors import abort_json
from wineo.app.common.validation import flag_arg
from wineo.modules.catalog.navigation import CategoryNavigator
from wineo.modules.catalog.tree import CategoryTreeNode, build_tree, find_node, path_to_slug

bp = Blueprint("catalog", __name__)


def _category_json(c: Category) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "slug": c.slug,
        "description": c.description,
        "active": c.active,
        "parent_id": c.parent_id,
        "level": c.level or 0,
        "path": list(c.path or []),
    }


def load_category_tree() -> List[CategoryTreeNode]:
    """Fresh tree over every stored category; inactive ones are dropped by build_tree."""
    categories = Category.query.order_by(Category.name.asc()).all()
    return build_tree([c.to_record() for c in categories])


@bp.get("/categories")
def list_categories():
    """GET /api/categories - Active categories, flat.

    Query params:
      - roots=1: top-level categories only
    """
    q = Category.query.filter_by(active=True)
    if flag_arg("roots"):
        q = q.filter((Category.parent_id.is_(None)) | (Category.parent_id == ""))
    items = q.order_by(Category.name.asc()).all()
    return {"items": [_category_json(c) for c in items]}, 200


@bp.get("/categories/tree")
def category_tree():
    """GET /api/categories/tree - Navigation forest of active categories."""
    return {"items": [n.to_dict() for n in load_category_tree()]}, 200


@bp.get("/categories/slug/<slug>")
def get_category_by_slug(slug: str):
    """GET /api/categories/slug/<slug> - One active category with its breadcrumb."""
    normalized = slug.strip().lower()
    c = Category.query.filter_by(slug=normalized, active=True).first()
    if not c:
        abort_json(404, "not_found", "Category not found")

    tree = load_category_tree()
    node = find_node(tree, normalized)
    payload = _category_json(c)
    payload["breadcrumb"] = [{"id": n.id, "name": n.name, "slug": n.slug} for n in path_to_slug(tree, normalized)]
    payload["children"] = [{"id": n.id, "name": n.name, "slug": n.slug} for n in node.children] if node else []
    return payload, 200


def _picker_option(n: CategoryTreeNode) -> dict:
    return {"id": n.id, "name": n.name, "slug": n.slug, "has_children": not n.is_leaf}


@bp.get("/categories/picker")
def category_picker():
    """GET /api/categories/picker - Drill-down picker state after a trail of picks.

    Query params:
      - trail: category id picked at each level, repeatable, root level first
    """
    navigator = CategoryNavigator(load_category_tree())
    navigator.open()
    for category_id in request.args.getlist("trail"):
        node = next((n for n in navigator.current_level if n.id == category_id), None)
        if node is None:
            abort_json(
                400,
                "validation_error",
                "trail does not follow the category tree",
                {"param": "trail", "value": category_id},
            )
        navigator.select(node)

    return {
        "state": navigator.state,
        "selected_id": navigator.selected_id,
        "can_go_back": len(navigator.level_stack) > 1,
        "items": [_picker_option(n) for n in navigator.current_level],
    }, 200
