"""Category tree built from the flat category list.

Every category-aware widget (home grid, hero search, sidebar filters,
add-listing form) navigates the same forest, so it is always derived here
from the flat records and never stored.
"""

from __future__ import annotations

import unicodedata
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Set, Tuple


class CategoryGraphError(ValueError):
    """A category is its own ancestor (duplicate or corrupt parent ids)."""

    def __init__(self, category_id: str):
        super().__init__(f"Category {category_id!r} is its own ancestor")
        self.category_id = category_id


@dataclass
class CategoryTreeNode:
    id: str
    name: str
    slug: str
    level: int = 0
    path: List[str] = field(default_factory=list)
    children: List["CategoryTreeNode"] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def _shallow_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "level": self.level,
            "path": list(self.path),
            "children": [],
        }

    def to_dict(self) -> Dict[str, Any]:
        root = self._shallow_dict()
        stack = [(self, root)]
        while stack:
            node, out = stack.pop()
            for child in node.children:
                child_out = child._shallow_dict()
                out["children"].append(child_out)
                stack.append((child, child_out))
        return root


def name_sort_key(name: str):
    """Locale-independent collation: accents and case ignored, raw name breaks ties."""
    decomposed = unicodedata.normalize("NFKD", name or "")
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), name or "")


def _parent_of(cat: Mapping[str, Any]) -> Optional[str]:
    parent = cat.get("parent_id", cat.get("parentId"))
    return parent or None


def _make_node(cat: Mapping[str, Any]) -> CategoryTreeNode:
    return CategoryTreeNode(
        id=cat["id"],
        name=cat.get("name") or "",
        slug=cat.get("slug") or "",
        level=cat.get("level") or 0,
        path=list(cat.get("path") or []),
    )


def _sort_by_name(nodes: List[CategoryTreeNode]) -> None:
    nodes.sort(key=lambda n: name_sort_key(n.name))


def build_tree(categories: Iterable[Mapping[str, Any]]) -> List[CategoryTreeNode]:
    """Build the navigation forest from flat category records.

    Only active categories are kept. Roots are categories without a parent;
    a category whose parent is inactive or unknown is never reached and so
    does not appear at all. Siblings and roots are sorted by name.

    Duplicate ids are not merged. Raises CategoryGraphError if a category
    turns up again among its own ancestors.

    Built with an explicit stack, so depth is limited by memory only.
    """
    active = [c for c in categories if c.get("active")]
    children_of: Dict[str, List[Mapping[str, Any]]] = defaultdict(list)
    for cat in active:
        parent = _parent_of(cat)
        if parent is not None:
            children_of[parent].append(cat)

    roots: List[CategoryTreeNode] = []
    on_path: Set[str] = set()
    # ("enter", category, sibling list) or ("leave", node, None)
    stack: List[Tuple[str, Any, Optional[List[CategoryTreeNode]]]] = [
        ("enter", cat, roots) for cat in reversed(active) if _parent_of(cat) is None
    ]
    while stack:
        action, item, siblings = stack.pop()
        if action == "leave":
            on_path.discard(item.id)
            _sort_by_name(item.children)
            continue
        if item["id"] in on_path:
            raise CategoryGraphError(item["id"])
        node = _make_node(item)
        siblings.append(node)
        on_path.add(node.id)
        stack.append(("leave", node, None))
        stack.extend(("enter", child, node.children) for child in reversed(children_of.get(node.id, [])))

    _sort_by_name(roots)
    return roots


def iter_nodes(tree: Sequence[CategoryTreeNode]) -> Iterator[CategoryTreeNode]:
    """Pre-order walk, siblings in display order."""
    stack = list(reversed(tree))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_node(tree: Sequence[CategoryTreeNode], slug: Optional[str]) -> Optional[CategoryTreeNode]:
    if not slug:
        return None
    for node in iter_nodes(tree):
        if node.slug == slug:
            return node
    return None


def has_slug_in_subtree(node: CategoryTreeNode, slug: Optional[str]) -> bool:
    """True if the node or any descendant carries `slug` (sidebar expands that path)."""
    if not slug:
        return False
    return any(n.slug == slug for n in iter_nodes([node]))


def _path_to(tree: Sequence[CategoryTreeNode], match: Callable[[CategoryTreeNode], bool]) -> List[CategoryTreeNode]:
    parents: Dict[int, Optional[CategoryTreeNode]] = {id(n): None for n in tree}
    for node in iter_nodes(tree):
        if match(node):
            path = [node]
            parent = parents[id(node)]
            while parent is not None:
                path.append(parent)
                parent = parents[id(parent)]
            path.reverse()
            return path
        for child in node.children:
            parents[id(child)] = node
    return []


def path_to_slug(tree: Sequence[CategoryTreeNode], slug: Optional[str]) -> List[CategoryTreeNode]:
    """Nodes from the root down to the one with `slug`; empty when absent."""
    if not slug:
        return []
    return _path_to(tree, lambda n: n.slug == slug)


def path_to_id(tree: Sequence[CategoryTreeNode], category_id: Optional[str]) -> List[CategoryTreeNode]:
    if not category_id:
        return []
    return _path_to(tree, lambda n: n.id == category_id)


def subtree_slugs(node: CategoryTreeNode) -> Set[str]:
    return {n.slug for n in iter_nodes([node])}
