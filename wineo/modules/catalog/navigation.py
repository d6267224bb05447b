from __future__ import annotations

from typing import List, Optional, Sequence

from wineo.modules.catalog.tree import CategoryTreeNode


class NavigationStateError(RuntimeError):
    pass


class CategoryNavigator:
    """Drill-down category picker used by the hero search and the add-listing form.

    Closed until `open()`; while open it holds a stack of levels, the first
    being the root forest. Picking a node with children pushes them, picking
    a leaf commits its id and closes.

    Server side it backs `GET /api/categories/picker`, which replays a
    trail of picks; clients holding the tree can drive it directly.
    """

    CLOSED = "closed"
    OPEN = "open"

    def __init__(self, tree: Sequence[CategoryTreeNode]):
        self.tree = list(tree)
        self.level_stack: List[List[CategoryTreeNode]] = []
        self.selected_id: Optional[str] = None
        self._open = False

    @property
    def state(self) -> str:
        return self.OPEN if self._open else self.CLOSED

    @property
    def current_level(self) -> List[CategoryTreeNode]:
        if not self._open or not self.level_stack:
            return []
        return self.level_stack[-1]

    def open(self) -> None:
        self.level_stack = [list(self.tree)]
        self._open = True

    def close(self) -> None:
        self.level_stack = []
        self._open = False

    def select(self, node: CategoryTreeNode) -> Optional[str]:
        if not self._open:
            raise NavigationStateError("Category picker is closed")
        if node.children:
            self.level_stack.append(list(node.children))
            return None
        self.selected_id = node.id
        self.close()
        return node.id

    def back(self) -> bool:
        if self._open and len(self.level_stack) > 1:
            self.level_stack.pop()
            return True
        return False
