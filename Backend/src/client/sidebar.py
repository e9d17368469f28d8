"""
Barre latérale: arbre de menus reçu de GET /menus/sidebar, état
déplié/replié local, et parcours récursif pour l'affichage.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple


@dataclass(frozen=True)
class SidebarNode:
    id: str
    label: str
    icon: str = ""
    path: str = ""
    parent_id: Optional[str] = None
    children: Tuple["SidebarNode", ...] = field(default_factory=tuple)

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SidebarNode":
        parent_id = data.get("parent_id")
        return cls(
            id=str(data["id"]),
            label=data.get("name") or data.get("label") or "",
            icon=data.get("icon") or "",
            path=data.get("path") or "",
            parent_id=str(parent_id) if parent_id else None,
            children=tuple(cls.from_dict(c) for c in data.get("children") or ()),
        )


@dataclass(frozen=True)
class SidebarRow:
    node: SidebarNode
    depth: int
    expanded: bool
    active: bool


class Sidebar:
    def __init__(self, roots: Iterable[SidebarNode], active_path: Optional[str] = None):
        self.roots: Tuple[SidebarNode, ...] = tuple(roots)
        self.active_path = active_path
        self._expanded: Set[str] = set()
        if active_path:
            self.expand_to(active_path)

    @classmethod
    def from_api(cls, items: List[Dict[str, Any]], active_path: Optional[str] = None) -> "Sidebar":
        return cls((SidebarNode.from_dict(i) for i in items), active_path=active_path)

    @classmethod
    def load(cls, client, active_path: Optional[str] = None) -> "Sidebar":
        return cls.from_api(client.get("/menus/sidebar") or [], active_path=active_path)

    # --- état local -----------------------------------------------------
    def is_expanded(self, node_id: str) -> bool:
        return node_id in self._expanded

    def toggle(self, node_id: str) -> bool:
        """Inverse l'état du nœud et renvoie le nouvel état."""
        if node_id in self._expanded:
            self._expanded.discard(node_id)
            return False
        self._expanded.add(node_id)
        return True

    def expand(self, node_id: str) -> None:
        self._expanded.add(node_id)

    def collapse(self, node_id: str) -> None:
        self._expanded.discard(node_id)

    def collapse_all(self) -> None:
        self._expanded.clear()

    def expand_to(self, path: str) -> bool:
        """Déplie tous les ancêtres du nœud dont le chemin vaut `path`."""
        trail = self._trail(self.roots, path)
        if trail is None:
            return False
        self._expanded.update(n.id for n in trail[:-1])
        return True

    def _trail(self, nodes, path) -> Optional[List[SidebarNode]]:
        for node in nodes:
            if node.path == path:
                return [node]
            below = self._trail(node.children, path)
            if below is not None:
                return [node] + below
        return None

    # --- parcours -------------------------------------------------------
    def rows(self, open: bool = True) -> Iterator[SidebarRow]:
        """
        Parcours récursif en profondeur. Barre repliée (open=False):
        seules les entrées de premier niveau sont produites.
        """
        yield from self._walk(self.roots, 0, open)

    def _walk(self, nodes, depth: int, open: bool) -> Iterator[SidebarRow]:
        for node in nodes:
            expanded = open and node.has_children and node.id in self._expanded
            yield SidebarRow(
                node=node,
                depth=depth,
                expanded=expanded,
                active=bool(self.active_path) and node.path == self.active_path,
            )
            if expanded:
                yield from self._walk(node.children, depth + 1, open)

    def render(self, open: bool = True, indent: str = "  ") -> str:
        lines = []
        for row in self.rows(open=open):
            marker = "-" if row.expanded else ("+" if row.node.has_children else " ")
            active = " *" if row.active else ""
            lines.append(f"{indent * row.depth}{marker} {row.node.label}{active}")
        return "\n".join(lines)
