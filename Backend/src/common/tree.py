"""
Construction d'arbres (menus, bureaux, catégories) à partir de lignes plates.

Une ligne dont le parent n'est pas dans le lot est ignorée avec tout son
sous-arbre: on ne remonte que ce qui est atteignable depuis une racine.
"""
from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Optional


def build_tree(
    items: Iterable[Any],
    serialize: Callable[[Any], Dict[str, Any]],
    *,
    parent_attr: str = "parent_id",
    sort_key: Optional[Callable[[Any], Any]] = None,
) -> List[Dict[str, Any]]:
    by_parent = defaultdict(list)
    for item in items:
        by_parent[getattr(item, parent_attr)].append(item)

    def walk(parent_id, seen: frozenset) -> List[Dict[str, Any]]:
        children = by_parent.get(parent_id, [])
        if sort_key is not None:
            children = sorted(children, key=sort_key)
        nodes = []
        for item in children:
            if item.pk in seen:
                continue
            node = serialize(item)
            node["children"] = walk(item.pk, seen | {item.pk})
            nodes.append(node)
        return nodes

    return walk(None, frozenset())


def tree_depth(nodes: List[Dict[str, Any]]) -> int:
    """Profondeur max (0 pour un arbre vide, 1 pour des racines seules)."""
    if not nodes:
        return 0
    return 1 + max(tree_depth(n.get("children", [])) for n in nodes)


def creates_cycle(node, new_parent, parent_attr: str = "parent") -> bool:
    """
    True si rattacher `node` sous `new_parent` crée une boucle
    (new_parent est node lui-même ou l'un de ses descendants).
    """
    current = new_parent
    visited = set()
    while current is not None and current.pk not in visited:
        if current.pk == node.pk:
            return True
        visited.add(current.pk)
        current = getattr(current, parent_attr)
    return False
