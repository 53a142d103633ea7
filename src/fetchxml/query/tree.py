"""Read-only navigation over a FetchXML node tree.

Every helper is total: a missing tree or an unknown identifier yields an
empty result instead of an exception.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, List, Optional

from .nodes import EntityLike, FetchNode, FilterNode, LinkEntityNode, Node, NodeId

# Child-bearing fields, in document order. Variants simply lack the ones they
# do not carry.
CHILD_FIELDS = (
    "entity",
    "all_attributes",
    "attributes",
    "orders",
    "conditions",
    "filters",
    "subfilters",
    "links",
)


@dataclass(frozen=True)
class LinkEntityReference:
    identifier: str
    entity_name: str
    alias: Optional[str]
    display_label: str
    node_id: NodeId


def children_of(node: Node) -> Iterator[Node]:
    for name in CHILD_FIELDS:
        value = getattr(node, name, None)
        if value is None:
            continue
        if isinstance(value, list):
            yield from value
        else:
            yield value


def iter_nodes(tree: Optional[Node]) -> Iterator[Node]:
    """Depth-first, pre-order walk over ``tree`` and all its descendants."""
    if tree is None:
        return
    stack: List[Node] = [tree]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(list(children_of(node))))


def find_node(tree: Optional[Node], node_id: NodeId) -> Optional[Node]:
    for node in iter_nodes(tree):
        if node.id == node_id:
            return node
    return None


def ancestor_chain(tree: Optional[Node], node_id: NodeId) -> List[Node]:
    """Ancestors of ``node_id`` from the root down to its direct parent."""

    def walk(node: Node, path: List[Node]) -> Optional[List[Node]]:
        if node.id == node_id:
            return path
        for child in children_of(node):
            found = walk(child, path + [node])
            if found is not None:
                return found
        return None

    if tree is None:
        return []
    return walk(tree, []) or []


def collect_link_references(tree: Optional[FetchNode]) -> List[LinkEntityReference]:
    """Every link-entity in the tree, including those nested in filters."""
    if tree is None or getattr(tree, "entity", None) is None:
        return []
    references: List[LinkEntityReference] = []
    for node in iter_nodes(tree.entity):
        if not isinstance(node, LinkEntityNode):
            continue
        label = f"{node.alias} ({node.name})" if node.alias else node.name
        references.append(
            LinkEntityReference(
                identifier=node.identifier,
                entity_name=node.name,
                alias=node.alias,
                display_label=label,
                node_id=node.id,
            )
        )
    return references


def is_in_root_filter_scope(tree: Optional[FetchNode], condition_id: NodeId) -> bool:
    """True when the condition sits in the root entity's own filter tree.

    Only those conditions may reference a linked entity via ``entityname``;
    filters reached through a link-entity do not count.
    """

    def search(filters: List[FilterNode]) -> bool:
        for filter_node in filters:
            if any(condition.id == condition_id for condition in filter_node.conditions):
                return True
            if search(filter_node.subfilters):
                return True
        return False

    if tree is None or getattr(tree, "entity", None) is None:
        return False
    return search(tree.entity.filters)


def find_owning_entity_name(tree: Optional[FetchNode], node_id: NodeId) -> Optional[str]:
    """Logical name of the nearest entity or link-entity enclosing ``node_id``.

    A link-entity whose name is still empty does not become the owner of its
    children; they resolve to the closest named ancestor instead.
    """

    def in_links(links: List[LinkEntityNode], owner: str) -> Optional[str]:
        for link in links:
            if link.id == node_id:
                return owner
            found = in_container(link, link.name or owner)
            if found is not None:
                return found
        return None

    def in_filter(filter_node: FilterNode, owner: str) -> Optional[str]:
        if filter_node.id == node_id:
            return owner
        if any(condition.id == node_id for condition in filter_node.conditions):
            return owner
        for subfilter in filter_node.subfilters:
            found = in_filter(subfilter, owner)
            if found is not None:
                return found
        return in_links(filter_node.links, owner)

    def in_container(container: EntityLike, owner: str) -> Optional[str]:
        if container.all_attributes is not None and container.all_attributes.id == node_id:
            return owner
        if any(attribute.id == node_id for attribute in container.attributes):
            return owner
        if any(order.id == node_id for order in container.orders):
            return owner
        for filter_node in container.filters:
            found = in_filter(filter_node, owner)
            if found is not None:
                return found
        return in_links(container.links, owner)

    if tree is None or getattr(tree, "entity", None) is None:
        return None
    if tree.id == node_id:
        return None
    if tree.entity.id == node_id:
        return tree.entity.name
    return in_container(tree.entity, tree.entity.name)


def _strip_ids(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _strip_ids(item) for key, item in value.items() if key != "id"}
    if isinstance(value, list):
        return [_strip_ids(item) for item in value]
    return value


def node_to_dict(node: Node, *, include_ids: bool = False) -> Dict[str, Any]:
    """Plain-dict form of a subtree; without ids it compares trees structurally."""
    data = asdict(node)
    return data if include_ids else _strip_ids(data)


__all__ = [
    "CHILD_FIELDS",
    "LinkEntityReference",
    "children_of",
    "iter_nodes",
    "find_node",
    "ancestor_chain",
    "collect_link_references",
    "is_in_root_filter_scope",
    "find_owning_entity_name",
    "node_to_dict",
]
