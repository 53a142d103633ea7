from __future__ import annotations

from typing import Iterator, Optional

from .diagnostics import Diagnostics
from .nodes import (
    RESTRICTIVE_LINK_TYPES,
    AttributeNode,
    ConditionNode,
    EntityLike,
    EntityNode,
    FetchNode,
    LinkEntityNode,
)
from .operators import OperatorCatalog, get_catalog
from .tree import is_in_root_filter_scope, iter_nodes


def _has_whitespace(text: str) -> bool:
    return any(ch.isspace() for ch in text)


def _containers(tree: FetchNode) -> Iterator[EntityLike]:
    for node in iter_nodes(tree.entity):
        if isinstance(node, (EntityNode, LinkEntityNode)):
            yield node


def _check_restrictive_link(link: LinkEntityNode, diagnostics: Diagnostics) -> None:
    if link.link_type not in RESTRICTIVE_LINK_TYPES:
        return
    if link.all_attributes or link.attributes or link.orders or link.filters or link.links:
        diagnostics.warn(
            "FETCHXML_RESTRICTED_LINK_CHILDREN",
            f"Link-entity '{link.identifier}' with link-type '{link.link_type}' "
            "cannot have attributes, orders, filters or nested link-entities",
            element="link-entity",
            attribute="link-type",
        )


def _check_condition(
    tree: FetchNode, condition: ConditionNode, catalog: OperatorCatalog, diagnostics: Diagnostics
) -> None:
    label = condition.attribute or "<unnamed>"
    spec = catalog.get(condition.operator)
    if spec is None:
        diagnostics.warn(
            "FETCHXML_UNKNOWN_OPERATOR",
            f"Unknown operator '{condition.operator}' on condition '{label}'",
            element="condition",
            attribute="operator",
        )
    else:
        value = condition.value
        if not spec.requires_value:
            if value is not None and value != []:
                diagnostics.warn(
                    "FETCHXML_UNEXPECTED_VALUE",
                    f"Operator '{spec.value}' does not take a value (condition '{label}')",
                    element="condition",
                    attribute="value",
                )
        elif (value is None or value == []) and not condition.valueof:
            diagnostics.warn(
                "FETCHXML_MISSING_VALUE",
                f"Operator '{spec.value}' requires a value (condition '{label}')",
                element="condition",
                attribute="value",
            )
        elif spec.requires_two_values and (not isinstance(value, list) or len(value) != 2):
            diagnostics.warn(
                "FETCHXML_VALUE_ARITY",
                f"Operator '{spec.value}' requires exactly two values (condition '{label}')",
                element="condition",
                attribute="value",
            )
        elif isinstance(value, list) and not spec.accepts_list:
            diagnostics.warn(
                "FETCHXML_VALUE_ARITY",
                f"Operator '{spec.value}' takes a single value, got {len(value)} (condition '{label}')",
                element="condition",
                attribute="value",
            )

    if condition.entityname and not is_in_root_filter_scope(tree, condition.id):
        diagnostics.warn(
            "FETCHXML_ENTITYNAME_SCOPE",
            f"Condition '{label}' uses entityname outside the root entity's filters",
            element="condition",
            attribute="entityname",
        )


def validate_query(tree: Optional[FetchNode], *, catalog: Optional[OperatorCatalog] = None) -> Diagnostics:
    """Advisory checks over a built tree; never raises, only warns."""

    diagnostics = Diagnostics()
    if tree is None or getattr(tree, "entity", None) is None:
        return diagnostics
    catalog = catalog or get_catalog()

    for container in _containers(tree):
        name = container.name if isinstance(container, EntityNode) else container.identifier
        if len(container.filters) > 1:
            diagnostics.warn(
                "FETCHXML_MULTIPLE_FILTERS",
                f"'{name}' has {len(container.filters)} top-level filters; only the first is meaningful",
                element=container.type,
            )
        if isinstance(container, LinkEntityNode):
            _check_restrictive_link(container, diagnostics)
            if container.alias and _has_whitespace(container.alias):
                diagnostics.warn(
                    "FETCHXML_INVALID_ALIAS",
                    f"Alias '{container.alias}' must not contain whitespace",
                    element="link-entity",
                    attribute="alias",
                )

    for node in iter_nodes(tree.entity):
        if isinstance(node, AttributeNode):
            if node.alias and _has_whitespace(node.alias):
                diagnostics.warn(
                    "FETCHXML_INVALID_ALIAS",
                    f"Alias '{node.alias}' must not contain whitespace",
                    element="attribute",
                    attribute="alias",
                )
            if (node.aggregate or node.groupby) and not tree.options.aggregate:
                diagnostics.warn(
                    "FETCHXML_AGGREGATE_DISABLED",
                    f"Attribute '{node.name}' uses aggregation but the query is not an aggregate query",
                    element="attribute",
                    attribute="aggregate" if node.aggregate else "groupby",
                )
        elif isinstance(node, ConditionNode):
            _check_condition(tree, node, catalog, diagnostics)

    return diagnostics


__all__ = ["validate_query"]
