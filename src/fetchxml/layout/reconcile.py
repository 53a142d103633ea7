"""Keep a grid layout in step with the columns a query projects."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from ..query.nodes import AttributeNode, FetchNode, LinkEntityNode
from .models import DEFAULT_GRID_NAME, LayoutColumn, LayoutConfig

logger = logging.getLogger(__name__)

# (entity logical name, attribute logical name) -> metadata attribute type
AttributeTypeMap = Mapping[Tuple[str, str], str]

DEFAULT_WIDTHS: Dict[str, int] = {
    "String": 200,
    "Memo": 250,
    "Integer": 100,
    "BigInt": 120,
    "Decimal": 120,
    "Double": 120,
    "Money": 130,
    "DateTime": 150,
    "Lookup": 180,
    "Customer": 180,
    "Owner": 180,
    "Picklist": 150,
    "State": 100,
    "Status": 120,
    "MultiSelectPicklist": 200,
    "Boolean": 80,
    "Uniqueidentifier": 280,
    "Image": 60,
    "File": 150,
    "default": 150,
}


def default_width_for_type(attribute_type: Optional[str], widths: Optional[Mapping[str, int]] = None) -> int:
    # Type names compare case-insensitively.
    table = {key.lower(): value for key, value in {**DEFAULT_WIDTHS, **(widths or {})}.items()}
    if not attribute_type:
        return table["default"]
    return table.get(attribute_type.lower(), table["default"])


def _column_key(attribute: AttributeNode, link_alias: Optional[str] = None) -> str:
    if attribute.alias:
        return attribute.alias
    if link_alias:
        return f"{link_alias}.{attribute.name}"
    return attribute.name


def collect_columns_from_query(
    tree: FetchNode,
    attribute_types: Optional[AttributeTypeMap] = None,
    *,
    widths: Optional[Mapping[str, int]] = None,
) -> List[LayoutColumn]:
    """Columns projected by the root entity, then by every joined entity.

    Link-entities nested inside filters only restrict rows and project
    nothing, so they are not visited.
    """

    types = attribute_types or {}
    entity = tree.entity
    columns: List[LayoutColumn] = []

    for attribute in entity.attributes:
        columns.append(
            LayoutColumn(
                name=_column_key(attribute),
                width=default_width_for_type(types.get((entity.name, attribute.name)), widths),
            )
        )

    def visit(link: LinkEntityNode) -> None:
        link_alias = link.alias or link.name
        for attribute in link.attributes:
            columns.append(
                LayoutColumn(
                    name=_column_key(attribute, link_alias),
                    width=default_width_for_type(types.get((link.name, attribute.name)), widths),
                    link_entity_alias=link_alias,
                )
            )
        for nested in link.links:
            visit(nested)

    for link in entity.links:
        visit(link)
    return columns


def generate_default_layout(
    tree: FetchNode,
    attribute_types: Optional[AttributeTypeMap] = None,
    *,
    widths: Optional[Mapping[str, int]] = None,
    grid_name: str = DEFAULT_GRID_NAME,
) -> LayoutConfig:
    columns = collect_columns_from_query(tree, attribute_types, widths=widths)
    return LayoutConfig(
        grid_name=grid_name,
        jump_attribute=columns[0].name if columns else None,
        enable_selection=True,
        show_icon=True,
        enable_preview=True,
        primary_id_attribute=f"{tree.entity.name}id",
        columns=columns,
    )


def merge_layout(
    existing: LayoutConfig,
    tree: FetchNode,
    attribute_types: Optional[AttributeTypeMap] = None,
    *,
    widths: Optional[Mapping[str, int]] = None,
) -> LayoutConfig:
    """Reconcile ``existing`` with the columns ``tree`` now projects.

    Retained columns keep their order and width, new query columns are
    appended in discovery order and columns the query no longer projects are
    dropped.
    """

    query_columns = collect_columns_from_query(tree, attribute_types, widths=widths)
    query_names = {column.name for column in query_columns}
    existing_names = {column.name for column in existing.columns}

    merged = [column for column in existing.columns if column.name in query_names]
    added = [column for column in query_columns if column.name not in existing_names]
    merged.extend(added)

    logger.debug(
        "Merged layout: kept=%d added=%d dropped=%d",
        len(merged) - len(added),
        len(added),
        len(existing.columns) - (len(merged) - len(added)),
    )
    return existing.model_copy(update={"columns": merged})


def is_layout_consistent(layout: LayoutConfig, tree: FetchNode) -> bool:
    """Every query column is present in the layout; extra layout columns are fine."""
    layout_names = set(layout.column_names())
    return all(column.name in layout_names for column in collect_columns_from_query(tree))


def update_column_width(config: LayoutConfig, column_name: str, width: int) -> LayoutConfig:
    if not any(column.name == column_name and column.width != width for column in config.columns):
        return config
    columns = [
        column.model_copy(update={"width": width}) if column.name == column_name else column
        for column in config.columns
    ]
    return config.model_copy(update={"columns": columns})


def reorder_columns(config: LayoutConfig, from_index: int, to_index: int) -> LayoutConfig:
    size = len(config.columns)
    if from_index == to_index or not (0 <= from_index < size) or not (0 <= to_index < size):
        return config
    columns = list(config.columns)
    moved = columns.pop(from_index)
    columns.insert(to_index, moved)
    return config.model_copy(update={"columns": columns})


__all__ = [
    "AttributeTypeMap",
    "DEFAULT_WIDTHS",
    "default_width_for_type",
    "collect_columns_from_query",
    "generate_default_layout",
    "merge_layout",
    "is_layout_consistent",
    "update_column_width",
    "reorder_columns",
]
