from .document import DEFAULT_COLUMN_WIDTH, parse_layout_xml, serialize_layout_xml
from .models import DEFAULT_GRID_NAME, LayoutColumn, LayoutConfig
from .reconcile import (
    DEFAULT_WIDTHS,
    AttributeTypeMap,
    collect_columns_from_query,
    default_width_for_type,
    generate_default_layout,
    is_layout_consistent,
    merge_layout,
    reorder_columns,
    update_column_width,
)

__all__ = [
    "DEFAULT_COLUMN_WIDTH",
    "DEFAULT_GRID_NAME",
    "DEFAULT_WIDTHS",
    "AttributeTypeMap",
    "LayoutColumn",
    "LayoutConfig",
    "parse_layout_xml",
    "serialize_layout_xml",
    "collect_columns_from_query",
    "default_width_for_type",
    "generate_default_layout",
    "is_layout_consistent",
    "merge_layout",
    "reorder_columns",
    "update_column_width",
]
