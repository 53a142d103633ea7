from pydantic import __version__ as _pydantic_version

# The layout and settings models rely on the Pydantic v2 API (model_copy, ConfigDict).
if not _pydantic_version.startswith("2"):
    raise ImportError(
        "fetchxml requires pydantic>=2.0; detected version %s" % _pydantic_version
    )

from .errors import FetchXmlError, LayoutXmlError, SettingsError
from .layout import (
    LayoutColumn,
    LayoutConfig,
    collect_columns_from_query,
    generate_default_layout,
    is_layout_consistent,
    merge_layout,
    parse_layout_xml,
    reorder_columns,
    serialize_layout_xml,
    update_column_width,
)
from .query import (
    FetchNode,
    IdGenerator,
    ParseResult,
    collect_link_references,
    find_owning_entity_name,
    is_in_root_filter_scope,
    parse_fetch_xml,
    serialize_fetch_xml,
    validate_fetch_xml_syntax,
    validate_query,
)

__all__ = [
    "FetchXmlError",
    "LayoutXmlError",
    "SettingsError",
    "LayoutColumn",
    "LayoutConfig",
    "collect_columns_from_query",
    "generate_default_layout",
    "is_layout_consistent",
    "merge_layout",
    "parse_layout_xml",
    "reorder_columns",
    "serialize_layout_xml",
    "update_column_width",
    "FetchNode",
    "IdGenerator",
    "ParseResult",
    "collect_link_references",
    "find_owning_entity_name",
    "is_in_root_filter_scope",
    "parse_fetch_xml",
    "serialize_fetch_xml",
    "validate_fetch_xml_syntax",
    "validate_query",
]
