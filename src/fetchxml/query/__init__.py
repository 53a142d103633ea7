from .diagnostics import Diagnostic, Diagnostics, ParseResult, Severity, SyntaxCheck
from .ids import IdGenerator, default_id_generator, reset_id_counter
from .nodes import (
    AllAttributesNode,
    AttributeNode,
    ConditionNode,
    EntityNode,
    FetchNode,
    FetchOptions,
    FilterNode,
    LinkEntityNode,
    Node,
    NodeId,
    OrderNode,
)
from .operators import OperatorCatalog, OperatorSpec, get_catalog, operator_requires_value
from .parser import FetchXmlParser, parse_fetch_xml, validate_fetch_xml_syntax
from .serializer import FetchXmlSerializer, serialize_fetch_xml
from .tree import (
    LinkEntityReference,
    ancestor_chain,
    collect_link_references,
    find_node,
    find_owning_entity_name,
    is_in_root_filter_scope,
    iter_nodes,
    node_to_dict,
)
from .validation import validate_query

__all__ = [
    "Diagnostic",
    "Diagnostics",
    "ParseResult",
    "Severity",
    "SyntaxCheck",
    "IdGenerator",
    "default_id_generator",
    "reset_id_counter",
    "AllAttributesNode",
    "AttributeNode",
    "ConditionNode",
    "EntityNode",
    "FetchNode",
    "FetchOptions",
    "FilterNode",
    "LinkEntityNode",
    "Node",
    "NodeId",
    "OrderNode",
    "OperatorCatalog",
    "OperatorSpec",
    "get_catalog",
    "operator_requires_value",
    "FetchXmlParser",
    "parse_fetch_xml",
    "validate_fetch_xml_syntax",
    "FetchXmlSerializer",
    "serialize_fetch_xml",
    "LinkEntityReference",
    "ancestor_chain",
    "collect_link_references",
    "find_node",
    "find_owning_entity_name",
    "is_in_root_filter_scope",
    "iter_nodes",
    "node_to_dict",
    "validate_query",
]
