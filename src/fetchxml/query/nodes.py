"""Tree model for FetchXML queries.

Every node carries a process-unique ``id`` and a ``type`` discriminant. Field
declaration order is the order the serializer emits XML attributes in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union

NodeId = str

Scalar = Union[str, int, float, bool]
ConditionValue = Union[Scalar, List[Scalar], None]

AttributeAggregate = Literal["sum", "count", "countcolumn", "min", "max", "avg", "rowaggregate"]
ConditionAggregate = Literal["sum", "count", "countcolumn", "min", "max", "avg"]
DateGrouping = Literal["day", "week", "month", "quarter", "year", "fiscal-period", "fiscal-year"]
Conjunction = Literal["and", "or"]
FilterHint = Literal["union"]
LinkType = Literal[
    "inner",
    "outer",
    "any",
    "not any",
    "all",
    "not all",
    "exists",
    "in",
    "matchfirstrowusingcrossapply",
]

ATTRIBUTE_AGGREGATES: tuple[str, ...] = ("sum", "count", "countcolumn", "min", "max", "avg", "rowaggregate")
CONDITION_AGGREGATES: tuple[str, ...] = ("sum", "count", "countcolumn", "min", "max", "avg")
DATE_GROUPINGS: tuple[str, ...] = ("day", "week", "month", "quarter", "year", "fiscal-period", "fiscal-year")
CONJUNCTIONS: tuple[str, ...] = ("and", "or")
FILTER_HINTS: tuple[str, ...] = ("union",)
LINK_TYPES: tuple[str, ...] = (
    "inner",
    "outer",
    "any",
    "not any",
    "all",
    "not all",
    "exists",
    "in",
    "matchfirstrowusingcrossapply",
)
# Link types that only test for (non-)existence and must stay childless.
RESTRICTIVE_LINK_TYPES: tuple[str, ...] = ("not any", "not all")


@dataclass
class AllAttributesNode:
    id: NodeId
    enabled: bool = True
    type: Literal["all-attributes"] = field(default="all-attributes", init=False)


@dataclass
class AttributeNode:
    id: NodeId
    name: str
    alias: Optional[str] = None
    aggregate: Optional[AttributeAggregate] = None
    groupby: bool = False
    dategrouping: Optional[DateGrouping] = None
    usertimezone: Optional[bool] = None
    type: Literal["attribute"] = field(default="attribute", init=False)


@dataclass
class OrderNode:
    id: NodeId
    attribute: str
    alias: Optional[str] = None
    descending: bool = False
    entityname: Optional[str] = None
    type: Literal["order"] = field(default="order", init=False)


@dataclass
class ConditionNode:
    id: NodeId
    attribute: str
    operator: str = "eq"
    entityname: Optional[str] = None
    aggregate: Optional[ConditionAggregate] = None
    valueof: Optional[str] = None
    value: ConditionValue = None
    type: Literal["condition"] = field(default="condition", init=False)


@dataclass
class FilterNode:
    id: NodeId
    conjunction: Conjunction = "and"
    hint: Optional[FilterHint] = None
    is_quick_find_fields: bool = False
    conditions: List[ConditionNode] = field(default_factory=list)
    subfilters: List["FilterNode"] = field(default_factory=list)
    links: List["LinkEntityNode"] = field(default_factory=list)
    type: Literal["filter"] = field(default="filter", init=False)


@dataclass
class LinkEntityNode:
    id: NodeId
    name: str
    from_: str = ""
    to: str = ""
    link_type: LinkType = "inner"
    alias: Optional[str] = None
    intersect: bool = False
    visible: Optional[bool] = None
    all_attributes: Optional[AllAttributesNode] = None
    attributes: List[AttributeNode] = field(default_factory=list)
    orders: List[OrderNode] = field(default_factory=list)
    filters: List[FilterNode] = field(default_factory=list)
    links: List["LinkEntityNode"] = field(default_factory=list)
    type: Literal["link-entity"] = field(default="link-entity", init=False)

    @property
    def identifier(self) -> str:
        """Value usable in ``entityname=`` references: alias, else logical name."""
        return self.alias or self.name


@dataclass
class EntityNode:
    id: NodeId
    name: str
    enable_prefiltering: bool = False
    prefilter_parameter_name: Optional[str] = None
    all_attributes: Optional[AllAttributesNode] = None
    attributes: List[AttributeNode] = field(default_factory=list)
    orders: List[OrderNode] = field(default_factory=list)
    filters: List[FilterNode] = field(default_factory=list)
    links: List[LinkEntityNode] = field(default_factory=list)
    type: Literal["entity"] = field(default="entity", init=False)


@dataclass
class FetchOptions:
    aggregate: bool = False
    distinct: bool = False
    top: Optional[int] = None
    count: Optional[int] = None
    page: Optional[int] = None
    return_total_record_count: bool = False
    no_lock: bool = False
    utc_offset: Optional[int] = None
    paging_cookie: Optional[str] = None
    late_materialize: bool = False


@dataclass
class FetchNode:
    id: NodeId
    entity: EntityNode
    options: FetchOptions = field(default_factory=FetchOptions)
    type: Literal["fetch"] = field(default="fetch", init=False)


EntityLike = Union[EntityNode, LinkEntityNode]
Node = Union[
    FetchNode,
    EntityNode,
    AttributeNode,
    AllAttributesNode,
    OrderNode,
    FilterNode,
    ConditionNode,
    LinkEntityNode,
]

__all__ = [
    "NodeId",
    "Scalar",
    "ConditionValue",
    "AttributeAggregate",
    "ConditionAggregate",
    "DateGrouping",
    "Conjunction",
    "FilterHint",
    "LinkType",
    "ATTRIBUTE_AGGREGATES",
    "CONDITION_AGGREGATES",
    "DATE_GROUPINGS",
    "CONJUNCTIONS",
    "FILTER_HINTS",
    "LINK_TYPES",
    "RESTRICTIVE_LINK_TYPES",
    "AllAttributesNode",
    "AttributeNode",
    "OrderNode",
    "ConditionNode",
    "FilterNode",
    "LinkEntityNode",
    "EntityNode",
    "FetchOptions",
    "FetchNode",
    "EntityLike",
    "Node",
]
