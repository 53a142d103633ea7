from __future__ import annotations

from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

from .nodes import (
    AttributeNode,
    ConditionNode,
    EntityLike,
    EntityNode,
    FetchNode,
    FilterNode,
    LinkEntityNode,
    OrderNode,
)
from .values import format_number, format_value

_ATTR_ENTITIES = {'"': "&quot;", "'": "&apos;", "\n": "&#10;", "\r": "&#13;", "\t": "&#9;"}

Attr = Tuple[str, str]


def _attr_value(value: str) -> str:
    return escape(value, _ATTR_ENTITIES)


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


def _open(name: str, attrs: List[Attr], *, close: bool = False) -> str:
    rendered = "".join(f' {key}="{_attr_value(value)}"' for key, value in attrs)
    return f"<{name}{rendered} />" if close else f"<{name}{rendered}>"


class FetchXmlSerializer:
    """Renders a node tree as canonical FetchXML text.

    Optional fields are only emitted when set, in model declaration order, so
    serializing an unchanged tree is byte-stable.
    """

    def __init__(self, indent: int = 2, include_primary_id: bool = False) -> None:
        self.indent = " " * indent
        self.include_primary_id = include_primary_id

    def serialize(self, tree: FetchNode) -> str:
        lines: List[str] = []
        options = tree.options
        attrs: List[Attr] = []
        if options.aggregate:
            attrs.append(("aggregate", "true"))
        if options.distinct:
            attrs.append(("distinct", "true"))
        if options.top is not None:
            attrs.append(("top", format_number(options.top)))
        if options.count is not None:
            attrs.append(("count", format_number(options.count)))
        if options.page is not None:
            attrs.append(("page", format_number(options.page)))
        if options.return_total_record_count:
            attrs.append(("returntotalrecordcount", "true"))
        if options.no_lock:
            attrs.append(("no-lock", "true"))
        if options.utc_offset is not None:
            attrs.append(("utc-offset", format_number(options.utc_offset)))
        if options.paging_cookie:
            attrs.append(("paging-cookie", options.paging_cookie))
        if options.late_materialize:
            attrs.append(("latematerialize", "true"))

        lines.append(_open("fetch", attrs))
        self._entity(tree.entity, 1, lines)
        lines.append("</fetch>")
        return "\n".join(lines)

    def _pad(self, depth: int) -> str:
        return self.indent * depth

    def _entity(self, entity: EntityNode, depth: int, lines: List[str]) -> None:
        attrs: List[Attr] = [("name", entity.name)]
        if entity.enable_prefiltering:
            attrs.append(("enableprefiltering", "true"))
        if entity.prefilter_parameter_name:
            attrs.append(("prefilterparametername", entity.prefilter_parameter_name))
        lines.append(self._pad(depth) + _open("entity", attrs))

        if self.include_primary_id:
            primary_id = f"{entity.name}id"
            selected = any(attr.name == primary_id for attr in entity.attributes)
            has_all = entity.all_attributes is not None and entity.all_attributes.enabled
            if not (selected or has_all):
                lines.append(self._pad(depth + 1) + _open("attribute", [("name", primary_id)], close=True))

        self._children(entity, depth + 1, lines)
        lines.append(self._pad(depth) + "</entity>")

    def _children(self, node: EntityLike, depth: int, lines: List[str]) -> None:
        if node.all_attributes is not None and node.all_attributes.enabled:
            lines.append(self._pad(depth) + "<all-attributes />")
        for attribute in node.attributes:
            lines.append(self._pad(depth) + self._attribute(attribute))
        for order in node.orders:
            lines.append(self._pad(depth) + self._order(order))
        for filter_node in node.filters:
            self._filter(filter_node, depth, lines)
        for link in node.links:
            self._link_entity(link, depth, lines)

    def _attribute(self, attribute: AttributeNode) -> str:
        attrs: List[Attr] = [("name", attribute.name)]
        if attribute.alias:
            attrs.append(("alias", attribute.alias))
        if attribute.aggregate:
            attrs.append(("aggregate", attribute.aggregate))
        if attribute.groupby:
            attrs.append(("groupby", "true"))
        if attribute.dategrouping:
            attrs.append(("dategrouping", attribute.dategrouping))
        if attribute.usertimezone is not None:
            attrs.append(("usertimezone", _bool_text(attribute.usertimezone)))
        return _open("attribute", attrs, close=True)

    def _order(self, order: OrderNode) -> str:
        attrs: List[Attr] = []
        if order.attribute or not order.alias:
            attrs.append(("attribute", order.attribute))
        if order.alias:
            attrs.append(("alias", order.alias))
        if order.descending:
            attrs.append(("descending", "true"))
        if order.entityname:
            attrs.append(("entityname", order.entityname))
        return _open("order", attrs, close=True)

    def _filter(self, node: FilterNode, depth: int, lines: List[str]) -> None:
        attrs: List[Attr] = [("type", node.conjunction)]
        if node.hint:
            attrs.append(("hint", node.hint))
        if node.is_quick_find_fields:
            attrs.append(("isquickfindfields", "true"))
        lines.append(self._pad(depth) + _open("filter", attrs))
        for condition in node.conditions:
            self._condition(condition, depth + 1, lines)
        for subfilter in node.subfilters:
            self._filter(subfilter, depth + 1, lines)
        for link in node.links:
            self._link_entity(link, depth + 1, lines)
        lines.append(self._pad(depth) + "</filter>")

    def _condition(self, node: ConditionNode, depth: int, lines: List[str]) -> None:
        pad = self._pad(depth)
        attrs: List[Attr] = [("attribute", node.attribute), ("operator", node.operator)]
        if node.entityname:
            attrs.append(("entityname", node.entityname))
        if node.aggregate:
            attrs.append(("aggregate", node.aggregate))
        if node.valueof:
            attrs.append(("valueof", node.valueof))

        if isinstance(node.value, list):
            items = [item for item in node.value if item is not None]
            if items:
                lines.append(pad + _open("condition", attrs))
                for item in items:
                    lines.append(f"{pad}{self.indent}<value>{escape(format_value(item))}</value>")
                lines.append(pad + "</condition>")
                return
        elif node.value is not None:
            attrs.append(("value", format_value(node.value)))
        lines.append(pad + _open("condition", attrs, close=True))

    def _link_entity(self, link: LinkEntityNode, depth: int, lines: List[str]) -> None:
        attrs: List[Attr] = [("name", link.name), ("from", link.from_), ("to", link.to)]
        if link.link_type != "inner":
            attrs.append(("link-type", link.link_type))
        if link.alias:
            attrs.append(("alias", link.alias))
        if link.intersect:
            attrs.append(("intersect", "true"))
        if link.visible is not None:
            attrs.append(("visible", _bool_text(link.visible)))
        lines.append(self._pad(depth) + _open("link-entity", attrs))
        self._children(link, depth + 1, lines)
        lines.append(self._pad(depth) + "</link-entity>")


def serialize_fetch_xml(
    tree: FetchNode,
    *,
    indent: int = 2,
    include_primary_id: bool = False,
    serializer: Optional[FetchXmlSerializer] = None,
) -> str:
    """Render ``tree`` as FetchXML text."""

    serializer = serializer or FetchXmlSerializer(indent=indent, include_primary_id=include_primary_id)
    return serializer.serialize(tree)


__all__ = ["FetchXmlSerializer", "serialize_fetch_xml"]
