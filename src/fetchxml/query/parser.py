from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple
from xml.etree.ElementTree import Element

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError, fromstring

from .diagnostics import Diagnostics, ParseResult, Severity, SyntaxCheck
from .ids import IdGenerator, default_id_generator
from .nodes import (
    ATTRIBUTE_AGGREGATES,
    CONDITION_AGGREGATES,
    CONJUNCTIONS,
    DATE_GROUPINGS,
    FILTER_HINTS,
    LINK_TYPES,
    AllAttributesNode,
    AttributeNode,
    ConditionNode,
    ConditionValue,
    EntityLike,
    EntityNode,
    FetchNode,
    FetchOptions,
    FilterNode,
    LinkEntityNode,
    OrderNode,
    Scalar,
)
from .values import coerce_value_attribute, coerce_value_text

logger = logging.getLogger(__name__)

# Attributes each element may carry. Names listed here but not modelled on the
# tree are accepted without a warning and dropped.
KNOWN_ATTRIBUTES: Dict[str, frozenset[str]] = {
    "fetch": frozenset(
        {
            "aggregate",
            "distinct",
            "top",
            "count",
            "page",
            "paging-cookie",
            "returntotalrecordcount",
            "no-lock",
            "utc-offset",
            "latematerialize",
            "version",
            "mapping",
            "output-format",
            "min-active-row-version",
            "datasource",
            "options",
        }
    ),
    "entity": frozenset({"name", "enableprefiltering", "prefilterparametername"}),
    "all-attributes": frozenset(),
    "attribute": frozenset(
        {"name", "alias", "aggregate", "groupby", "dategrouping", "usertimezone", "distinct"}
    ),
    "order": frozenset({"attribute", "alias", "descending", "entityname"}),
    "filter": frozenset({"type", "hint", "isquickfindfields"}),
    "condition": frozenset(
        {
            "attribute",
            "operator",
            "value",
            "valueof",
            "entityname",
            "aggregate",
            "alias",
            "uiname",
            "uitype",
            "uihidden",
        }
    ),
    "value": frozenset({"uiname", "uitype"}),
    "link-entity": frozenset(
        {
            "name",
            "from",
            "to",
            "alias",
            "link-type",
            "visible",
            "intersect",
            "enableprefiltering",
            "prefilterparametername",
        }
    ),
}

_TRUE_VALUES = {"true", "1"}
_FALSE_VALUES = {"false", "0"}
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _tag(element: Element) -> str:
    tag = element.tag
    return tag.lower() if isinstance(tag, str) else ""


def _get(element: Element, name: str) -> Optional[str]:
    """Case-insensitive attribute lookup."""
    for key, value in element.attrib.items():
        if key.lower() == name:
            return value
    return None


def _has_whitespace(text: str) -> bool:
    return any(ch.isspace() for ch in text)


def _load_document(
    xml_text: object, diagnostics: Diagnostics
) -> Tuple[Optional[Element], Optional[Element]]:
    """Well-formedness plus fetch/entity presence checks.

    Returns the ``<fetch>`` and ``<entity>`` elements, or ``(None, None)``
    after adding the fatal error to ``diagnostics``.
    """

    def fail(code: str, message: str, line: Optional[int] = None, column: Optional[int] = None):
        diagnostics.add(code, message, Severity.ERROR, line=line, column=column)
        return None, None

    if not isinstance(xml_text, str):
        return fail("FETCHXML_EMPTY", "FetchXML string is required")
    text = xml_text.strip()
    if not text:
        return fail("FETCHXML_EMPTY", "FetchXML string is empty")

    try:
        root = fromstring(text)
    except ParseError as exc:
        line, column = getattr(exc, "position", (None, None))
        return fail("FETCHXML_SYNTAX", f"XML Parsing Error: {exc}", line, column)
    except DefusedXmlException as exc:
        return fail("FETCHXML_SYNTAX", f"XML Parsing Error: {exc}")

    if _tag(root) != "fetch":
        return fail("FETCHXML_ROOT", f"Root element must be <fetch>, found <{root.tag}>")

    entities = [child for child in root if _tag(child) == "entity"]
    if not entities:
        return fail("FETCHXML_MISSING_ENTITY", "Missing required <entity> element inside <fetch>")
    if len(entities) > 1:
        return fail(
            "FETCHXML_MULTIPLE_ENTITIES",
            f"Found {len(entities)} <entity> elements inside <fetch>; exactly one is required",
        )

    entity = entities[0]
    if not _get(entity, "name"):
        return fail("FETCHXML_ENTITY_NAME", "Entity element must have a 'name' attribute")
    return root, entity


class FetchXmlParser:
    """Builds a :class:`FetchNode` tree from FetchXML text.

    Malformed XML and a missing ``fetch``/``entity`` skeleton are fatal; every
    other schema deviation becomes a warning and parsing carries on with a
    default.
    """

    def __init__(self, id_generator: Optional[IdGenerator] = None) -> None:
        self.ids = id_generator or default_id_generator
        self.diagnostics = Diagnostics()

    def parse(self, xml_text: str) -> ParseResult:
        self.diagnostics = Diagnostics()
        fetch_element, entity_element = _load_document(xml_text, self.diagnostics)
        if fetch_element is None or entity_element is None:
            return ParseResult(success=False, errors=self.diagnostics.errors())

        try:
            fetch_id = self.ids.next_id()
            options = self._parse_fetch_options(fetch_element)
            entity = self._parse_entity(entity_element)
            tree = FetchNode(id=fetch_id, entity=entity, options=options)
        except Exception as exc:  # pragma: no cover - defensive
            logger.exception("Unexpected failure while building FetchXML tree")
            self.diagnostics.add("FETCHXML_INTERNAL", f"Parsing Error: {exc}", Severity.ERROR)
            return ParseResult(
                success=False,
                errors=self.diagnostics.errors(),
                warnings=self.diagnostics.warnings(),
            )

        warnings = self.diagnostics.warnings()
        logger.debug("Parsed FetchXML for entity %r with %d warning(s)", entity.name, len(warnings))
        return ParseResult(success=True, tree=tree, warnings=warnings)

    # -- helpers -----------------------------------------------------------

    def _attributes(self, element: Element, name: str) -> Dict[str, str]:
        known = KNOWN_ATTRIBUTES.get(name, frozenset())
        attrs: Dict[str, str] = {}
        for key, value in element.attrib.items():
            lowered = key.lower()
            if lowered not in known:
                self.diagnostics.warn(
                    "FETCHXML_UNKNOWN_ATTRIBUTE",
                    f"Unknown attribute '{key}' on <{name}> element",
                    element=name,
                    attribute=key,
                )
            attrs[lowered] = value
        return attrs

    def _unknown_child(self, child: Element, parent: str) -> None:
        tag = _tag(child)
        self.diagnostics.warn(
            "FETCHXML_UNKNOWN_ELEMENT",
            f"Unknown element <{tag}> inside <{parent}>",
            element=tag,
        )

    def _leaf(self, element: Element, name: str) -> None:
        for child in element:
            self._unknown_child(child, name)

    def _bool(self, attrs: Dict[str, str], element: str, name: str) -> Optional[bool]:
        raw = attrs.get(name)
        if raw is None:
            return None
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        self.diagnostics.warn(
            "FETCHXML_INVALID_VALUE",
            f"Invalid boolean value '{raw}' for '{name}'",
            element=element,
            attribute=name,
        )
        return None

    def _int(self, attrs: Dict[str, str], element: str, name: str) -> Optional[int]:
        raw = attrs.get(name)
        if raw is None:
            return None
        text = raw.strip()
        if not _INTEGER.fullmatch(text):
            self.diagnostics.warn(
                "FETCHXML_INVALID_NUMBER",
                f"Invalid '{name}' value: {raw}",
                element=element,
                attribute=name,
            )
            return None
        return int(text)

    def _enum(
        self,
        attrs: Dict[str, str],
        element: str,
        name: str,
        allowed: Iterable[str],
        default: Optional[str] = None,
    ) -> Optional[str]:
        raw = attrs.get(name)
        if not raw:
            return default
        if raw in allowed:
            return raw
        message = f"Invalid {name} value '{raw}'"
        if default is not None:
            message += f", defaulting to '{default}'"
        self.diagnostics.warn("FETCHXML_INVALID_VALUE", message, element=element, attribute=name)
        return default

    def _required(self, attrs: Dict[str, str], element: str, name: str, label: str) -> str:
        value = attrs.get(name) or ""
        if not value:
            self.diagnostics.warn(
                "FETCHXML_MISSING_ATTRIBUTE",
                f"{label} element missing '{name}'",
                element=element,
                attribute=name,
            )
        return value

    def _alias(self, attrs: Dict[str, str], element: str) -> Optional[str]:
        alias = attrs.get("alias") or None
        if alias is not None and _has_whitespace(alias):
            self.diagnostics.warn(
                "FETCHXML_INVALID_VALUE",
                f"Alias '{alias}' must not contain whitespace",
                element=element,
                attribute="alias",
            )
        return alias

    # -- elements ----------------------------------------------------------

    def _parse_fetch_options(self, element: Element) -> FetchOptions:
        attrs = self._attributes(element, "fetch")
        options = FetchOptions(
            aggregate=bool(self._bool(attrs, "fetch", "aggregate")),
            distinct=bool(self._bool(attrs, "fetch", "distinct")),
            top=self._int(attrs, "fetch", "top"),
            count=self._int(attrs, "fetch", "count"),
            page=self._int(attrs, "fetch", "page"),
            return_total_record_count=bool(self._bool(attrs, "fetch", "returntotalrecordcount")),
            no_lock=bool(self._bool(attrs, "fetch", "no-lock")),
            utc_offset=self._int(attrs, "fetch", "utc-offset"),
            paging_cookie=attrs.get("paging-cookie") or None,
            late_materialize=bool(self._bool(attrs, "fetch", "latematerialize")),
        )
        for child in element:
            if _tag(child) != "entity":
                self._unknown_child(child, "fetch")
        return options

    def _parse_entity(self, element: Element) -> EntityNode:
        attrs = self._attributes(element, "entity")
        entity = EntityNode(
            id=self.ids.next_id(),
            name=attrs.get("name") or "",
            enable_prefiltering=bool(self._bool(attrs, "entity", "enableprefiltering")),
            prefilter_parameter_name=attrs.get("prefilterparametername") or None,
        )
        self._parse_entity_children(element, entity, "entity")
        return entity

    def _parse_entity_children(self, element: Element, target: EntityLike, parent: str) -> None:
        for child in element:
            tag = _tag(child)
            if tag == "all-attributes":
                target.all_attributes = self._parse_all_attributes(child)
            elif tag == "attribute":
                target.attributes.append(self._parse_attribute(child))
            elif tag == "order":
                target.orders.append(self._parse_order(child))
            elif tag == "filter":
                target.filters.append(self._parse_filter(child))
            elif tag == "link-entity":
                target.links.append(self._parse_link_entity(child))
            else:
                self._unknown_child(child, parent)

    def _parse_all_attributes(self, element: Element) -> AllAttributesNode:
        self._attributes(element, "all-attributes")
        self._leaf(element, "all-attributes")
        return AllAttributesNode(id=self.ids.next_id())

    def _parse_attribute(self, element: Element) -> AttributeNode:
        attrs = self._attributes(element, "attribute")
        self._leaf(element, "attribute")
        return AttributeNode(
            id=self.ids.next_id(),
            name=self._required(attrs, "attribute", "name", "Attribute"),
            alias=self._alias(attrs, "attribute"),
            aggregate=self._enum(attrs, "attribute", "aggregate", ATTRIBUTE_AGGREGATES),  # type: ignore[arg-type]
            groupby=bool(self._bool(attrs, "attribute", "groupby")),
            dategrouping=self._enum(attrs, "attribute", "dategrouping", DATE_GROUPINGS),  # type: ignore[arg-type]
            usertimezone=self._bool(attrs, "attribute", "usertimezone"),
        )

    def _parse_order(self, element: Element) -> OrderNode:
        attrs = self._attributes(element, "order")
        self._leaf(element, "order")
        alias = attrs.get("alias") or None
        attribute = attrs.get("attribute") or ""
        if not attribute and alias is None:
            self._required(attrs, "order", "attribute", "Order")
        return OrderNode(
            id=self.ids.next_id(),
            attribute=attribute,
            alias=alias,
            descending=bool(self._bool(attrs, "order", "descending")),
            entityname=attrs.get("entityname") or None,
        )

    def _parse_filter(self, element: Element) -> FilterNode:
        attrs = self._attributes(element, "filter")
        node = FilterNode(
            id=self.ids.next_id(),
            conjunction=self._enum(attrs, "filter", "type", CONJUNCTIONS, default="and"),  # type: ignore[arg-type]
            hint=self._enum(attrs, "filter", "hint", FILTER_HINTS),  # type: ignore[arg-type]
            is_quick_find_fields=bool(self._bool(attrs, "filter", "isquickfindfields")),
        )
        for child in element:
            tag = _tag(child)
            if tag == "condition":
                node.conditions.append(self._parse_condition(child))
            elif tag == "filter":
                node.subfilters.append(self._parse_filter(child))
            elif tag == "link-entity":
                node.links.append(self._parse_link_entity(child))
            else:
                self._unknown_child(child, "filter")
        return node

    def _parse_condition(self, element: Element) -> ConditionNode:
        attrs = self._attributes(element, "condition")
        attribute = self._required(attrs, "condition", "attribute", "Condition")
        operator = attrs.get("operator") or ""
        if not operator:
            self.diagnostics.warn(
                "FETCHXML_MISSING_ATTRIBUTE",
                "Condition element missing 'operator', defaulting to 'eq'",
                element="condition",
                attribute="operator",
            )
            operator = "eq"

        node = ConditionNode(
            id=self.ids.next_id(),
            attribute=attribute,
            operator=operator,
            entityname=attrs.get("entityname") or None,
            aggregate=self._enum(attrs, "condition", "aggregate", CONDITION_AGGREGATES),  # type: ignore[arg-type]
            valueof=attrs.get("valueof") or None,
        )
        node.value = self._parse_condition_value(element, attrs)
        return node

    def _parse_condition_value(self, element: Element, attrs: Dict[str, str]) -> ConditionValue:
        values: List[Scalar] = []
        has_value_children = False
        for child in element:
            if _tag(child) != "value":
                self._unknown_child(child, "condition")
                continue
            has_value_children = True
            self._attributes(child, "value")
            self._leaf(child, "value")
            values.append(coerce_value_text("".join(child.itertext()).strip()))

        raw = attrs.get("value")
        if has_value_children:
            if raw is not None:
                self.diagnostics.warn(
                    "FETCHXML_CONFLICTING_VALUE",
                    "Condition has both a 'value' attribute and <value> elements; the attribute is ignored",
                    element="condition",
                    attribute="value",
                )
            return values
        if raw is not None:
            return coerce_value_attribute(raw)
        return None

    def _parse_link_entity(self, element: Element) -> LinkEntityNode:
        attrs = self._attributes(element, "link-entity")
        name = self._required(attrs, "link-entity", "name", "Link-entity")
        from_ = self._required(attrs, "link-entity", "from", "Link-entity")
        to = self._required(attrs, "link-entity", "to", "Link-entity")
        link = LinkEntityNode(
            id=self.ids.next_id(),
            name=name,
            from_=from_,
            to=to,
            link_type=self._enum(attrs, "link-entity", "link-type", LINK_TYPES, default="inner"),  # type: ignore[arg-type]
            alias=self._alias(attrs, "link-entity"),
            intersect=bool(self._bool(attrs, "link-entity", "intersect")),
            visible=self._bool(attrs, "link-entity", "visible"),
        )
        self._parse_entity_children(element, link, "link-entity")
        return link


def parse_fetch_xml(xml_text: str, *, id_generator: Optional[IdGenerator] = None) -> ParseResult:
    """Parse FetchXML text into a node tree plus warnings (or fatal errors)."""

    return FetchXmlParser(id_generator).parse(xml_text)


def validate_fetch_xml_syntax(xml_text: str) -> SyntaxCheck:
    """Cheap editor-side check: well-formed XML with a named fetch/entity pair."""

    diagnostics = Diagnostics()
    fetch_element, _ = _load_document(xml_text, diagnostics)
    if fetch_element is None:
        return SyntaxCheck(valid=False, error=diagnostics.errors()[0].message)
    return SyntaxCheck(valid=True)


__all__ = ["KNOWN_ATTRIBUTES", "FetchXmlParser", "parse_fetch_xml", "validate_fetch_xml_syntax"]
