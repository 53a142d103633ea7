from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

_ALL_TYPES = (
    "String",
    "Memo",
    "Integer",
    "BigInt",
    "Decimal",
    "Double",
    "Money",
    "DateTime",
    "Boolean",
    "Picklist",
    "State",
    "Status",
    "Lookup",
    "Customer",
    "Owner",
    "Uniqueidentifier",
)
_EQUALITY_TYPES = tuple(t for t in _ALL_TYPES if t != "Memo")
_ORDERED_TYPES = ("Integer", "BigInt", "Decimal", "Double", "Money", "DateTime")
_TEXT_TYPES = ("String", "Memo")
_LIST_TYPES = (
    "String",
    "Integer",
    "BigInt",
    "Decimal",
    "Double",
    "Money",
    "Picklist",
    "State",
    "Status",
    "Lookup",
    "Customer",
    "Owner",
    "Uniqueidentifier",
)
_CHOICE_TYPES = ("Picklist", "State", "Status")
_DATE = ("DateTime",)
_USER_TYPES = ("Lookup", "Owner", "Customer", "Uniqueidentifier")
_HIERARCHY_TYPES = ("Lookup", "Uniqueidentifier")


def _row(
    value: str,
    label: str,
    types: Tuple[str, ...],
    *,
    requires_value: bool = True,
    two: bool = False,
    multiple: bool = False,
    value_type: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "value": value,
        "label": label,
        "requires_value": requires_value,
        "requires_two_values": two,
        "requires_multiple_values": multiple,
        "value_type": value_type,
        "applicable_types": list(types),
    }


_STATIC_CATALOG: List[Dict[str, Any]] = [
    _row("eq", "Equals", _EQUALITY_TYPES),
    _row("ne", "Not Equals", _EQUALITY_TYPES),
    _row("lt", "Less Than", _ORDERED_TYPES),
    _row("le", "Less Than or Equal", _ORDERED_TYPES),
    _row("gt", "Greater Than", _ORDERED_TYPES),
    _row("ge", "Greater Than or Equal", _ORDERED_TYPES),
    _row("like", "Like (pattern)", _TEXT_TYPES),
    _row("not-like", "Not Like", _TEXT_TYPES),
    _row("begins-with", "Begins With", _TEXT_TYPES),
    _row("ends-with", "Ends With", _TEXT_TYPES),
    _row("not-begin-with", "Does Not Begin With", _TEXT_TYPES),
    _row("not-end-with", "Does Not End With", _TEXT_TYPES),
    _row("in", "In (list)", _LIST_TYPES, multiple=True, value_type="string"),
    _row("not-in", "Not In (list)", _LIST_TYPES, multiple=True, value_type="string"),
    _row("between", "Between (range)", _ORDERED_TYPES, two=True, value_type="number"),
    _row("not-between", "Not Between", _ORDERED_TYPES, two=True, value_type="number"),
    _row("null", "Is Null", _ALL_TYPES, requires_value=False),
    _row("not-null", "Is Not Null", _ALL_TYPES, requires_value=False),
    _row("contain-values", "Contains Values", _CHOICE_TYPES, multiple=True, value_type="number"),
    _row("not-contain-values", "Not Contain Values", _CHOICE_TYPES, multiple=True, value_type="number"),
    _row("yesterday", "Yesterday", _DATE, requires_value=False),
    _row("today", "Today", _DATE, requires_value=False),
    _row("tomorrow", "Tomorrow", _DATE, requires_value=False),
    _row("last-week", "Last Week", _DATE, requires_value=False),
    _row("this-week", "This Week", _DATE, requires_value=False),
    _row("next-week", "Next Week", _DATE, requires_value=False),
    _row("last-seven-days", "Last Seven Days", _DATE, requires_value=False),
    _row("next-seven-days", "Next Seven Days", _DATE, requires_value=False),
    _row("last-month", "Last Month", _DATE, requires_value=False),
    _row("this-month", "This Month", _DATE, requires_value=False),
    _row("next-month", "Next Month", _DATE, requires_value=False),
    _row("last-year", "Last Year", _DATE, requires_value=False),
    _row("this-year", "This Year", _DATE, requires_value=False),
    _row("next-year", "Next Year", _DATE, requires_value=False),
    _row("last-x-hours", "Last X Hours", _DATE, value_type="number"),
    _row("next-x-hours", "Next X Hours", _DATE, value_type="number"),
    _row("last-x-days", "Last X Days", _DATE, value_type="number"),
    _row("next-x-days", "Next X Days", _DATE, value_type="number"),
    _row("last-x-weeks", "Last X Weeks", _DATE, value_type="number"),
    _row("next-x-weeks", "Next X Weeks", _DATE, value_type="number"),
    _row("last-x-months", "Last X Months", _DATE, value_type="number"),
    _row("next-x-months", "Next X Months", _DATE, value_type="number"),
    _row("last-x-years", "Last X Years", _DATE, value_type="number"),
    _row("next-x-years", "Next X Years", _DATE, value_type="number"),
    _row("on", "On (specific date)", _DATE, value_type="date"),
    _row("on-or-before", "On or Before", _DATE, value_type="date"),
    _row("on-or-after", "On or After", _DATE, value_type="date"),
    _row("olderthan-x-minutes", "Older Than X Minutes", _DATE, value_type="number"),
    _row("olderthan-x-hours", "Older Than X Hours", _DATE, value_type="number"),
    _row("olderthan-x-days", "Older Than X Days", _DATE, value_type="number"),
    _row("olderthan-x-weeks", "Older Than X Weeks", _DATE, value_type="number"),
    _row("olderthan-x-months", "Older Than X Months", _DATE, value_type="number"),
    _row("olderthan-x-years", "Older Than X Years", _DATE, value_type="number"),
    _row("this-fiscal-year", "This Fiscal Year", _DATE, requires_value=False),
    _row("this-fiscal-period", "This Fiscal Period", _DATE, requires_value=False),
    _row("next-fiscal-year", "Next Fiscal Year", _DATE, requires_value=False),
    _row("next-fiscal-period", "Next Fiscal Period", _DATE, requires_value=False),
    _row("last-fiscal-year", "Last Fiscal Year", _DATE, requires_value=False),
    _row("last-fiscal-period", "Last Fiscal Period", _DATE, requires_value=False),
    _row("last-x-fiscal-years", "Last X Fiscal Years", _DATE, value_type="number"),
    _row("last-x-fiscal-periods", "Last X Fiscal Periods", _DATE, value_type="number"),
    _row("next-x-fiscal-years", "Next X Fiscal Years", _DATE, value_type="number"),
    _row("next-x-fiscal-periods", "Next X Fiscal Periods", _DATE, value_type="number"),
    _row("in-fiscal-year", "In Fiscal Year", _DATE, value_type="number"),
    _row("in-fiscal-period", "In Fiscal Period", _DATE, value_type="number"),
    _row("in-fiscal-period-and-year", "In Fiscal Period and Year", _DATE, two=True, value_type="number"),
    _row(
        "in-or-before-fiscal-period-and-year",
        "In or Before Fiscal Period and Year",
        _DATE,
        two=True,
        value_type="number",
    ),
    _row(
        "in-or-after-fiscal-period-and-year",
        "In or After Fiscal Period and Year",
        _DATE,
        two=True,
        value_type="number",
    ),
    _row("eq-userid", "Equals Current User", _USER_TYPES, requires_value=False),
    _row("ne-userid", "Not Equals Current User", _USER_TYPES, requires_value=False),
    _row("eq-businessid", "Equals Current Business Unit", _HIERARCHY_TYPES, requires_value=False),
    _row("ne-businessid", "Not Equals Current Business Unit", _HIERARCHY_TYPES, requires_value=False),
    _row("eq-userteams", "Equals User Teams", _USER_TYPES, requires_value=False),
    _row("eq-useroruserteams", "Equals User or User Teams", _USER_TYPES, requires_value=False),
    _row("eq-useroruserhierarchy", "Equals User or User Hierarchy", _USER_TYPES, requires_value=False),
    _row(
        "eq-useroruserhierarchyandteams",
        "Equals User or User Hierarchy and Teams",
        _USER_TYPES,
        requires_value=False,
    ),
    _row("eq-userlanguage", "Equals User Language", ("Integer",), requires_value=False),
    _row("under", "Under (hierarchy)", _HIERARCHY_TYPES, value_type="guid"),
    _row("not-under", "Not Under (hierarchy)", _HIERARCHY_TYPES, value_type="guid"),
    _row("above", "Above (hierarchy)", _HIERARCHY_TYPES, value_type="guid"),
    _row("eq-or-under", "Equals or Under (hierarchy)", _HIERARCHY_TYPES, value_type="guid"),
    _row("eq-or-above", "Equals or Above (hierarchy)", _HIERARCHY_TYPES, value_type="guid"),
]

COMMON_OPERATORS: Tuple[str, ...] = (
    "eq",
    "ne",
    "lt",
    "le",
    "gt",
    "ge",
    "like",
    "begins-with",
    "in",
    "not-in",
    "between",
    "null",
    "not-null",
    "today",
    "yesterday",
    "tomorrow",
    "this-week",
    "this-month",
    "this-year",
    "last-x-days",
    "next-x-days",
    "eq-userid",
    "ne-userid",
)


@dataclass(frozen=True)
class OperatorSpec:
    value: str
    label: str
    requires_value: bool = True
    requires_two_values: bool = False
    requires_multiple_values: bool = False
    value_type: Optional[str] = None
    applicable_types: Tuple[str, ...] = ()

    @property
    def accepts_list(self) -> bool:
        return self.requires_two_values or self.requires_multiple_values


@dataclass
class OperatorCatalog:
    """Lookup table from operator name to value arity and applicable types.

    Operators are an open set: names missing from the catalog are still legal
    in a tree, they just have no arity information.
    """

    operators: Dict[str, OperatorSpec] = field(default_factory=dict)

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, Any]]) -> "OperatorCatalog":
        operators: Dict[str, OperatorSpec] = {}
        for row in rows:
            value = str(row["value"])
            operators[value] = OperatorSpec(
                value=value,
                label=str(row.get("label", value)),
                requires_value=bool(row.get("requires_value", True)),
                requires_two_values=bool(row.get("requires_two_values", False)),
                requires_multiple_values=bool(row.get("requires_multiple_values", False)),
                value_type=row.get("value_type"),
                applicable_types=tuple(row.get("applicable_types") or ()),
            )
        return cls(operators=operators)

    @classmethod
    def default(cls) -> "OperatorCatalog":
        return cls.from_rows(_STATIC_CATALOG)

    def get(self, operator: str) -> Optional[OperatorSpec]:
        return self.operators.get(operator)

    def __contains__(self, operator: object) -> bool:
        return operator in self.operators

    def requires_value(self, operator: str) -> bool:
        # Unknown operators are assumed to take a value.
        spec = self.get(operator)
        return spec.requires_value if spec is not None else True

    def for_attribute_type(self, attribute_type: Optional[str]) -> List[OperatorSpec]:
        """Operators applicable to a metadata attribute type.

        ``StringType``-style names are accepted. Unknown or missing types fall
        back to the whole catalog.
        """

        everything = list(self.operators.values())
        if not attribute_type:
            return everything
        normalized = attribute_type[:-4] if attribute_type.endswith("Type") else attribute_type
        normalized = normalized.lower()
        matching = [
            spec
            for spec in everything
            if any(t.lower() == normalized for t in spec.applicable_types)
        ]
        return matching or everything

    def common(self) -> List[OperatorSpec]:
        return [self.operators[name] for name in COMMON_OPERATORS if name in self.operators]


_DEFAULT_CATALOG: Optional[OperatorCatalog] = None


def get_catalog() -> OperatorCatalog:
    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is None:
        _DEFAULT_CATALOG = OperatorCatalog.default()
    return _DEFAULT_CATALOG


def operator_requires_value(operator: str) -> bool:
    return get_catalog().requires_value(operator)


def operators_for_attribute_type(attribute_type: Optional[str]) -> List[OperatorSpec]:
    return get_catalog().for_attribute_type(attribute_type)


def common_operators() -> List[OperatorSpec]:
    return get_catalog().common()


__all__ = [
    "COMMON_OPERATORS",
    "OperatorSpec",
    "OperatorCatalog",
    "get_catalog",
    "operator_requires_value",
    "operators_for_attribute_type",
    "common_operators",
]
