from fetchxml.query.operators import (
    OperatorCatalog,
    common_operators,
    get_catalog,
    operator_requires_value,
    operators_for_attribute_type,
)


def names(specs):
    return [spec.value for spec in specs]


def test_requires_value():
    assert operator_requires_value("eq")
    assert not operator_requires_value("null")
    assert not operator_requires_value("today")
    assert not operator_requires_value("eq-userid")
    assert operator_requires_value("last-x-days")


def test_unknown_operator_is_assumed_to_take_a_value():
    assert "made-up" not in get_catalog()
    assert operator_requires_value("made-up")


def test_arity_flags():
    catalog = get_catalog()
    between = catalog.get("between")
    assert between.requires_two_values and between.accepts_list
    assert catalog.get("in").requires_multiple_values
    assert not catalog.get("eq").accepts_list


def test_operators_for_string_type():
    string_ops = names(operators_for_attribute_type("StringType"))
    assert "like" in string_ops
    assert "begins-with" in string_ops
    assert "lt" not in string_ops
    assert names(operators_for_attribute_type("string")) == string_ops


def test_operators_for_datetime_type():
    date_ops = names(operators_for_attribute_type("DateTime"))
    assert {"today", "last-x-days", "on-or-after", "in-fiscal-period-and-year"} <= set(date_ops)
    assert "like" not in date_ops


def test_unknown_or_missing_type_falls_back_to_everything():
    everything = names(get_catalog().operators.values())
    assert names(operators_for_attribute_type("Virtual")) == everything
    assert names(operators_for_attribute_type(None)) == everything


def test_common_operators_are_ordered():
    common = names(common_operators())
    assert common[:6] == ["eq", "ne", "lt", "le", "gt", "ge"]
    assert "null" in common


def test_catalog_from_rows():
    catalog = OperatorCatalog.from_rows(
        [
            {"value": "eq", "label": "Equals", "applicable_types": ["String"]},
            {"value": "blank", "requires_value": False},
        ]
    )
    assert catalog.requires_value("eq")
    assert not catalog.requires_value("blank")
    assert catalog.get("blank").label == "blank"
    assert catalog.common() == [catalog.get("eq")]
    assert names(catalog.for_attribute_type("String")) == ["eq"]
