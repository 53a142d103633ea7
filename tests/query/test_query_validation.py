import pytest

from fetchxml.query import OperatorCatalog, parse_fetch_xml, validate_query


def codes_for(xml, **kwargs):
    result = parse_fetch_xml(xml)
    assert result.success
    diagnostics = validate_query(result.tree, **kwargs)
    assert not diagnostics.has_errors()
    return [message.code for message in diagnostics.messages]


def in_filter(condition, *, fetch_attrs=""):
    return f'<fetch{fetch_attrs}><entity name="account"><filter>{condition}</filter></entity></fetch>'


def test_clean_query_has_no_findings():
    xml = in_filter(
        '<condition attribute="name" operator="eq" value="x" />'
        '<condition attribute="revenue" operator="between"><value>1</value><value>2</value></condition>'
        '<condition attribute="statecode" operator="in" value="0" />'
        '<condition attribute="name" operator="eq" valueof="accountnumber" />'
        '<condition attribute="createdon" operator="today" />'
    )
    assert codes_for(xml) == []


def test_missing_tree_has_no_findings():
    assert len(validate_query(None)) == 0


@pytest.mark.parametrize(
    "condition, code",
    [
        ('<condition attribute="x" operator="sounds-like" value="a" />', "FETCHXML_UNKNOWN_OPERATOR"),
        ('<condition attribute="x" operator="null" value="a" />', "FETCHXML_UNEXPECTED_VALUE"),
        ('<condition attribute="x" operator="eq" />', "FETCHXML_MISSING_VALUE"),
        ('<condition attribute="x" operator="in" />', "FETCHXML_MISSING_VALUE"),
        ('<condition attribute="x" operator="between" value="1" />', "FETCHXML_VALUE_ARITY"),
        (
            '<condition attribute="x" operator="between"><value>1</value><value>2</value><value>3</value></condition>',
            "FETCHXML_VALUE_ARITY",
        ),
        ('<condition attribute="x" operator="eq"><value>1</value><value>2</value></condition>', "FETCHXML_VALUE_ARITY"),
    ],
)
def test_condition_value_findings(condition, code):
    assert codes_for(in_filter(condition)) == [code]


def test_custom_catalog_controls_operator_knowledge():
    catalog = OperatorCatalog.from_rows([{"value": "sounds-like"}])
    xml = in_filter('<condition attribute="x" operator="sounds-like" value="a" />')
    assert codes_for(xml, catalog=catalog) == []


def test_entityname_outside_root_filter():
    xml = (
        '<fetch><entity name="account">'
        '<filter><condition attribute="fullname" operator="eq" value="a" entityname="c" /></filter>'
        '<link-entity name="contact" from="parentcustomerid" to="accountid" alias="c">'
        '<filter><condition attribute="fullname" operator="eq" value="a" entityname="c" /></filter>'
        "</link-entity></entity></fetch>"
    )
    assert codes_for(xml) == ["FETCHXML_ENTITYNAME_SCOPE"]


@pytest.mark.parametrize("link_type", ["not any", "not all"])
def test_restrictive_link_with_children(link_type):
    xml = (
        '<fetch><entity name="account">'
        f'<link-entity name="contact" from="parentcustomerid" to="accountid" link-type="{link_type}">'
        '<attribute name="fullname" />'
        "</link-entity></entity></fetch>"
    )
    assert codes_for(xml) == ["FETCHXML_RESTRICTED_LINK_CHILDREN"]


def test_restrictive_link_without_children_is_fine():
    xml = (
        '<fetch><entity name="account">'
        '<link-entity name="contact" from="parentcustomerid" to="accountid" link-type="not any" />'
        "</entity></fetch>"
    )
    assert codes_for(xml) == []


def test_alias_with_whitespace():
    xml = (
        '<fetch><entity name="account"><attribute name="name" alias="the name" />'
        '<link-entity name="contact" from="parentcustomerid" to="accountid" alias="c 1" />'
        "</entity></fetch>"
    )
    assert sorted(codes_for(xml)) == ["FETCHXML_INVALID_ALIAS", "FETCHXML_INVALID_ALIAS"]


def test_multiple_top_level_filters():
    xml = '<fetch><entity name="account"><filter /><filter /></entity></fetch>'
    assert codes_for(xml) == ["FETCHXML_MULTIPLE_FILTERS"]


def test_aggregation_requires_aggregate_query():
    attributes = '<attribute name="revenue" alias="total" aggregate="sum" /><attribute name="ownerid" alias="o" groupby="true" />'
    plain = f'<fetch><entity name="account">{attributes}</entity></fetch>'
    aggregate = f'<fetch aggregate="true"><entity name="account">{attributes}</entity></fetch>'
    assert codes_for(plain) == ["FETCHXML_AGGREGATE_DISABLED", "FETCHXML_AGGREGATE_DISABLED"]
    assert codes_for(aggregate) == []
