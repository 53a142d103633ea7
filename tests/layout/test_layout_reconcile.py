import pytest

from fetchxml.layout import (
    LayoutColumn,
    LayoutConfig,
    collect_columns_from_query,
    default_width_for_type,
    generate_default_layout,
    is_layout_consistent,
    merge_layout,
    reorder_columns,
    update_column_width,
)
from fetchxml.query import parse_fetch_xml

QUERY = """
<fetch>
  <entity name="account">
    <attribute name="name" />
    <attribute name="revenue" alias="rev" />
    <filter>
      <link-entity name="task" from="regardingobjectid" to="accountid" alias="t">
        <attribute name="subject" />
      </link-entity>
    </filter>
    <link-entity name="contact" from="parentcustomerid" to="accountid" alias="c" visible="false">
      <attribute name="fullname" />
      <link-entity name="systemuser" from="systemuserid" to="owninguser">
        <attribute name="fullname" />
      </link-entity>
    </link-entity>
  </entity>
</fetch>
"""

TYPES = {
    ("account", "name"): "String",
    ("account", "revenue"): "Money",
    ("contact", "fullname"): "String",
}


@pytest.fixture
def tree():
    return parse_fetch_xml(QUERY).tree


def test_default_width_for_type():
    assert default_width_for_type("String") == 200
    assert default_width_for_type("money") == 130
    assert default_width_for_type("Unknown") == 150
    assert default_width_for_type(None) == 150
    assert default_width_for_type("String", {"string": 99}) == 99
    assert default_width_for_type("Unknown", {"default": 42}) == 42


def test_collect_columns_from_query(tree):
    columns = collect_columns_from_query(tree, TYPES)
    assert [column.name for column in columns] == ["name", "rev", "c.fullname", "systemuser.fullname"]
    assert [column.width for column in columns] == [200, 130, 200, 150]
    assert [column.link_entity_alias for column in columns] == [None, None, "c", "systemuser"]


def test_collect_columns_skips_links_inside_filters(tree):
    names = [column.name for column in collect_columns_from_query(tree)]
    assert "t.subject" not in names


def test_generate_default_layout(tree):
    layout = generate_default_layout(tree, TYPES)
    assert layout.grid_name == "resultset"
    assert layout.jump_attribute == "name"
    assert layout.primary_id_attribute == "accountid"
    assert layout.enable_selection and layout.show_icon and layout.enable_preview
    assert len(layout.columns) == 4


def test_generate_default_layout_for_empty_projection():
    tree = parse_fetch_xml('<fetch><entity name="contact"><all-attributes /></entity></fetch>').tree
    layout = generate_default_layout(tree, grid_name="contacts")
    assert layout.columns == []
    assert layout.jump_attribute is None
    assert layout.grid_name == "contacts"


def test_merge_keeps_order_and_width_then_appends(tree):
    existing = LayoutConfig(
        grid_name="custom",
        columns=[
            LayoutColumn(name="c.fullname", width=333),
            LayoutColumn(name="obsolete", width=100),
            LayoutColumn(name="name", width=250, disable_sorting=True),
        ],
    )
    merged = merge_layout(existing, tree, TYPES)
    assert merged.grid_name == "custom"
    assert merged.column_names() == ["c.fullname", "name", "rev", "systemuser.fullname"]
    assert [column.width for column in merged.columns] == [333, 250, 130, 150]
    assert merged.columns[1].disable_sorting is True
    assert existing.column_names() == ["c.fullname", "obsolete", "name"]


def test_merge_is_idempotent(tree):
    existing = LayoutConfig(columns=[LayoutColumn(name="rev", width=10)])
    once = merge_layout(existing, tree, TYPES)
    assert merge_layout(once, tree, TYPES) == once


def test_merge_into_default_layout_is_unchanged(tree):
    layout = generate_default_layout(tree, TYPES)
    assert merge_layout(layout, tree, TYPES) == layout


def test_is_layout_consistent(tree):
    layout = generate_default_layout(tree)
    assert is_layout_consistent(layout, tree)
    extra = layout.model_copy(update={"columns": layout.columns + [LayoutColumn(name="extra", width=1)]})
    assert is_layout_consistent(extra, tree)
    missing = layout.model_copy(update={"columns": layout.columns[1:]})
    assert not is_layout_consistent(missing, tree)


def test_update_column_width():
    config = LayoutConfig(columns=[LayoutColumn(name="a", width=10), LayoutColumn(name="b", width=20)])
    updated = update_column_width(config, "b", 55)
    assert [column.width for column in updated.columns] == [10, 55]
    assert [column.width for column in config.columns] == [10, 20]
    assert update_column_width(config, "b", 20) is config
    assert update_column_width(config, "missing", 5) is config


def test_reorder_columns():
    config = LayoutConfig(
        columns=[LayoutColumn(name=name, width=10) for name in ("a", "b", "c")]
    )
    assert reorder_columns(config, 0, 2).column_names() == ["b", "c", "a"]
    assert reorder_columns(config, 2, 0).column_names() == ["c", "a", "b"]
    assert config.column_names() == ["a", "b", "c"]
    assert reorder_columns(config, 1, 1) is config
    assert reorder_columns(config, -1, 0) is config
    assert reorder_columns(config, 0, 3) is config
