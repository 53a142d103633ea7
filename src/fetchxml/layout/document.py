"""Read and write the grid layout document.

    <grid name="resultset" object="1" jump="name" select="1" icon="1" preview="1">
      <row name="result" id="accountid">
        <cell name="name" width="300" />
      </row>
    </grid>
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional
from xml.etree.ElementTree import Element
from xml.sax.saxutils import quoteattr

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError, fromstring

from ..errors import LayoutXmlError
from .models import DEFAULT_GRID_NAME, LayoutColumn, LayoutConfig

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_WIDTH = 150
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _tag(element: Element) -> str:
    return element.tag.lower() if isinstance(element.tag, str) else ""


def _get(element: Element, name: str) -> Optional[str]:
    for key, value in element.attrib.items():
        if key.lower() == name:
            return value
    return None


def _flag(element: Element, name: str) -> bool:
    return (_get(element, name) or "").strip().lower() in {"1", "true"}


def _int(raw: Optional[str]) -> Optional[int]:
    if raw is None or not _INTEGER.fullmatch(raw.strip()):
        return None
    return int(raw.strip())


def parse_layout_xml(xml_text: str, *, default_width: int = DEFAULT_COLUMN_WIDTH) -> LayoutConfig:
    """Parse layout XML; raises :class:`LayoutXmlError` when it cannot be read."""

    try:
        root = fromstring(xml_text.strip())
    except (ParseError, DefusedXmlException) as exc:
        raise LayoutXmlError(f"Invalid LayoutXML: {exc}") from exc

    grid = root if _tag(root) == "grid" else next((el for el in root.iter() if _tag(el) == "grid"), None)
    if grid is None:
        raise LayoutXmlError("Invalid LayoutXML: missing <grid> element")

    row = next((el for el in grid.iter() if _tag(el) == "row"), None)
    columns: List[LayoutColumn] = []
    for cell in (row if row is not None else grid).iter():
        if _tag(cell) != "cell":
            continue
        name = _get(cell, "name")
        if not name:
            continue
        raw_width = _get(cell, "width")
        width = _int(raw_width)
        if width is None:
            if raw_width is not None:
                logger.debug("Invalid width %r on layout cell %r; using %d", raw_width, name, default_width)
            width = default_width
        columns.append(
            LayoutColumn(
                name=name,
                width=width,
                disable_sorting=_flag(cell, "disablesorting"),
                image_provider_name=_get(cell, "imageproviderwebresource") or None,
            )
        )

    return LayoutConfig(
        grid_name=_get(grid, "name") or DEFAULT_GRID_NAME,
        object_type_code=_int(_get(grid, "object")),
        jump_attribute=_get(grid, "jump") or None,
        enable_selection=_flag(grid, "select"),
        show_icon=_flag(grid, "icon"),
        enable_preview=_flag(grid, "preview"),
        primary_id_attribute=(_get(row, "id") or None) if row is not None else None,
        columns=columns,
    )


def serialize_layout_xml(config: LayoutConfig) -> str:
    grid_attrs = [f"name={quoteattr(config.grid_name)}"]
    if config.object_type_code is not None:
        grid_attrs.append(f'object="{config.object_type_code}"')
    if config.jump_attribute:
        grid_attrs.append(f"jump={quoteattr(config.jump_attribute)}")
    grid_attrs.append(f'select="{1 if config.enable_selection else 0}"')
    grid_attrs.append(f'icon="{1 if config.show_icon else 0}"')
    grid_attrs.append(f'preview="{1 if config.enable_preview else 0}"')

    lines = [f"<grid {' '.join(grid_attrs)}>"]
    lines.append(f'  <row name="result" id={quoteattr(config.primary_id_attribute or "id")}>')
    for column in config.columns:
        attrs = [f"name={quoteattr(column.name)}", f'width="{column.width}"']
        if column.disable_sorting:
            attrs.append('disableSorting="1"')
        if column.image_provider_name:
            attrs.append(f"imageproviderwebresource={quoteattr(column.image_provider_name)}")
        lines.append(f"    <cell {' '.join(attrs)} />")
    lines.append("  </row>")
    lines.append("</grid>")
    return "\n".join(lines)


__all__ = ["DEFAULT_COLUMN_WIDTH", "parse_layout_xml", "serialize_layout_xml"]
