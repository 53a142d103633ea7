from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_GRID_NAME = "resultset"


class LayoutColumn(BaseModel):
    """One grid column: the query column key plus its display settings."""

    name: str
    width: int
    link_entity_alias: Optional[str] = None
    disable_sorting: bool = False
    image_provider_name: Optional[str] = None
    display_name: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class LayoutConfig(BaseModel):
    grid_name: str = DEFAULT_GRID_NAME
    object_type_code: Optional[int] = None
    jump_attribute: Optional[str] = None
    enable_selection: bool = False
    show_icon: bool = False
    enable_preview: bool = False
    primary_id_attribute: Optional[str] = None
    columns: List[LayoutColumn] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]


__all__ = ["DEFAULT_GRID_NAME", "LayoutColumn", "LayoutConfig"]
