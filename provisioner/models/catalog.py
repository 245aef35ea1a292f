"""
Catalog data models.
"""

from enum import Enum
from typing import Tuple
from pydantic import BaseModel, ConfigDict, Field


class ItemKind(str, Enum):
    """Installer family an item belongs to."""
    PACKAGE = "package"
    MODULE = "module"


class CatalogItem(BaseModel):
    """A single installable item."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Identifier passed to the installer")
    display_name: str = Field(..., description="Human readable name")
    kind: ItemKind = Field(default=ItemKind.PACKAGE, description="Installer family")

    def __str__(self) -> str:
        return self.display_name


class Category(BaseModel):
    """A named group of catalog items."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    items: Tuple[CatalogItem, ...] = ()

    @property
    def kind(self) -> ItemKind:
        if not self.items:
            return ItemKind.PACKAGE
        return self.items[0].kind
