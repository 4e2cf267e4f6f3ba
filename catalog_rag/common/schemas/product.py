"""
Product Record Schema

Catalog rows as the retrieval core sees them. The core never creates,
mutates, or deletes products; it only reads them from the catalog backend.
"""

from typing import Any, Dict
from pydantic import BaseModel, ConfigDict, Field


# Columns requested from the catalog on every search
PRODUCT_FIELDS = ("name", "description", "category", "price", "in_stock")


class Product(BaseModel):
    """A single catalog record (read-only)"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique display name")
    description: str = Field(default="", description="Free-text description")
    category: str = Field(default="", description="Free-text category")
    price: float = Field(default=0.0, ge=0.0)
    in_stock: bool = Field(default=False)

    @property
    def search_text(self) -> str:
        """Lower-cased name/description/category used for term matching"""
        return f"{self.name} {self.description} {self.category}".lower()

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
