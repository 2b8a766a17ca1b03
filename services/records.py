"""
Costing Records

Plain value objects the cost engine works on. ORM models convert into these
so the engine never touches the database.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple


@dataclass(frozen=True)
class ProductSnapshot:
    """A product's pricing as of the moment it was read."""
    id: object
    name: str
    unit: str
    unit_price: Decimal
    active: bool = True


@dataclass(frozen=True)
class IngredientLine:
    """One line of a recipe: quantity of a product in some unit."""
    product_id: object
    quantity: Decimal
    unit: str
    note: Optional[str] = None


@dataclass(frozen=True)
class RecipeInput:
    """Everything the rollup needs from a recipe."""
    name: str
    lines: Tuple[IngredientLine, ...] = field(default_factory=tuple)
    portions: int = 1
    desired_margin: Optional[Decimal] = None
    suggested_sale_price: Optional[Decimal] = None
