"""
Cost Engine Errors

Every failure of a costing operation is a CostError subclass carrying a
stable ``kind`` string, so callers can tell the user which ingredient line
or product reference to fix.
"""


class CostError(Exception):
    """Base class for costing failures."""
    kind = 'CostError'

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        return {
            'error': self.kind,
            'message': self.message,
            'details': {key: str(value) if value is not None else None
                        for key, value in self.details.items()},
        }


class ProductNotFound(CostError):
    """An ingredient line references a product the lookup cannot resolve."""
    kind = 'ProductNotFound'

    def __init__(self, product_id):
        super().__init__(f'Product {product_id} not found', product_id=product_id)
        self.product_id = product_id


class IncompatibleDimension(CostError):
    """Conversion requested between units of different dimensions."""
    kind = 'IncompatibleDimension'

    def __init__(self, from_unit, to_unit, from_dimension=None, to_dimension=None):
        super().__init__(
            f'Cannot convert {from_unit} ({from_dimension}) to {to_unit} ({to_dimension})',
            from_unit=from_unit, to_unit=to_unit,
            from_dimension=from_dimension, to_dimension=to_dimension,
        )
        self.from_unit = from_unit
        self.to_unit = to_unit


class UnknownUnit(CostError):
    """Unit symbol not present in the unit table."""
    kind = 'UnknownUnit'

    def __init__(self, unit):
        super().__init__(f'Unknown unit: {unit!r}', unit=unit)
        self.unit = unit


class InvalidQuantity(CostError):
    """Zero, negative or non-finite quantity."""
    kind = 'InvalidQuantity'

    def __init__(self, quantity, product_id=None):
        super().__init__(f'Quantity must be greater than zero, got {quantity}',
                         quantity=quantity, product_id=product_id)
        self.quantity = quantity


class InvalidPrice(CostError):
    """Negative or non-finite unit price."""
    kind = 'InvalidPrice'

    def __init__(self, price, product_id=None):
        super().__init__(f'Unit price must not be negative, got {price}',
                         price=price, product_id=product_id)
        self.price = price


class InactiveProduct(CostError):
    """Product is flagged inactive (raised only when inactive pricing is strict)."""
    kind = 'InactiveProduct'

    def __init__(self, product_id, name=None):
        super().__init__(f'Product {name or product_id} is inactive',
                         product_id=product_id, name=name)
        self.product_id = product_id


class ProductInUse(CostError):
    """Product deletion blocked because recipes still reference it."""
    kind = 'ProductInUse'

    def __init__(self, product_id, recipe_names):
        super().__init__(
            f'Product {product_id} is used by {len(recipe_names)} recipe(s)',
            product_id=product_id, recipes=', '.join(recipe_names),
        )
        self.product_id = product_id
        self.recipe_names = list(recipe_names)
