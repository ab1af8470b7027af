from .employees import Employee, SessionToken
from .catalog import Category, Product
from .inventory import StoreProduct
from .customers import CustomerCard
from .checks import Check, Sale

__all__ = [
    'Employee', 'SessionToken',
    'Category', 'Product',
    'StoreProduct',
    'CustomerCard',
    'Check', 'Sale',
]
