from .catalog import Product
from .sales import Sale, SaleLine
from .stats import DailyStat

__all__ = [
    'Product',
    'Sale', 'SaleLine',
    'DailyStat',
]
