"""
Derived display values for catalog products: stock status and formatted price.
"""
from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

StockStatus = namedtuple('StockStatus', ['status', 'message', 'css_class'])

AVAILABLE = StockStatus('available', 'In Stock', 'text-green-500 bg-green-100')
LOW_STOCK = StockStatus('low_stock', 'Low Stock', 'text-yellow-500 bg-yellow-100')
OUT_OF_STOCK = StockStatus('out_of_stock', 'Out of Stock', 'text-red-500 bg-red-100')

STOCK_STATUSES = {s.status: s for s in (AVAILABLE, LOW_STOCK, OUT_OF_STOCK)}

STOCK_STATUS_MODES = ('threshold', 'legacy')
DEFAULT_LOW_STOCK_THRESHOLD = 2


def classify_stock_legacy(quantity):
    """Original check order: any positive quantity is in stock, everything else is low stock.

    The out-of-stock branch is never reached for integer quantities.
    """
    if quantity > 0:
        return AVAILABLE
    if quantity <= DEFAULT_LOW_STOCK_THRESHOLD:
        return LOW_STOCK
    return OUT_OF_STOCK


def classify_stock_threshold(quantity, threshold=DEFAULT_LOW_STOCK_THRESHOLD):
    """Nothing on hand is out of stock, 1..threshold units is low stock."""
    if quantity <= 0:
        return OUT_OF_STOCK
    if quantity <= threshold:
        return LOW_STOCK
    return AVAILABLE


def get_stock_status_mode():
    mode = getattr(settings, 'STOCK_STATUS_MODE', 'threshold')
    if mode not in STOCK_STATUS_MODES:
        raise ImproperlyConfigured(
            f"STOCK_STATUS_MODE must be one of {', '.join(STOCK_STATUS_MODES)}, got {mode!r}"
        )
    return mode


def get_low_stock_threshold():
    return getattr(settings, 'LOW_STOCK_THRESHOLD', DEFAULT_LOW_STOCK_THRESHOLD)


def classify_stock(quantity):
    """Classify a quantity on hand using the configured STOCK_STATUS_MODE"""
    if get_stock_status_mode() == 'legacy':
        return classify_stock_legacy(quantity)
    return classify_stock_threshold(quantity, get_low_stock_threshold())


def stock_status_quantity_filter(status):
    """
    Map a stock status to ORM lookups on ``qty`` for the configured mode.

    Returns a dict of lookups, or None when no quantity can have that status.
    """
    if status not in STOCK_STATUSES:
        raise ValueError(f"Unknown stock status: {status}")

    if get_stock_status_mode() == 'legacy':
        return {
            'available': {'qty__gt': 0},
            'low_stock': {'qty__lte': 0},
            'out_of_stock': None,
        }[status]

    threshold = get_low_stock_threshold()
    return {
        'available': {'qty__gt': threshold},
        'low_stock': {'qty__gt': 0, 'qty__lte': threshold},
        'out_of_stock': {'qty__lte': 0},
    }[status]


def format_price(price):
    """
    Format a price as a whole number with '.' as the thousands separator.

    Examples:
    - 1200000 -> "1.200.000"
    - 3500 -> "3.500"
    - 1999.50 -> "2.000"
    """
    amount = Decimal(str(price)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    return f"{int(amount):,}".replace(',', '.')
