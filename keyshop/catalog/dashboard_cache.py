"""
Dashboard summary caching.

The summary is computed with a single aggregate query and cached for
DASHBOARD_CACHE_TTL seconds. Product saves and deletes invalidate it.
"""
import logging

from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Q, Sum
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import Product
from .utils import STOCK_STATUSES, format_price, get_low_stock_threshold, get_stock_status_mode, stock_status_quantity_filter

logger = logging.getLogger(__name__)

DASHBOARD_CACHE_KEY = 'dashboard_summary'


def get_dashboard_cache_ttl():
    return getattr(settings, 'DASHBOARD_CACHE_TTL', 300)


def build_dashboard_summary():
    """Aggregate catalog totals and stock status counts"""
    aggregates = {
        'total_products': Count('id'),
        'total_units': Sum('qty'),
        'inventory_value': Sum(
            ExpressionWrapper(F('price') * F('qty'), output_field=DecimalField(max_digits=24, decimal_places=2))
        ),
        'total_categories': Count('category', distinct=True),
    }
    for status in STOCK_STATUSES:
        lookups = stock_status_quantity_filter(status)
        if lookups is not None:
            aggregates[f'status_{status}'] = Count('id', filter=Q(**lookups))

    totals = Product.objects.aggregate(**aggregates)

    inventory_value = totals['inventory_value'] or 0
    return {
        'total_products': totals['total_products'],
        'total_units': totals['total_units'] or 0,
        'total_categories': totals['total_categories'],
        'inventory_value': str(inventory_value),
        'inventory_value_formatted': format_price(inventory_value),
        'stock_status_counts': {
            status: totals.get(f'status_{status}', 0) for status in STOCK_STATUSES
        },
        'stock_status_mode': get_stock_status_mode(),
        'low_stock_threshold': get_low_stock_threshold(),
    }


def get_dashboard_summary():
    """Return the cached summary, rebuilding it on a miss or a settings change"""
    cached = cache.get(DASHBOARD_CACHE_KEY)
    if (
        cached is not None
        and cached.get('stock_status_mode') == get_stock_status_mode()
        and cached.get('low_stock_threshold') == get_low_stock_threshold()
    ):
        logger.debug(f"Cache HIT for {DASHBOARD_CACHE_KEY}")
        return cached

    logger.debug(f"Cache MISS for {DASHBOARD_CACHE_KEY}")
    summary = build_dashboard_summary()
    cache.set(DASHBOARD_CACHE_KEY, summary, get_dashboard_cache_ttl())
    return summary


def invalidate_dashboard_cache():
    try:
        cache.delete(DASHBOARD_CACHE_KEY)
        logger.debug("Invalidated dashboard summary cache")
    except Exception as e:
        logger.warning(f"Could not invalidate dashboard cache: {str(e)}")


@receiver(post_save, sender=Product)
@receiver(post_delete, sender=Product)
def product_changed(sender, instance, **kwargs):
    invalidate_dashboard_cache()
