"""
Price lookup for production valuation
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.core.cache import cache

from bridgepath.core.cache_utils import MATERIAL_PRICES_CACHE_KEY, MATERIAL_PRICES_CACHE_TTL
from .models import MaterialPrice

logger = logging.getLogger(__name__)


def get_price_table():
    """All prices as plain dicts in lookup order, cached until a price changes."""
    table = cache.get(MATERIAL_PRICES_CACHE_KEY)
    if table is not None:
        return table

    table = [
        {
            'id': price.pk,
            'category': price.category,
            'material_type': price.material_type,
            'price_per_unit': price.price_per_unit,
            'unit': price.unit,
            'role': price.role,
        }
        for price in MaterialPrice.objects.order_by('id')
    ]
    cache.set(MATERIAL_PRICES_CACHE_KEY, table, MATERIAL_PRICES_CACHE_TTL)
    logger.debug(f"Cached {len(table)} material prices")
    return table


def find_price(category, material_type):
    """First price row matching category and type, or None."""
    for row in get_price_table():
        if row['category'] == category and row['material_type'] == material_type:
            return row
    return None


def calculate_value(price_per_unit, weight):
    value = Decimal(str(price_per_unit)) * Decimal(str(weight))
    return value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
