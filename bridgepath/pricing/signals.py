"""
Drop the cached price table whenever a price changes
"""
import logging

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from bridgepath.core.cache_utils import invalidate_material_prices
from .models import MaterialPrice

logger = logging.getLogger(__name__)


@receiver([post_save, post_delete], sender=MaterialPrice)
def invalidate_price_cache(sender, instance, **kwargs):
    invalidate_material_prices()
    logger.debug(f"Invalidated material price cache after change to {instance.pk}")
