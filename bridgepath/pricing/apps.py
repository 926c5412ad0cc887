from django.apps import AppConfig


class PricingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bridgepath.pricing'

    def ready(self):
        """Import signals when app is ready"""
        import bridgepath.pricing.signals  # noqa: F401
