"""
WSGI config for the BridgePath project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'bridgepath.config.settings')

application = get_wsgi_application()
