"""
WSGI config for the releasehub project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'releasehub.config.settings')

application = get_wsgi_application()
