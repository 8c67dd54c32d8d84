"""
WSGI entry point for the Patient 360 administration backend.

Serve with e.g. ``gunicorn patient360.wsgi``; static files are handled
by WhiteNoise.
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'patient360.settings')

application = get_wsgi_application()
