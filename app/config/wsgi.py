"""
WSGI config for the messaging API.

Serves the REST API only; the WebSocket stream needs the ASGI entry point
in config.asgi. Used by `manage.py runserver` and plain WSGI servers.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
