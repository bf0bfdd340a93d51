"""
WSGI config for the messaging backend.

Exposes the WSGI callable as a module-level variable named `application`.
Served by any WSGI server (gunicorn, uWSGI); requests are handled by a pool
of stateless workers that coordinate only through the database.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
