"""
WSGI config for the garmentdesk project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'garmentdesk.settings')

application = get_wsgi_application()
