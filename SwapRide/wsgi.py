"""
WSGI config for the SwapRide project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'SwapRide.settings')

application = get_wsgi_application()
