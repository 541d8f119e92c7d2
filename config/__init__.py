"""Top-level package for Django configuration.

This package holds the settings modules for different environments, the
Celery application and the WSGI and ASGI entry points.
"""

# Import the Celery application as soon as Django starts. Without this
# the shared task registry will not be populated.
from .celery import app as celery_app  # noqa: F401
