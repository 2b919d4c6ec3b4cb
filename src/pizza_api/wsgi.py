"""
WSGI entry point, e.g. ``flask --app pizza_api.wsgi run``.
"""

from pizza_api.app import create_app

app = create_app()
