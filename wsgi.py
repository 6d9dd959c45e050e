"""
WSGI entry point for the availability service.

    gunicorn -c gunicorn.conf.py wsgi:application
"""
import os
from app import create_app

application = create_app(os.environ.get('FLASK_ENV', 'production'))
app = application
