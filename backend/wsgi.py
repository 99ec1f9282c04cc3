"""WSGI entry point for production deployment (e.g. gunicorn wsgi:app)."""
import os

from dotenv import load_dotenv

from attendance_sync import create_app

load_dotenv()

app = create_app(os.getenv('FLASK_ENV', 'production'))
