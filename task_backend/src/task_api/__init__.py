"""
FastAPI Task API package.

The ASGI application lives in 'task_api.main' (serve it as 'task_api.main:app');
use 'task_api.main.create_app' to build one with explicit settings.
"""

__version__ = "1.0.0"
