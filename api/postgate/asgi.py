"""
ASGI entry point.

Run with:  uvicorn postgate.asgi:app --reload
"""

from postgate.main import create_app

app = create_app()
