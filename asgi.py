"""
ASGI entry point.

Run with:
    uvicorn asgi:app --reload
or:
    python asgi.py
"""

import uvicorn

from app import create_app
from config import AppSettings

settings = AppSettings()
app = create_app(settings)

if __name__ == "__main__":
    uvicorn.run("asgi:app", host="0.0.0.0", port=settings.port, reload=not settings.is_production)
