"""Entry point for the storage API (``uvicorn notekeep.app_factory:app``)."""
from notekeep.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
