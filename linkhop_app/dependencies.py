"""
FastAPI dependencies.

The store and settings are constructed once in main.py and handed to the
app factories, which park them on app.state. Routes pull them back out
through these dependencies, so tests can build apps around any store.
"""

from fastapi import Request
from fastapi.templating import Jinja2Templates

from linkhop_app.config import Settings
from linkhop_app.services.store import ShortcodeStore


def get_store(request: Request) -> ShortcodeStore:
    """Shared store of the app serving this request."""
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates
