"""FastAPI application factories for the two listeners."""

import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse
from fastapi.templating import Jinja2Templates
from jinja2 import TemplateNotFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from linkhop_app.api.admin import mappings
from linkhop_app.api.public import redirect
from linkhop_app.config import Settings
from linkhop_app.exceptions import MethodNotAllowed, TemplateMissing, ValidationFailure
from linkhop_app.middleware import RequestLoggingMiddleware
from linkhop_app.services.store import ShortcodeStore


def _bare_app(settings: Settings, title: str) -> FastAPI:
    # No docs/openapi routes: every path on these listeners is meaningful
    app = FastAPI(
        title=title,
        version=settings.app_version,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.exception_handler(StarletteHTTPException)
    async def plain_http_error(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

    return app


def create_public_app(store: ShortcodeStore, settings: Settings) -> FastAPI:
    """Create the public redirect app.

    Args:
        store: Shared shortcode store
        settings: Settings instance

    Returns:
        Configured FastAPI app
    """
    app = _bare_app(settings, f"{settings.app_name} public")
    app.state.store = store
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware, prefix="pubsrv", logger=logging.getLogger("linkhop.public"))
    app.router.routes.append(redirect.route)
    return app


def load_templates(settings: Settings) -> Jinja2Templates:
    """Load the admin page template; a missing template is fatal."""
    templates = Jinja2Templates(directory=settings.templates_dir)
    try:
        templates.get_template(settings.admin_template)
    except TemplateNotFound as exc:
        path = os.path.join(settings.templates_dir, settings.admin_template)
        raise TemplateMissing(f"admin template not found: {path}") from exc
    return templates


def create_admin_app(store: ShortcodeStore, settings: Settings) -> FastAPI:
    """Create the admin app served over the tailnet.

    Args:
        store: Shared shortcode store
        settings: Settings instance

    Returns:
        Configured FastAPI app

    Raises:
        TemplateMissing: if the admin page template cannot be loaded
    """
    app = _bare_app(settings, f"{settings.app_name} admin")
    app.state.store = store
    app.state.settings = settings
    app.state.templates = load_templates(settings)

    @app.exception_handler(ValidationFailure)
    async def validation_failure(request: Request, exc: ValidationFailure):
        return PlainTextResponse(str(exc), status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(MethodNotAllowed)
    async def method_not_allowed(request: Request, exc: MethodNotAllowed):
        return PlainTextResponse(
            str(exc),
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            headers={"Allow": "GET, POST"},
        )

    app.add_middleware(RequestLoggingMiddleware, prefix="ts-srv", logger=logging.getLogger("linkhop.admin"))
    app.include_router(mappings.router)
    app.router.routes.append(mappings.fallback_route)
    return app
