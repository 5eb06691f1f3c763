import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from jinja2 import TemplateError
from starlette.routing import Route

from linkhop_app.config import Settings
from linkhop_app.dependencies import get_settings, get_store, get_templates
from linkhop_app.exceptions import DuplicateKey, IOFailure, MethodNotAllowed, ValidationFailure
from linkhop_app.services.store import ShortcodeStore

logger = logging.getLogger("linkhop.admin")

router = APIRouter(tags=["admin"])


@router.get("/")
def list_mappings(
    request: Request,
    store: ShortcodeStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
    templates: Jinja2Templates = Depends(get_templates),
):
    """Render every mapping plus the creation form."""
    try:
        rows = store.list()
    except IOFailure as exc:
        logger.error(f"ts-srv: ERROR {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"could not load rows: {exc}",
        )

    try:
        return templates.TemplateResponse(
            request,
            settings.admin_template,
            {"rows": rows, "hostname": settings.admin_hostname},
        )
    except TemplateError as exc:
        logger.error(f"ts-srv: ERROR rendering {settings.admin_template}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="could not render page",
        )


@router.post("/")
def create_mapping(
    request: Request,
    shortcode: str = Form(""),
    url: str = Form(""),
    store: ShortcodeStore = Depends(get_store),
):
    """Add a mapping from the form, then go back to the listing.

    Body fields win; the query string is consulted for anything the body
    leaves empty.
    """
    shortcode = shortcode or request.query_params.get("shortcode", "")
    url = url or request.query_params.get("url", "")
    if not shortcode or not url:
        raise ValidationFailure("missing parameter")

    try:
        store.set(shortcode, url)
    except (DuplicateKey, IOFailure) as exc:
        logger.error(f"ts-srv: ERROR {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"could not set /{shortcode} -> {url}: {exc}",
        )

    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


class FallbackEndpoint:
    """
    Catches whatever the GET/POST routes did not: any other method on "/"
    is 405, any other path is 404, whatever the method.
    """

    async def __call__(self, scope, receive, send):
        if scope["path"] == "/":
            raise MethodNotAllowed("bad method")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")


# No method list: Starlette matches class endpoints on every method
fallback_route = Route("/{path:path}", endpoint=FallbackEndpoint())
