import logging

from fastapi import HTTPException, status
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.routing import Route

from linkhop_app.config import Settings
from linkhop_app.exceptions import IOFailure, NotFound
from linkhop_app.services.store import ShortcodeStore

logger = logging.getLogger("linkhop.public")


def resolve_shortcode(path: str, store: ShortcodeStore, settings: Settings) -> RedirectResponse:
    """
    Redirect a shortcode to its URL.

    Leading and trailing slashes are trimmed, so /abc, /abc/ and //abc all
    resolve the same shortcode. An empty path goes to the root URL.
    """
    shortcode = path.strip("/")
    if not shortcode:
        return RedirectResponse(url=settings.root_url, status_code=status.HTTP_302_FOUND)

    try:
        url = store.get(shortcode)
    except NotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
    except IOFailure as exc:
        logger.error(f"pubsrv: ERROR {exc}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="oops")

    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


class RedirectEndpoint:
    """
    ASGI endpoint for every path and every method.

    Starlette only skips method matching for non-function endpoints, so the
    redirect lives in a class rather than a decorated route.
    """

    async def __call__(self, scope, receive, send):
        request = Request(scope, receive)
        response = await run_in_threadpool(
            resolve_shortcode,
            request.path_params["path"],
            request.app.state.store,
            request.app.state.settings,
        )
        await response(scope, receive, send)


route = Route("/{path:path}", endpoint=RedirectEndpoint())
