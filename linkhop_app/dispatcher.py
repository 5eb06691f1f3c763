"""
Runs the listeners side by side and stops everything when one of them stops.

Each listener runs as its own asyncio task. Whatever ends a listener (a
serve error, a bind failure, or an unexpected clean return) is published
once as ListenerFailed. The dispatcher waits for the first publication,
cancels the other listeners and re-raises it; there is no restart and no
running with one listener missing.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List

from linkhop_app.exceptions import ListenerFailed

logger = logging.getLogger("linkhop.dispatcher")


@dataclass
class Listener:
    """A named server; anything with an async serve() will do (uvicorn.Server)."""
    name: str
    server: object


class Dispatcher:
    def __init__(self, listeners: List[Listener]):
        if not listeners:
            raise ValueError("dispatcher needs at least one listener")
        self.listeners = listeners

    async def _serve(self, listener: Listener) -> None:
        try:
            await listener.server.serve()
        except SystemExit as exc:
            # uvicorn exits instead of raising when it cannot bind
            raise ListenerFailed(listener.name, exc) from exc
        except Exception as exc:
            raise ListenerFailed(listener.name, exc) from exc
        raise ListenerFailed(listener.name)

    async def run(self) -> None:
        """Serve until the first listener stops, then raise its ListenerFailed."""
        tasks = [
            asyncio.create_task(self._serve(listener), name=listener.name)
            for listener in self.listeners
        ]
        for listener in self.listeners:
            logger.info(f"Started {listener.name} listener")

        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        # Several may finish in the same tick; report them all, raise the first
        failures = [task.exception() for task in tasks if task in done]
        for failure in failures:
            logger.error(f"{failure}")
        raise failures[0]
