"""
Tests for the listener dispatcher.
Fake servers stand in for uvicorn so no sockets are bound.
"""
import asyncio

import pytest

from linkhop_app.dispatcher import Dispatcher, Listener
from linkhop_app.exceptions import ListenerFailed, ProcessFatal


class ForeverServer:
    """Serves until cancelled"""

    def __init__(self):
        self.started = False
        self.cancelled = False

    async def serve(self):
        self.started = True
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class FailingServer:
    def __init__(self, exc, delay=0.0):
        self.exc = exc
        self.delay = delay

    async def serve(self):
        await asyncio.sleep(self.delay)
        raise self.exc


class ReturningServer:
    async def serve(self):
        await asyncio.sleep(0)


class TestDispatcher:
    def test_first_failure_stops_everything(self):
        healthy = ForeverServer()
        dispatcher = Dispatcher([
            Listener("pubsrv", healthy),
            Listener("ts-srv", FailingServer(OSError("address in use"), delay=0.01)),
        ])

        with pytest.raises(ListenerFailed) as info:
            asyncio.run(dispatcher.run())

        assert info.value.name == "ts-srv"
        assert isinstance(info.value.cause, OSError)
        assert healthy.started
        assert healthy.cancelled

    def test_listener_failure_is_process_fatal(self):
        dispatcher = Dispatcher([Listener("pubsrv", FailingServer(RuntimeError("boom")))])

        with pytest.raises(ProcessFatal):
            asyncio.run(dispatcher.run())

    def test_bind_exit_is_reported_as_failure(self):
        """uvicorn calls sys.exit(1) when it cannot bind"""
        healthy = ForeverServer()
        dispatcher = Dispatcher([
            Listener("pubsrv", FailingServer(SystemExit(1))),
            Listener("ts-srv", healthy),
        ])

        with pytest.raises(ListenerFailed) as info:
            asyncio.run(dispatcher.run())

        assert info.value.name == "pubsrv"
        assert healthy.cancelled

    def test_clean_return_is_still_fatal(self):
        healthy = ForeverServer()
        dispatcher = Dispatcher([
            Listener("pubsrv", healthy),
            Listener("ts-srv", ReturningServer()),
        ])

        with pytest.raises(ListenerFailed) as info:
            asyncio.run(dispatcher.run())

        assert info.value.name == "ts-srv"
        assert info.value.cause is None
        assert healthy.cancelled

    def test_needs_listeners(self):
        with pytest.raises(ValueError):
            Dispatcher([])
