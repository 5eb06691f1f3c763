#!/usr/bin/env python3
"""
linkhop entry point.

Opens the store, builds both apps around it, resolves the tailnet node,
then runs the public and admin listeners until one of them stops. Any
startup failure exits before a socket is bound.
"""

import asyncio
import sys

import uvicorn

from linkhop_app.app_factory import create_admin_app, create_public_app
from linkhop_app.config import Settings, settings
from linkhop_app.dispatcher import Dispatcher, Listener
from linkhop_app.exceptions import ProcessFatal
from linkhop_app.logging_config import setup_logging
from linkhop_app.overlay import resolve_node
from linkhop_app.services.store import ShortcodeStore


def build_dispatcher(settings: Settings) -> Dispatcher:
    """Construct everything the listeners need, in startup order.

    Raises:
        ProcessFatal: store, template, or tailnet node could not be set up
    """
    # One store, shared by both listeners
    store = ShortcodeStore.open(settings.database_url)

    public_app = create_public_app(store, settings)
    admin_app = create_admin_app(store, settings)
    node = resolve_node(settings)

    public_server = uvicorn.Server(uvicorn.Config(
        public_app,
        host=settings.public_host,
        port=settings.public_port,
        log_level=settings.log_level.lower(),
        access_log=False,
    ))
    admin_server = uvicorn.Server(uvicorn.Config(
        admin_app,
        host=node.address,
        port=settings.admin_port,
        ssl_certfile=node.certfile,
        ssl_keyfile=node.keyfile,
        log_level=settings.log_level.lower(),
        access_log=False,
    ))

    return Dispatcher([
        Listener("pubsrv", public_server),
        Listener("ts-srv", admin_server),
    ])


def main():
    """Main entry point."""
    logger = setup_logging(level=settings.log_level, log_file=settings.log_file)
    logger.info(f"{settings.app_name} {settings.app_version}")

    try:
        dispatcher = build_dispatcher(settings)
        asyncio.run(dispatcher.run())
    except ProcessFatal as e:
        logger.critical(f"Fatal: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
