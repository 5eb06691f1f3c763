import logging
from typing import List, Optional

from sqlalchemy import LargeBinary, cast, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from linkhop_app.database.connection import Base, make_engine, make_session_factory
from linkhop_app.exceptions import DuplicateKey, IOFailure, NotFound, StoreInitError
from linkhop_app.models.mapping import ShortcodeMapping
from linkhop_app.schemas.mapping import MappingRow

logger = logging.getLogger("linkhop.store")


class ShortcodeStore:
    """
    Durable shortcode -> URL mapping.

    One instance is created at startup and shared by both listeners. Every
    call opens its own short-lived session on the shared engine, so the
    store can be used from FastAPI's threadpool without extra locking.

    Errors:
    - get() raises NotFound on a miss
    - set() raises DuplicateKey when the primary key rejects the insert
    - any other database error surfaces as IOFailure
    """

    def __init__(self, engine: Engine, session_factory: Optional[sessionmaker] = None):
        self.engine = engine
        self.session_factory = session_factory or make_session_factory(engine)

    @classmethod
    def open(cls, database_url: str) -> "ShortcodeStore":
        """
        Open (or create) the database and make sure the table exists.

        Raises StoreInitError on any failure; callers treat that as fatal.
        """
        try:
            engine = make_engine(database_url)
            # CREATE TABLE IF NOT EXISTS
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as exc:
            raise StoreInitError(f"could not open store at {database_url}: {exc}") from exc
        logger.info(f"Store ready at {database_url}")
        return cls(engine)

    def get(self, shortcode: str) -> str:
        try:
            with self.session_factory() as session:
                mapping = session.get(ShortcodeMapping, shortcode)
        except SQLAlchemyError as exc:
            raise IOFailure(f"lookup of {shortcode!r} failed: {exc}") from exc

        if mapping is None:
            raise NotFound(shortcode)
        return mapping.url

    def set(self, shortcode: str, url: str) -> None:
        """Insert a new mapping. Existing shortcodes are never overwritten."""
        with self.session_factory() as session:
            session.add(ShortcodeMapping(shortcode=shortcode, url=url))
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateKey(shortcode) from exc
            except SQLAlchemyError as exc:
                session.rollback()
                raise IOFailure(f"insert of {shortcode!r} failed: {exc}") from exc

    def list(self) -> List[MappingRow]:
        """
        Return every mapping, in table order.

        A row that cannot be decoded becomes a placeholder carrying the
        error text; the rest of the listing is still returned.
        """
        # Read raw bytes so a bad value fails on its own row, not inside the cursor
        query = select(
            cast(ShortcodeMapping.shortcode, LargeBinary),
            cast(ShortcodeMapping.url, LargeBinary),
        )
        rows = []
        try:
            with self.engine.connect() as conn:
                for raw in conn.execute(query):
                    try:
                        rows.append(MappingRow(
                            shortcode=_decode_text(raw[0], "shortcode"),
                            url=_decode_text(raw[1], "url"),
                        ))
                    except ValueError as exc:
                        logger.error(f"Unreadable row in listing: {exc}")
                        rows.append(MappingRow.unreadable(str(exc)))
        except SQLAlchemyError as exc:
            raise IOFailure(f"listing failed: {exc}") from exc
        return rows

    def close(self) -> None:
        self.engine.dispose()


def _decode_text(value, column: str) -> str:
    """SQLite columns are dynamically typed; only text (or UTF-8 blobs) are usable."""
    if value is None:
        raise ValueError(f"{column} is NULL")
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError(f"{column} is not valid UTF-8: {exc}") from exc
    return str(value)
