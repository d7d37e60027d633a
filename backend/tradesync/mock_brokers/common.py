"""
Shared plumbing for the mock broker services.

Each broker service is its own FastAPI app with its own database; they share
the JWT secret with the main service and only differ in their native record
shape.
"""

import logging
from typing import Callable

from fastapi import APIRouter, FastAPI, Request
from sqlalchemy import Table
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from tradesync.core.config import settings
from tradesync.core.database import make_engine
from tradesync.core.errors import register_exception_handlers

logger = logging.getLogger(__name__)


class BrokerBase(DeclarativeBase):
    pass


def get_broker_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def create_broker_app(
    title: str,
    router: APIRouter,
    table: Table,
    database_url: str,
    seed: Callable[[Session], int],
    seed_on_startup: bool = True,
) -> FastAPI:
    """Build one broker service bound to its own database."""
    engine = make_engine(database_url)
    table.create(bind=engine, checkfirst=True)

    app = FastAPI(title=title, version=settings.APP_VERSION)
    app.state.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    register_exception_handlers(app)
    app.include_router(router)

    @app.on_event("startup")
    def _seed():
        if not seed_on_startup:
            return
        db = app.state.session_factory()
        try:
            count = seed(db)
            if count:
                logger.info("%s: seeded %d demo records", title, count)
        except Exception as e:
            db.rollback()
            logger.error("%s: failed to seed demo records: %s", title, e)
        finally:
            db.close()

    return app
