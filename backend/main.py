import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure root logger to show INFO for our application modules
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
# Suppress noisy third-party loggers
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

from tradesync.core.config import settings
from tradesync.core.database import engine, Base
from tradesync.core.errors import register_exception_handlers
from tradesync.api import analytics, auth, health, trade_logs

# Import all models so Base.metadata knows about them
from tradesync.models import broker, trade_log, user  # noqa: F401

# Create all tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
)

# CORS: production uses FRONTEND_URL; dev adds localhost origins
_cors_origins = [settings.FRONTEND_URL]
if settings.DEBUG:
    _cors_origins += ["http://localhost:5173", "http://127.0.0.1:5173"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routes
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(trade_logs.router)
app.include_router(analytics.router)


def _seed_brokers():
    """Register the two known brokers if the database has none."""
    from tradesync.core.database import SessionLocal
    from tradesync.models.broker import Broker

    db = SessionLocal()
    try:
        if db.query(Broker).count() > 0:
            return
        db.add_all([
            Broker(name="Broker A", code="brokerA", api_endpoint=settings.BROKER_A_API),
            Broker(name="Broker B", code="brokerB", api_endpoint=settings.BROKER_B_API),
        ])
        db.commit()
        logging.getLogger(__name__).info("Seeded brokers brokerA, brokerB")
    except Exception as e:
        db.rollback()
        logging.getLogger(__name__).error("Failed to seed brokers: %s", e)
    finally:
        db.close()


@app.on_event("startup")
async def startup_event():
    _seed_brokers()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.MAIN_PORT)
