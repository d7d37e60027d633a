from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tradesync.core.config import settings
from tradesync.core.database import get_db
from tradesync.models.broker import Broker

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
def service_health(db: Session = Depends(get_db)):
    """Liveness plus the brokers this deployment syncs from."""
    brokers = db.query(Broker).filter(Broker.active.is_(True)).order_by(Broker.code).all()
    return {
        "status": "ok",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "brokers": [{"code": b.code, "endpoint": b.api_endpoint} for b in brokers],
    }
