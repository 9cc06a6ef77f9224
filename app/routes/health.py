import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text

from app.config import settings
from app.database import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


def _configured(value) -> str:
    return "configured" if value else "missing"


@router.get("/check")
def health_check(session: Session = Depends(get_session)):
    try:
        session.exec(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        database = "failed"

    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "integrations": {
            "midtrans": _configured(settings.MIDTRANS_SERVER_KEY),
            "biteship": _configured(settings.BITESHIP_API_KEY and settings.BITESHIP_ORIGIN_AREA_ID),
            "rajaongkir": _configured(settings.RAJAONGKIR_API_KEY),
            "brevo": _configured(settings.BREVO_API_KEY),
        },
        "timestamp": datetime.utcnow().isoformat(),
    }
