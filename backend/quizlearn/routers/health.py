from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import text

from .. import __version__
from ..db import get_db
from ..settings import settings

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
	try:
		db.execute(text("SELECT 1"))
		database = "connected"
	except SQLAlchemyError:
		database = "disconnected"
	return {
		"success": True,
		"status": "healthy",
		"timestamp": datetime.now(timezone.utc).isoformat(),
		"version": __version__,
		"services": {
			"llm": bool(settings.llm_api_key),
			"auth": settings.jwt_secret_key != "change-me",
			"database": database,
		},
	}
