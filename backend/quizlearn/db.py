from __future__ import annotations
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from .settings import settings


DATABASE_URL = settings.database_url or "sqlite:///./quizlearn.db"

_engine_kwargs = {}
if DATABASE_URL.startswith("sqlite"):
	_engine_kwargs["connect_args"] = {"check_same_thread": False}
	# In-memory databases vanish per connection unless a single one is shared
	if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
		_engine_kwargs["poolclass"] = StaticPool

engine = create_engine(DATABASE_URL, future=True, **_engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def get_db():
	db = SessionLocal()
	try:
		yield db
	finally:
		db.close()


def init_db() -> None:
	# Import models so they register on Base.metadata
	from . import models  # noqa: F401
	Base.metadata.create_all(bind=engine)
