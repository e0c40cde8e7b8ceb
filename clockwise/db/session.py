# clockwise/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from clockwise.core.config import settings

DATABASE_URL = settings.DATABASE_URL

# Hosted Postgres hands out postgres:// URLs, SQLAlchemy wants postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

engine = create_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
