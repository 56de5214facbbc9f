from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from autoclaim.core.config import load_config

engine = create_engine(
    load_config().database_url,
    pool_pre_ping=True,
    pool_recycle=3600,
    pool_size=5,
    max_overflow=10,
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

Base = declarative_base()
