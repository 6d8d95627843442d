"""
Database Connection and Session Management
Async queries go through `databases`; SQLAlchemy owns the schema
"""

import logging

from databases import Database
from sqlalchemy import create_engine, MetaData
from sqlalchemy.orm import declarative_base
from app.config import settings

logger = logging.getLogger(__name__)

# Database URL
DATABASE_URL = settings.DATABASE_URL

# For Supabase connection pooler (pgbouncer), disable prepared statements
if "supabase.com" in DATABASE_URL or "pooler.supabase.com" in DATABASE_URL:
    db_options = {"min_size": 1, "max_size": 5, "statement_cache_size": 0}
elif DATABASE_URL.startswith("sqlite"):
    db_options = {}
else:
    db_options = {"min_size": 1, "max_size": 10}

# Create database instance for async queries
database = Database(DATABASE_URL, **db_options)

# Create SQLAlchemy engine for schema management and migrations
engine = create_engine(
    DATABASE_URL.replace("postgresql://", "postgresql+psycopg2://")
    if "postgresql://" in DATABASE_URL else DATABASE_URL
)

# Metadata for models
metadata = MetaData()

# Base class for models
Base = declarative_base(metadata=metadata)


def in_clause(prefix: str, values) -> tuple[str, dict]:
    """Build "(:prefix_0, :prefix_1, ...)" with matching named parameters"""
    params = {f"{prefix}_{i}": value for i, value in enumerate(values)}
    placeholders = ", ".join(f":{name}" for name in params)
    return f"({placeholders})", params


def create_tables():
    """Create every table known to the models (tests and local dev)"""
    import app.models  # noqa: F401  registers the tables on the metadata
    Base.metadata.create_all(bind=engine)


def drop_tables():
    import app.models  # noqa: F401
    Base.metadata.drop_all(bind=engine)


async def get_database():
    """Get database connection"""
    return database


async def connect_db():
    """Connect to database on startup"""
    await database.connect()
    logger.info("Database connected")


async def disconnect_db():
    """Disconnect from database on shutdown"""
    await database.disconnect()
    logger.info("Database disconnected")
