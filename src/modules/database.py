"""Database connection and session management."""

import logging

from sqlalchemy import MetaData
from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
            "pk": "pk_%(table_name)s",
        }
    )


def build_engine(database_url: str, echo: bool = False):
    """Create a synchronous engine.

    In-memory SQLite databases share one connection so every session sees the
    same tables.
    """
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo)


class Database:
    def __init__(self, app=None):
        self.engine = None
        self.session_factory = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Initialize database with Quart app."""
        database_url = app.config.get("DATABASE_URL")
        if not database_url:
            raise ValueError("DATABASE_URL must be configured")

        # Only echo if SQLAlchemy logging is explicitly set to DEBUG/INFO
        sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
        should_echo = sqlalchemy_logger.isEnabledFor(logging.INFO)

        if app.config.get("DEBUG", False):
            app.logger.debug(
                f"Debug mode: SQLAlchemy echo={should_echo} (based on logger level)"
            )

        self.engine = build_engine(database_url, echo=should_echo)
        self.session_factory = sessionmaker(self.engine, expire_on_commit=False)

        app.extensions["database"] = self

    def create_tables(self):
        """Create all tables."""
        # Registers the blob table on Base.metadata
        from src.models import blob  # noqa: F401

        if self.engine is None:
            raise RuntimeError("Database not initialized")
        Base.metadata.create_all(self.engine)

    def close(self):
        """Close database connection."""
        if self.engine:
            self.engine.dispose()
