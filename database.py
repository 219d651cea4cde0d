# database.py
"""
SQLAlchemy async database connection and session management.

This module provides:
- Async engine configuration (SQLite via aiosqlite by default, any
  SQLAlchemy async driver through DATABASE_URL)
- Session factory for dependency injection
- The soft-delete filter applied to every ORM SELECT
- Connection utilities

Usage:
     from database import get_session

     # In FastAPI routes:
     @router.get("/items")
     async def get_items(db: AsyncSession = Depends(get_session)):
          return (await db.execute(select(Item))).scalars().all()
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
     AsyncEngine,
     AsyncSession,
     async_sessionmaker,
     create_async_engine,
)
from sqlalchemy.orm import ORMExecuteState, Session, with_loader_criteria

from models.base import SoftDeleteMixin

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./school_finance.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"


def _configure_sqlite(engine: AsyncEngine) -> None:
     """
     Take over transaction control from the sqlite3 driver.

     Write transactions start with BEGIN IMMEDIATE so concurrent writers
     queue on the database lock instead of failing with a lock upgrade
     deadlock; foreign keys are enforced per connection.
     """

     @event.listens_for(engine.sync_engine, "connect")
     def _on_connect(dbapi_connection, connection_record):
          dbapi_connection.isolation_level = None
          cursor = dbapi_connection.cursor()
          cursor.execute("PRAGMA foreign_keys=ON")
          cursor.close()

     @event.listens_for(engine.sync_engine, "begin")
     def _on_begin(conn):
          conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str = DATABASE_URL, echo: bool = SQL_ECHO) -> AsyncEngine:
     """Create an async engine; pool sizing only applies to server databases."""
     if url.startswith("sqlite"):
          engine = create_async_engine(url, echo=echo)
          _configure_sqlite(engine)
          return engine

     return create_async_engine(
          url,
          pool_size=5,
          max_overflow=10,
          pool_timeout=30,
          pool_recycle=1800,  # Recycle connections after 30 minutes
          pool_pre_ping=True,
          echo=echo,
     )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
     return async_sessionmaker(
          bind=bind,
          autoflush=False,
          expire_on_commit=False,
     )


engine = build_engine()
SessionLocal = build_session_factory(engine)


@event.listens_for(Session, "do_orm_execute")
def _exclude_soft_deleted(execute_state: ORMExecuteState) -> None:
     """
     Hide soft-deleted rows from every ORM SELECT, including joins and
     relationship loads. Pass execution_options(include_deleted=True) to
     opt out.
     """
     if (
          execute_state.is_select
          and not execute_state.is_column_load
          and not execute_state.execution_options.get("include_deleted", False)
     ):
          execute_state.statement = execute_state.statement.options(
               with_loader_criteria(
                    SoftDeleteMixin,
                    lambda cls: cls.deleted_at.is_(None),
                    include_aliases=True,
               )
          )


async def get_session() -> AsyncGenerator[AsyncSession, None]:
     """
     FastAPI dependency that provides a database session.

     Services commit their own units of work; anything left pending when the
     request fails is rolled back here.

     Yields:
          AsyncSession: SQLAlchemy database session
     """
     async with SessionLocal() as session:
          try:
               yield session
               await session.commit()
          except Exception:
               await session.rollback()
               raise


@asynccontextmanager
async def get_session_context() -> AsyncGenerator[AsyncSession, None]:
     """
     Context manager for database sessions (for use outside FastAPI routes).

     Usage:
          async with get_session_context() as db:
               await InvoiceService(db).mark_overdue_invoices(caller)
     """
     async with SessionLocal() as session:
          try:
               yield session
               await session.commit()
          except Exception:
               await session.rollback()
               raise


async def init_db(bind: AsyncEngine = engine) -> None:
     """
     Create all tables defined in the models if they don't exist.
     For production, use Alembic migrations instead.
     """
     from models import Base

     async with bind.begin() as conn:
          await conn.run_sync(Base.metadata.create_all)


async def check_connection(bind: AsyncEngine = engine) -> bool:
     """
     Test database connectivity.

     Returns:
          bool: True if connection successful, False otherwise
     """
     try:
          async with bind.connect() as conn:
               await conn.execute(text("SELECT 1"))
          return True
     except Exception:
          logger.exception("Database connection failed")
          return False
