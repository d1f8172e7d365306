import logging
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from circulation.configs import DB_URI, DEBUG
from circulation.core.exceptions import DatabaseInsertError

logger = logging.getLogger(__name__)


def make_engine(uri=DB_URI, echo=DEBUG):
    engine_kwargs = {'echo': echo}
    if uri.startswith('sqlite'):
        # One shared connection so the threads behind the API see the same memory db
        engine_kwargs['connect_args'] = {'check_same_thread': False}
        if ':memory:' in uri or uri == 'sqlite://':
            engine_kwargs['poolclass'] = StaticPool
    else:
        # Only use client_encoding for PostgreSQL, not SQLite
        engine_kwargs['client_encoding'] = 'utf8'
    return create_engine(uri, **engine_kwargs)


engine = make_engine()
session = scoped_session(sessionmaker(
    bind=engine, autocommit=False, autoflush=False))


Base = declarative_base()


def init(bind=engine):
    try:
        # Register every table before create_all
        from circulation.core import models  # noqa: F401
        Base.metadata.create_all(bind=bind)
        return session
    except Exception as e:
        logger.warning(f"[WARNING] Database initialization failed: {e}")


@contextmanager
def transaction(db):
    """Commit on success; roll back and re-raise on any failure."""
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Transaction failed: {e}")
        raise DatabaseInsertError(f"Failed to save changes: {str(e)}.")
    except Exception:
        db.rollback()
        raise
