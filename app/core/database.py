from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from loguru import logger
from sqlalchemy import inspect

from app.core.config import settings
from app.core.base import Base
from app.core.exceptions import CaseTrackerError, ConflictError, UnavailableError

SQLALCHEMY_DATABASE_URL = settings.SQLALCHEMY_DATABASE_URL


def build_engine(url: str):
    """Create an engine for the given URL

    In-memory SQLite gets a single shared connection so that the notification
    worker threads and the request thread see the same database.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def init_db(recreate: bool = False, bind=None):
    """Initialize the database by creating all tables
    
    Args:
        recreate (bool): If True, drop all tables before creating them
        bind: Engine to use, defaults to the application engine
    """
    bind = bind or engine
    try:
        # Import all models here to avoid circular imports
        from app.models.user import User
        from app.models.case import Case
        from app.models.hearing import Hearing
        from app.models.case_party import CaseParty
        from app.models.case_view import CaseView
        from app.models.case_bookmark import CaseBookmark
        from app.models.document import Document
        
        if recreate:
            logger.warning("Dropping all tables before recreating them")
            Base.metadata.drop_all(bind=bind)
        
        Base.metadata.create_all(bind=bind)
        logger.info("Database tables created successfully")
        
        # Check for missing columns and add them
        inspector = inspect(bind)
        for table_name in Base.metadata.tables.keys():
            existing_columns = [col['name'] for col in inspector.get_columns(table_name)]
            table = Base.metadata.tables[table_name]
            
            for column in table.columns:
                if column.name not in existing_columns:
                    logger.info(f"Adding missing column {column.name} to table {table_name}")
                    column_type = column.type.compile(bind.dialect)
                    nullable = "NULL" if column.nullable else "NOT NULL"
                    default = f"DEFAULT {column.default.arg}" if column.default is not None and column.default.is_scalar else ""
                    
                    with bind.connect() as connection:
                        sql = text(f"ALTER TABLE {table_name} ADD COLUMN {column.name} {column_type} {nullable} {default}")
                        connection.execute(sql)
                        connection.commit()
                    
                    logger.info(f"Successfully added column {column.name} to table {table_name}")
        
    except Exception as e:
        logger.error(f"Error initializing database: {str(e)}")
        raise

def get_db():
    """
    Get database session
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        raise
    finally:
        db.close()

@contextmanager
def atomic(db: Session, action: str):
    """Commit everything done in the block as one unit, or nothing at all

    Store failures are translated into the service error types.
    """
    try:
        yield db
        db.commit()
    except CaseTrackerError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Constraint violation while {action}: {str(e.orig)}")
        raise ConflictError(f"Conflict while {action}") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while {action}: {str(e)}")
        logger.exception("Full traceback:")
        raise UnavailableError(f"Store unavailable while {action}") from e

@contextmanager
def store_errors(action: str):
    """Translate store failures on the read path"""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Database error while {action}: {str(e)}")
        raise UnavailableError(f"Store unavailable while {action}") from e
