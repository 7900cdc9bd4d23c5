"""Database configuration and initialization."""
from contextlib import contextmanager
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base

logger = logging.getLogger(__name__)

# Create SQLAlchemy base
Base = declarative_base()

# Global engine, session factory and thread-local request session
engine = None
SessionLocal = None
db_session = None


def _is_sqlite(database_uri: str) -> bool:
    return database_uri.startswith('sqlite')


def configure_engine(database_uri: str, echo: bool = False, pool_size: int = 10,
                     max_overflow: int = 20, sqlite_busy_timeout: float = 30.0):
    """
    Create the engine and session factories for ``database_uri``.

    SQLite connections get foreign keys switched on and a busy timeout so
    concurrent writers wait for the write lock instead of failing.
    """
    global engine, SessionLocal, db_session

    if db_session is not None:
        db_session.remove()
    if engine is not None:
        engine.dispose()

    if _is_sqlite(database_uri):
        engine = create_engine(
            database_uri,
            echo=echo,
            connect_args={'timeout': sqlite_busy_timeout},
        )

        @event.listens_for(engine, 'checkin')
        def _restore_busy_timeout(dbapi_connection, connection_record):
            """Purchases may shorten the lock wait; pooled connections get it back."""
            if dbapi_connection is not None:
                dbapi_connection.execute(f'PRAGMA busy_timeout = {int(sqlite_busy_timeout * 1000)}')
    else:
        engine = create_engine(
            database_uri,
            echo=echo,
            pool_pre_ping=True,  # Enable connection health checks
            pool_size=pool_size,
            max_overflow=max_overflow
        )

    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db_session = scoped_session(SessionLocal)
    Base.query = db_session.query_property()

    logger.debug(f"Database engine configured for dialect '{engine.dialect.name}'")
    return engine


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores FOREIGN KEY clauses unless asked per connection."""
    if type(dbapi_connection).__module__.startswith('sqlite3'):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


def init_db(app):
    """Initialize database connection."""
    configure_engine(
        app.config['SQLALCHEMY_DATABASE_URI'],
        echo=app.config.get('SQLALCHEMY_ECHO', False),
        pool_size=app.config.get('DB_POOL_SIZE', 10),
        max_overflow=app.config.get('DB_MAX_OVERFLOW', 20),
        sqlite_busy_timeout=app.config.get('SQLITE_BUSY_TIMEOUT', 30.0),
    )

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def create_all():
    """Create every table registered on ``Base``."""
    import canteen.models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def drop_all():
    import canteen.models  # noqa: F401
    Base.metadata.drop_all(bind=engine)


def get_session():
    """Get the thread-local database session."""
    return db_session


@contextmanager
def session_scope():
    """
    Provide a fresh session for one unit of work.

    Rolls back whatever is still pending when the block raises and always
    closes the session, returning its connection to the pool.
    """
    session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
