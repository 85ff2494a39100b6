from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


DEFAULT_SQLITE_URL = "sqlite:///./registration_console.sqlite3"


def make_engine(db_url: str = DEFAULT_SQLITE_URL):
    if db_url.startswith("sqlite:"):
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, so worker threads see the same database.
            return create_engine(
                db_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(
            db_url, connect_args={"check_same_thread": False}
        )
    return create_engine(db_url, pool_pre_ping=True)


def make_session_factory(engine):
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )
